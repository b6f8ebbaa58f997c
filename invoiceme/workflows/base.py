"""
Base comune dei workflow sulle fatture
Progetto: InvoiceMe (client fatturazione)

Ogni workflow è una piccola macchina a stati con:
- guardia `is_processing`: una seconda conferma durante una chiamata
  in corso viene rifiutata
- token di generazione: una risposta che arriva dopo la chiusura della
  finestra viene ignorata
- nessun retry automatico; un errore riporta allo stato precedente
  e viene mostrato come `notice`
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from invoiceme.core.exceptions import (
    AppException,
    ConflictError,
    SessionExpiredError,
)
from invoiceme.schemas.invoice import InvoiceRead

if TYPE_CHECKING:
    from invoiceme.workflows.detail import InvoiceDetailController

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Notice:
    """Messaggio mostrato all'utente al termine di un'azione."""

    level: NoticeLevel
    title: str
    message: str
    details: str = ""

    @classmethod
    def success(cls, title: str, message: str, details: str = "") -> "Notice":
        return cls(NoticeLevel.SUCCESS, title, message, details)

    @classmethod
    def error(cls, title: str, message: str, details: str = "") -> "Notice":
        return cls(NoticeLevel.ERROR, title, message, details)

    @classmethod
    def warning(cls, title: str, message: str, details: str = "") -> "Notice":
        return cls(NoticeLevel.WARNING, title, message, details)


REFRESH_WARNING_TITLE = "Dati non aggiornati"
REFRESH_WARNING_MESSAGE = (
    "L'operazione è stata eseguita, ma non è stato possibile ricaricare "
    "pagamenti e solleciti."
)


class WorkflowBase:
    """
    Base dei workflow legati al dettaglio di una fattura.

    Le sottoclassi definiscono la propria enum di stati e usano `_run`
    per la chiamata che modifica i dati.
    """

    #: Stato di riposo della sottoclasse
    idle_state: Enum

    def __init__(self, host: "InvoiceDetailController") -> None:
        self.host = host
        self.state = self.idle_state
        self.is_processing = False
        self.notice: Optional[Notice] = None
        self._generation = 0

    @property
    def invoice(self) -> InvoiceRead:
        """Ultima istantanea della fattura."""
        if self.host.invoice is None:
            raise ConflictError("Fattura non ancora caricata")
        return self.host.invoice

    @property
    def is_open(self) -> bool:
        return self.state != self.idle_state

    def close(self) -> None:
        """Chiude la finestra; una risposta ancora in arrivo sarà ignorata."""
        self._generation += 1
        self.state = self.idle_state

    def _open(self, state: Enum) -> None:
        if self.is_processing:
            raise ConflictError("Operazione già in corso")
        self._generation += 1
        self.notice = None
        self.state = state

    def _require_state(self, *states: Enum) -> None:
        if self.state not in states:
            raise ConflictError(
                f"Azione non disponibile nello stato {self.state.value}",
                extra={"state": self.state.value},
            )

    async def _run(
        self,
        busy_state: Enum,
        restore_state: Enum,
        call: Callable[[], Awaitable[Any]],
        failure_title: str,
    ) -> tuple[bool, Any]:
        """
        Esegue la chiamata che modifica i dati.

        Args:
            busy_state: Stato durante la chiamata
            restore_state: Stato in cui tornare se la chiamata fallisce
            call: Coroutine factory della chiamata al server
            failure_title: Titolo del notice di errore

        Returns:
            (True, risultato) se la chiamata è riuscita e la risposta va
            applicata; (False, None) per errore o risposta tardiva
        """
        if self.is_processing:
            raise ConflictError("Operazione già in corso")

        token = self._generation
        self.is_processing = True
        self.state = busy_state
        try:
            result = await call()
        except SessionExpiredError:
            # Il gateway ha già portato l'utente al login
            self.state = self.idle_state
            raise
        except AppException as exc:
            if token != self._generation:
                logger.info("Errore tardivo ignorato (%s): %s", type(self).__name__, exc.detail)
                return False, None
            logger.error("%s fallito: %s", type(self).__name__, exc.detail)
            self.state = restore_state
            self.notice = Notice.error(failure_title, exc.detail)
            return False, None
        finally:
            self.is_processing = False

        if token != self._generation:
            logger.info("Risposta tardiva ignorata (%s): finestra già chiusa", type(self).__name__)
            return False, None
        return True, result

    async def _finish(self, updated: Optional[InvoiceRead], notice: Notice) -> None:
        """
        Applica il risultato di un'azione riuscita.

        La fattura viene sostituita solo con la rappresentazione del server;
        poi vengono ricaricati i dati dipendenti. Se il ricaricamento fallisce
        l'azione resta comunque valida e il notice diventa un avviso.
        """
        self.state = self.idle_state
        if updated is not None:
            self.host.apply_invoice(updated)
        try:
            await self.host.refresh()
        except SessionExpiredError:
            raise
        except AppException as exc:
            logger.error("Ricaricamento dopo %s fallito: %s", type(self).__name__, exc.detail)
            self.notice = Notice.warning(
                REFRESH_WARNING_TITLE,
                REFRESH_WARNING_MESSAGE,
                f"{notice.title}: {notice.message}",
            )
            return
        self.notice = notice
