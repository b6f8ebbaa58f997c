"""
Workflow di invio sollecito
Progetto: InvoiceMe (client fatturazione)

IDLE -> PREVIEW_OPEN -> SENDING -> IDLE

Il tipo di sollecito è esplicito oppure scelto dai giorni di ritardo
con `select_reminder_type`; dal dettaglio fattura il default è ON_DUE_DATE.
"""

import logging
from enum import Enum
from typing import Optional

from invoiceme.core.exceptions import AppException, SessionExpiredError
from invoiceme.schemas.reminder import ReminderPreview, ReminderType
from invoiceme.workflows.actions import InvoiceAction, ensure_action_permitted
from invoiceme.workflows.base import Notice, WorkflowBase

logger = logging.getLogger(__name__)

# Fasce di ritardo, dalla più alta: vince la prima superata
REMINDER_TYPE_BANDS: tuple[tuple[int, ReminderType], ...] = (
    (30, ReminderType.OVERDUE_30_DAYS),
    (14, ReminderType.OVERDUE_14_DAYS),
    (7, ReminderType.OVERDUE_7_DAYS),
)

DEFAULT_REMINDER_TYPE = ReminderType.ON_DUE_DATE


def select_reminder_type(days_overdue: int) -> ReminderType:
    """Tipo di sollecito in base ai giorni di ritardo."""
    for threshold, reminder_type in REMINDER_TYPE_BANDS:
        if days_overdue >= threshold:
            return reminder_type
    return DEFAULT_REMINDER_TYPE


class ReminderState(str, Enum):
    IDLE = "IDLE"
    PREVIEW_OPEN = "PREVIEW_OPEN"
    SENDING = "SENDING"


class SendReminderWorkflow(WorkflowBase):
    """Anteprima generata dal server e invio del sollecito."""

    idle_state = ReminderState.IDLE

    def __init__(self, host) -> None:
        super().__init__(host)
        self.reminder_type: ReminderType = DEFAULT_REMINDER_TYPE
        self.preview: Optional[ReminderPreview] = None

    async def open_preview(
        self,
        reminder_type: Optional[ReminderType] = None,
        days_overdue: Optional[int] = None,
    ) -> bool:
        """
        Sceglie il tipo di sollecito e carica l'anteprima.

        Args:
            reminder_type: Tipo esplicito (ha la precedenza)
            days_overdue: Giorni di ritardo per la scelta automatica

        Returns:
            True se l'anteprima è aperta; False se il caricamento è fallito
        """
        ensure_action_permitted(self.invoice, InvoiceAction.SEND_REMINDER)
        if reminder_type is None:
            reminder_type = (
                select_reminder_type(days_overdue)
                if days_overdue is not None
                else DEFAULT_REMINDER_TYPE
            )

        self._open(ReminderState.IDLE)
        token = self._generation
        self.reminder_type = reminder_type
        self.preview = None

        self.is_processing = True
        try:
            preview = await self.host.reminders.preview(
                self.host.gateway, self.invoice.id, reminder_type
            )
        except SessionExpiredError:
            raise
        except AppException as exc:
            logger.error("Anteprima sollecito fallita: %s", exc.detail)
            self.notice = Notice.error("Anteprima non disponibile", exc.detail)
            return False
        finally:
            self.is_processing = False

        if token != self._generation:
            return False
        self.preview = preview
        self.state = ReminderState.PREVIEW_OPEN
        return True

    def close(self) -> None:
        super().close()
        self.preview = None

    def edit_from_preview(self) -> str:
        """Abbandona l'anteprima e passa alla modifica della fattura."""
        self._require_state(ReminderState.PREVIEW_OPEN)
        self.close()
        path = f"{self.host.settings.invoices_path}/{self.invoice.id}/edit"
        self.host.navigator.push(path)
        return path

    async def confirm(self) -> bool:
        """Invia il sollecito mostrato in anteprima."""
        self._require_state(ReminderState.PREVIEW_OPEN)
        invoice = self.invoice
        reminder_type = self.reminder_type
        ok, _entry = await self._run(
            ReminderState.SENDING,
            ReminderState.PREVIEW_OPEN,
            lambda: self.host.reminders.send(self.host.gateway, invoice.id, reminder_type),
            "Invio sollecito non riuscito",
        )
        if not ok:
            return False

        self.preview = None
        await self._finish(
            None,
            Notice.success(
                "Sollecito inviato",
                f"Il sollecito di pagamento è stato inviato a {invoice.customer_name}.",
                f"L'email è stata recapitata a {invoice.recipient}.",
            ),
        )
        return True
