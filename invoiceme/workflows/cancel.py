"""
Workflow di annullamento fattura
Progetto: InvoiceMe (client fatturazione)

IDLE -> REASON_CAPTURE -> EMAIL_PREVIEW -> CANCELLING -> IDLE   (fattura SENT)
IDLE -> REASON_CAPTURE -> CANCELLING -> IDLE                    (fattura DRAFT)

Una fattura mai inviata non genera email di annullamento, quindi
l'anteprima viene saltata.
"""

import logging
from enum import Enum
from typing import Optional

from invoiceme.core.exceptions import BusinessValidationError
from invoiceme.schemas.invoice import InvoiceStatus
from invoiceme.workflows.actions import InvoiceAction, ensure_action_permitted
from invoiceme.workflows.base import Notice, WorkflowBase

logger = logging.getLogger(__name__)

OTHER_REASON = "other"

# Codice motivo -> etichetta inviata al server
CANCELLATION_REASONS: dict[str, str] = {
    "customer_request": "Customer Request",
    "billing_error": "Billing Error",
    "duplicate_invoice": "Duplicate Invoice",
    "service_not_provided": "Service Not Provided",
    "pricing_error": "Pricing Error",
    OTHER_REASON: "Other",
}


class CancelState(str, Enum):
    IDLE = "IDLE"
    REASON_CAPTURE = "REASON_CAPTURE"
    EMAIL_PREVIEW = "EMAIL_PREVIEW"
    CANCELLING = "CANCELLING"


def resolve_cancellation_reason(code: Optional[str], details: Optional[str] = None) -> str:
    """
    Converte codice motivo e testo libero nel motivo da inviare.

    Raises:
        BusinessValidationError: Motivo mancante o sconosciuto, oppure
            codice "other" senza testo libero
    """
    if not code:
        raise BusinessValidationError("Seleziona un motivo di annullamento")
    if code not in CANCELLATION_REASONS:
        raise BusinessValidationError(
            f"Motivo di annullamento sconosciuto: {code}",
            extra={"allowed": list(CANCELLATION_REASONS)},
        )
    if code == OTHER_REASON:
        text = (details or "").strip()
        if not text:
            raise BusinessValidationError("Specifica il motivo dell'annullamento")
        return text
    return CANCELLATION_REASONS[code]


class CancelInvoiceWorkflow(WorkflowBase):
    """Raccolta del motivo, anteprima (solo SENT) e annullamento."""

    idle_state = CancelState.IDLE

    def __init__(self, host) -> None:
        super().__init__(host)
        self.reason: Optional[str] = None
        self._was_sent = False

    @property
    def requires_email_preview(self) -> bool:
        """Solo le fatture già inviate richiedono l'email di annullamento."""
        return self.invoice.status == InvoiceStatus.SENT

    def start(self) -> None:
        """Apre la raccolta del motivo."""
        ensure_action_permitted(self.invoice, InvoiceAction.CANCEL)
        self._open(CancelState.REASON_CAPTURE)
        self.reason = None

    def close(self) -> None:
        super().close()
        self.reason = None

    async def submit_reason(self, code: Optional[str], details: Optional[str] = None) -> bool:
        """
        Registra il motivo e prosegue.

        Per una fattura SENT apre l'anteprima dell'email; per una DRAFT
        annulla subito con il motivo appena inserito.

        Returns:
            True se il passo è riuscito (anteprima aperta o fattura annullata)

        Raises:
            BusinessValidationError: Se il motivo non è valido (resta in REASON_CAPTURE)
        """
        self._require_state(CancelState.REASON_CAPTURE)
        reason = resolve_cancellation_reason(code, details)
        self.reason = reason

        if self.requires_email_preview:
            self.state = CancelState.EMAIL_PREVIEW
            return True
        return await self._cancel(reason, restore_state=CancelState.REASON_CAPTURE)

    def back_to_reason(self) -> None:
        """Dall'anteprima torna alla scelta del motivo."""
        self._require_state(CancelState.EMAIL_PREVIEW)
        self.state = CancelState.REASON_CAPTURE

    async def confirm(self) -> bool:
        """Conferma l'annullamento dall'anteprima dell'email."""
        self._require_state(CancelState.EMAIL_PREVIEW)
        return await self._cancel(self.reason or "", restore_state=CancelState.EMAIL_PREVIEW)

    async def _cancel(self, reason: str, restore_state: CancelState) -> bool:
        invoice_id = self.invoice.id
        self._was_sent = self.invoice.status == InvoiceStatus.SENT
        ok, updated = await self._run(
            CancelState.CANCELLING,
            restore_state,
            lambda: self.host.invoices.cancel(self.host.gateway, invoice_id, reason),
            "Annullamento non riuscito",
        )
        if not ok:
            return False

        if self._was_sent and updated.status == InvoiceStatus.CANCELLED:
            details = (
                f"È stata inviata una notifica di annullamento a {updated.recipient}: "
                "la fattura non è più pagabile."
            )
        else:
            details = "Lo stato della fattura è ora CANCELLED."
        self.reason = None
        # Annullamento e ricaricamento sono due chiamate distinte:
        # se la seconda fallisce l'annullamento resta valido
        await self._finish(
            updated,
            Notice.success(
                "Fattura annullata",
                f"La fattura #{updated.invoice_number} è stata annullata.",
                details,
            ),
        )
        return True
