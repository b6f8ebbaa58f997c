"""
Workflow di invio fattura
Progetto: InvoiceMe (client fatturazione)

IDLE -> PREVIEW_OPEN -> SENDING -> IDLE (fattura aggiornata)
                                 -> PREVIEW_OPEN (errore)
"""

import logging
from enum import Enum

from invoiceme.workflows.actions import InvoiceAction, ensure_action_permitted
from invoiceme.workflows.base import Notice, WorkflowBase

logger = logging.getLogger(__name__)


class SendState(str, Enum):
    IDLE = "IDLE"
    PREVIEW_OPEN = "PREVIEW_OPEN"
    SENDING = "SENDING"


class SendInvoiceWorkflow(WorkflowBase):
    """Anteprima dell'email e invio della fattura al cliente."""

    idle_state = SendState.IDLE

    def open_preview(self) -> None:
        """Apre l'anteprima dell'email (solo fatture DRAFT)."""
        ensure_action_permitted(self.invoice, InvoiceAction.SEND)
        self._open(SendState.PREVIEW_OPEN)

    def edit_from_preview(self) -> str:
        """Abbandona l'anteprima e passa alla modifica della fattura."""
        self._require_state(SendState.PREVIEW_OPEN)
        self.close()
        path = f"{self.host.settings.invoices_path}/{self.invoice.id}/edit"
        self.host.navigator.push(path)
        return path

    async def confirm(self) -> bool:
        """
        Conferma l'invio.

        Returns:
            True se la fattura è stata inviata
        """
        self._require_state(SendState.PREVIEW_OPEN)
        invoice_id = self.invoice.id
        ok, updated = await self._run(
            SendState.SENDING,
            SendState.PREVIEW_OPEN,
            lambda: self.host.invoices.send(self.host.gateway, invoice_id),
            "Invio non riuscito",
        )
        if not ok:
            return False

        await self._finish(
            updated,
            Notice.success(
                "Fattura inviata",
                f"La fattura #{updated.invoice_number} è stata inviata a {updated.customer_name}.",
                f"L'email è stata recapitata a {updated.recipient}: il cliente può "
                "ora consultare e pagare la fattura online.",
            ),
        )
        return True
