"""
Workflow "segna come pagata"
Progetto: InvoiceMe (client fatturazione)

IDLE -> CONFIRM_OPEN -> CONFIRMING -> IDLE
"""

import logging
from enum import Enum

from invoiceme.core.formatting import format_currency
from invoiceme.workflows.actions import InvoiceAction, ensure_action_permitted
from invoiceme.workflows.base import Notice, WorkflowBase

logger = logging.getLogger(__name__)

MARK_AS_PAID_WARNING = (
    "Questa operazione imposta l'importo pagato uguale al totale e il saldo "
    "residuo a zero, senza registrare metodo né riferimento del pagamento. "
    "Non può essere annullata. Per pagamenti parziali o per conservare lo "
    "storico dei pagamenti usa \"Registra pagamento\"."
)


class MarkPaidState(str, Enum):
    IDLE = "IDLE"
    CONFIRM_OPEN = "CONFIRM_OPEN"
    CONFIRMING = "CONFIRMING"


class MarkAsPaidWorkflow(WorkflowBase):
    """Saldo immediato della fattura, distinto dalla registrazione pagamento."""

    idle_state = MarkPaidState.IDLE
    warning = MARK_AS_PAID_WARNING

    def open_confirm(self) -> None:
        ensure_action_permitted(self.invoice, InvoiceAction.MARK_PAID)
        self._open(MarkPaidState.CONFIRM_OPEN)

    async def confirm(self) -> bool:
        self._require_state(MarkPaidState.CONFIRM_OPEN)
        invoice_id = self.invoice.id
        ok, updated = await self._run(
            MarkPaidState.CONFIRMING,
            MarkPaidState.CONFIRM_OPEN,
            lambda: self.host.invoices.mark_as_paid(self.host.gateway, invoice_id),
            "Operazione non riuscita",
        )
        if not ok:
            return False

        await self._finish(
            updated,
            Notice.success(
                "Fattura segnata come pagata",
                f"La fattura #{updated.invoice_number} risulta ora pagata.",
                f"Lo stato è {updated.status.value} e il saldo residuo è "
                f"{format_currency(updated.balance_remaining, self.host.settings.currency)}.",
            ),
        )
        return True
