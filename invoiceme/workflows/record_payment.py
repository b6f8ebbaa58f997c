"""
Workflow di registrazione pagamento
Progetto: InvoiceMe (client fatturazione)

IDLE -> FORM_OPEN -> SUBMITTING -> IDLE

Il form parte con importo pari al saldo residuo, data odierna e bonifico.
Un importo superiore al saldo viene rifiutato prima dell'invio; il server
rimane comunque autorevole.
"""

import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from invoiceme.core.exceptions import BusinessValidationError
from invoiceme.core.formatting import format_currency
from invoiceme.schemas.base import validate_form
from invoiceme.schemas.invoice import InvoiceRead
from invoiceme.schemas.payment import PaymentCreate, PaymentMethod
from invoiceme.workflows.actions import InvoiceAction, ensure_action_permitted
from invoiceme.workflows.base import Notice, WorkflowBase

logger = logging.getLogger(__name__)


class PaymentFormState(str, Enum):
    IDLE = "IDLE"
    FORM_OPEN = "FORM_OPEN"
    SUBMITTING = "SUBMITTING"


def payment_form_defaults(invoice: InvoiceRead, today: Optional[date] = None) -> dict[str, Any]:
    """Valori iniziali del form di pagamento."""
    return {
        "invoice_id": invoice.id,
        "payment_amount": invoice.balance_remaining,
        "payment_date": today or date.today(),
        "payment_method": PaymentMethod.BANK_TRANSFER,
        "transaction_reference": None,
        "notes": None,
    }


def build_payment(
    invoice: InvoiceRead,
    form: dict[str, Any],
    currency: str = "USD",
) -> PaymentCreate:
    """
    Valida il form e applica il tetto del saldo residuo.

    Raises:
        BusinessValidationError: Dati non validi o importo oltre il saldo
    """
    payment = validate_form(PaymentCreate, form)
    if payment.payment_amount > invoice.balance_remaining:
        raise BusinessValidationError(
            "L'importo non può superare il saldo residuo di "
            f"{format_currency(invoice.balance_remaining, currency)}",
            extra={
                "payment_amount": str(payment.payment_amount),
                "balance_remaining": str(invoice.balance_remaining),
            },
        )
    return payment


class RecordPaymentWorkflow(WorkflowBase):
    """Registrazione di un pagamento con storico dettagliato."""

    idle_state = PaymentFormState.IDLE

    def __init__(self, host) -> None:
        super().__init__(host)
        self.form: dict[str, Any] = {}

    def open_form(self, today: Optional[date] = None) -> dict[str, Any]:
        """Apre il form precompilato e ne restituisce i valori."""
        ensure_action_permitted(self.invoice, InvoiceAction.RECORD_PAYMENT)
        self._open(PaymentFormState.FORM_OPEN)
        self.form = payment_form_defaults(self.invoice, today)
        return dict(self.form)

    def close(self) -> None:
        super().close()
        self.form = {}

    async def submit(self, **changes: Any) -> bool:
        """
        Invia il pagamento con i valori del form (più eventuali modifiche).

        Raises:
            BusinessValidationError: Se il form non è valido (resta FORM_OPEN)
        """
        self._require_state(PaymentFormState.FORM_OPEN)
        self.form.update(changes)
        # Il tetto usa il saldo al momento dell'invio
        payment = build_payment(self.invoice, self.form, self.host.settings.currency)

        ok, recorded = await self._run(
            PaymentFormState.SUBMITTING,
            PaymentFormState.FORM_OPEN,
            lambda: self.host.payments.record(self.host.gateway, payment),
            "Registrazione pagamento non riuscita",
        )
        if not ok:
            return False

        self.form = {}
        amount = format_currency(recorded.payment_amount, self.host.settings.currency)
        await self._finish(
            None,
            Notice.success(
                "Pagamento registrato",
                f"Registrato un pagamento di {amount} sulla fattura #{self.invoice.invoice_number}.",
            ),
        )
        return True
