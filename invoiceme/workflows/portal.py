"""
Portale pubblico di pagamento
Progetto: InvoiceMe (client fatturazione)

Il cliente apre il link di pagamento senza autenticarsi: lettura della
fattura e registrazione del pagamento sono chiamate non autenticate.
"""

import logging
from datetime import date
from enum import Enum
from typing import Any, Optional

from invoiceme.core.deps import AppContext
from invoiceme.core.exceptions import AppException, ConflictError
from invoiceme.schemas.invoice import InvoiceRead
from invoiceme.schemas.payment import PaymentRead
from invoiceme.services.invoice_service import InvoiceService
from invoiceme.services.payment_service import PaymentService
from invoiceme.workflows.actions import InvoiceAction, is_action_permitted
from invoiceme.workflows.base import Notice
from invoiceme.workflows.record_payment import build_payment, payment_form_defaults

logger = logging.getLogger(__name__)


class PortalState(str, Enum):
    LOADING = "LOADING"
    READY = "READY"
    INVALID_LINK = "INVALID_LINK"
    SUBMITTING = "SUBMITTING"
    PAID = "PAID"


class PaymentPortalController:
    """Pagina di pagamento raggiunta dal link pubblico."""

    def __init__(
        self,
        ctx: AppContext,
        link: str,
        invoices: Optional[InvoiceService] = None,
        payments: Optional[PaymentService] = None,
    ) -> None:
        self.ctx = ctx
        self.link = link
        self.invoices = invoices or InvoiceService()
        self.payments = payments or PaymentService()
        self.state = PortalState.LOADING
        self.invoice: Optional[InvoiceRead] = None
        self.form: dict[str, Any] = {}
        self.payment: Optional[PaymentRead] = None
        self.notice: Optional[Notice] = None

    @property
    def can_pay(self) -> bool:
        """Il form è disponibile solo per fatture SENT con saldo positivo."""
        return self.invoice is not None and is_action_permitted(
            self.invoice, InvoiceAction.RECORD_PAYMENT
        )

    async def load(self, today: Optional[date] = None) -> bool:
        """Recupera la fattura dal link; un link non valido porta a INVALID_LINK."""
        self.state = PortalState.LOADING
        try:
            invoice = await self.invoices.get_by_payment_link(self.ctx.gateway, self.link)
        except AppException as exc:
            logger.error("Link di pagamento %s non valido: %s", self.link, exc.detail)
            self.state = PortalState.INVALID_LINK
            self.notice = Notice.error("Link non valido", "Link di pagamento non valido o scaduto.")
            return False

        self.invoice = invoice
        self.form = payment_form_defaults(invoice, today)
        self.state = PortalState.READY
        return True

    async def submit(self, **changes: Any) -> bool:
        """
        Registra il pagamento del cliente.

        Raises:
            ConflictError: Se il portale non è pronto o la fattura non è pagabile
            BusinessValidationError: Form non valido o importo oltre il saldo
        """
        if self.state != PortalState.READY or self.invoice is None:
            raise ConflictError("Il portale non è pronto per un pagamento")
        if not self.can_pay:
            raise ConflictError(
                f"La fattura {self.invoice.invoice_number} non accetta pagamenti"
            )

        self.form.update(changes)
        payment = build_payment(self.invoice, self.form, self.ctx.settings.currency)

        self.state = PortalState.SUBMITTING
        try:
            self.payment = await self.payments.record_public(self.ctx.gateway, payment)
        except AppException as exc:
            logger.error("Pagamento pubblico fallito per %s: %s", self.link, exc.detail)
            self.state = PortalState.READY
            self.notice = Notice.error(
                "Pagamento non riuscito",
                "Registrazione del pagamento non riuscita. Riprova o contatta l'assistenza.",
                exc.detail,
            )
            return False

        self.state = PortalState.PAID
        self.notice = Notice.success(
            "Pagamento ricevuto",
            f"Grazie! Il pagamento per la fattura #{self.invoice.invoice_number} è stato registrato.",
        )
        return True
