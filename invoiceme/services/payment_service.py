"""
Service Layer per i Pagamenti
Progetto: InvoiceMe (client fatturazione)
"""

import logging
import uuid
from typing import Union

from invoiceme.core.gateway import RestGateway
from invoiceme.schemas.base import parse_response, parse_response_list
from invoiceme.schemas.payment import PaymentCreate, PaymentRead

# Logger per questo modulo
logger = logging.getLogger(__name__)

PaymentId = Union[uuid.UUID, str]


class PaymentService:
    """Service per la registrazione e la consultazione dei pagamenti."""

    async def get_all(self, gateway: RestGateway) -> list[PaymentRead]:
        data = await gateway.get("/payments")
        payments = parse_response_list(PaymentRead, data)
        logger.info("Recuperati %s pagamenti", len(payments))
        return payments

    async def get_by_id(self, gateway: RestGateway, payment_id: PaymentId) -> PaymentRead:
        return parse_response(PaymentRead, await gateway.get(f"/payments/{payment_id}"))

    async def record(self, gateway: RestGateway, data: PaymentCreate) -> PaymentRead:
        """
        Registra un pagamento su una fattura.

        Il server ricalcola importo pagato e saldo della fattura: il
        chiamante deve ricaricarla per vedere i nuovi valori.
        """
        payment = parse_response(
            PaymentRead, await gateway.post("/payments", data.to_payload())
        )
        logger.info(
            "Registrato pagamento %s di %s sulla fattura %s",
            payment.id, payment.payment_amount, payment.invoice_id,
        )
        return payment

    async def record_public(self, gateway: RestGateway, data: PaymentCreate) -> PaymentRead:
        """Pagamento dal portale pubblico (chiamata non autenticata)."""
        payment = parse_response(
            PaymentRead, await gateway.post("/payments", data.to_payload(), authenticated=False)
        )
        logger.info("Pagamento pubblico %s sulla fattura %s", payment.id, payment.invoice_id)
        return payment

    async def get_by_invoice(self, gateway: RestGateway, invoice_id: PaymentId) -> list[PaymentRead]:
        data = await gateway.get(f"/payments/invoice/{invoice_id}")
        return parse_response_list(PaymentRead, data)

    async def delete(self, gateway: RestGateway, payment_id: PaymentId) -> None:
        await gateway.delete(f"/payments/{payment_id}")
        logger.info("Eliminato pagamento %s", payment_id)


payment_service = PaymentService()
