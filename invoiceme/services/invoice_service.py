"""
Service Layer per le Fatture
Progetto: InvoiceMe (client fatturazione)

Facciata tipizzata sugli endpoint `/invoices`. Le azioni di ciclo di vita
(send, mark-paid, cancel) restituiscono la nuova rappresentazione della
fattura calcolata dal server: il client non la modifica mai da sé.
"""

import logging
import uuid
from typing import Iterable, Optional, Union

from invoiceme.core.gateway import RestGateway
from invoiceme.schemas.base import parse_response, parse_response_list
from invoiceme.schemas.invoice import (
    CancelInvoiceRequest,
    InvoiceCreate,
    InvoiceFilters,
    InvoiceRead,
    InvoiceStatus,
    InvoiceUpdate,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)

InvoiceId = Union[uuid.UUID, str]


def filter_by_status(
    invoices: Iterable[InvoiceRead],
    status: Optional[InvoiceStatus],
) -> list[InvoiceRead]:
    """Filtra per stato; None restituisce tutte le fatture."""
    if status is None:
        return list(invoices)
    return [invoice for invoice in invoices if invoice.status == status]


class InvoiceService:
    """
    Service per le fatture e il loro ciclo di vita.

    Stati gestiti dal server:
    - DRAFT: modificabile, può essere inviata o annullata
    - SENT: può ricevere pagamenti/solleciti, essere saldata o annullata
    - PAID / CANCELLED: terminali
    """

    async def get_all(self, gateway: RestGateway) -> list[InvoiceRead]:
        """Recupera tutte le fatture."""
        invoices = parse_response_list(InvoiceRead, await gateway.get("/invoices"))
        logger.info("Recuperate %s fatture", len(invoices))
        return invoices

    async def get_filtered(
        self,
        gateway: RestGateway,
        filters: Optional[InvoiceFilters] = None,
    ) -> list[InvoiceRead]:
        """
        Recupera le fatture applicando i filtri lato server.

        Args:
            gateway: Gateway REST
            filters: Stato, cliente e intervallo date (tutti opzionali)

        Returns:
            Lista completa delle fatture che rispettano i filtri
        """
        params = filters.to_params() if filters else {}
        data = await gateway.get("/invoices", params=params or None)
        return parse_response_list(InvoiceRead, data)

    async def get_by_id(self, gateway: RestGateway, invoice_id: InvoiceId) -> InvoiceRead:
        """
        Recupera una fattura per ID.

        Raises:
            NotFoundError: Se la fattura non esiste
        """
        return parse_response(InvoiceRead, await gateway.get(f"/invoices/{invoice_id}"))

    async def create(self, gateway: RestGateway, data: InvoiceCreate) -> InvoiceRead:
        """Crea una fattura in stato DRAFT."""
        invoice = parse_response(
            InvoiceRead, await gateway.post("/invoices", data.to_payload())
        )
        logger.info("Creata fattura %s (%s)", invoice.invoice_number, invoice.id)
        return invoice

    async def update(
        self,
        gateway: RestGateway,
        invoice_id: InvoiceId,
        data: InvoiceUpdate,
    ) -> InvoiceRead:
        """Aggiorna una fattura (il server accetta solo DRAFT)."""
        result = await gateway.put(f"/invoices/{invoice_id}", data.to_payload())
        logger.info("Aggiornata fattura %s", invoice_id)
        return parse_response(InvoiceRead, result)

    async def delete(self, gateway: RestGateway, invoice_id: InvoiceId) -> None:
        """Elimina una fattura."""
        await gateway.delete(f"/invoices/{invoice_id}")
        logger.info("Eliminata fattura %s", invoice_id)

    # ------------------------------------------------------------
    # Azioni di ciclo di vita
    # ------------------------------------------------------------

    async def send(self, gateway: RestGateway, invoice_id: InvoiceId) -> InvoiceRead:
        """Invia la fattura al cliente (DRAFT -> SENT)."""
        invoice = parse_response(
            InvoiceRead, await gateway.post(f"/invoices/{invoice_id}/send")
        )
        logger.info("Fattura %s inviata, stato %s", invoice.invoice_number, invoice.status.value)
        return invoice

    async def mark_as_paid(self, gateway: RestGateway, invoice_id: InvoiceId) -> InvoiceRead:
        """Segna la fattura come saldata senza registrare un pagamento."""
        invoice = parse_response(
            InvoiceRead, await gateway.post(f"/invoices/{invoice_id}/mark-paid")
        )
        logger.info("Fattura %s segnata come pagata", invoice.invoice_number)
        return invoice

    async def cancel(
        self,
        gateway: RestGateway,
        invoice_id: InvoiceId,
        reason: str,
    ) -> InvoiceRead:
        """
        Annulla la fattura.

        Args:
            gateway: Gateway REST
            invoice_id: ID della fattura
            reason: Motivo dell'annullamento (obbligatorio)
        """
        payload = CancelInvoiceRequest(cancellation_reason=reason).to_payload()
        invoice = parse_response(
            InvoiceRead, await gateway.post(f"/invoices/{invoice_id}/cancel", payload)
        )
        logger.info("Fattura %s annullata: %s", invoice.invoice_number, reason)
        return invoice

    # ------------------------------------------------------------
    # Ricerche
    # ------------------------------------------------------------

    async def get_by_customer(self, gateway: RestGateway, customer_id: InvoiceId) -> list[InvoiceRead]:
        """Fatture di un cliente."""
        data = await gateway.get(f"/invoices/customer/{customer_id}")
        return parse_response_list(InvoiceRead, data)

    async def get_by_payment_link(self, gateway: RestGateway, link: str) -> InvoiceRead:
        """Fattura dal link di pagamento pubblico (chiamata non autenticata)."""
        data = await gateway.get(f"/invoices/payment-link/{link}", authenticated=False)
        return parse_response(InvoiceRead, data)


invoice_service = InvoiceService()
