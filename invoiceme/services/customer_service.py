"""
Service Layer per i Clienti
Progetto: InvoiceMe (client fatturazione)

Facciata tipizzata sugli endpoint `/customers` del backend.
Le liste restituiscono sempre la collezione completa: ricerche e filtri
aggiuntivi si fanno lato client con `filter_customers`.
"""

import logging
import uuid
from typing import Iterable, Union

from invoiceme.core.gateway import RestGateway
from invoiceme.schemas.base import parse_response, parse_response_list
from invoiceme.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate

# Logger per questo modulo
logger = logging.getLogger(__name__)

CustomerId = Union[uuid.UUID, str]


def filter_customers(customers: Iterable[CustomerRead], query: str) -> list[CustomerRead]:
    """
    Filtra i clienti per ragione sociale, referente o email.

    Il confronto ignora maiuscole/minuscole; una query vuota
    restituisce tutti i clienti.
    """
    term = query.strip().lower()
    if not term:
        return list(customers)
    return [
        customer
        for customer in customers
        if term in customer.business_name.lower()
        or term in customer.contact_name.lower()
        or term in customer.email.lower()
    ]


class CustomerService:
    """
    Service per le operazioni CRUD sui clienti.

    Ogni metodo riceve il gateway come primo argomento.
    """

    async def get_all(self, gateway: RestGateway) -> list[CustomerRead]:
        """Recupera tutti i clienti."""
        data = await gateway.get("/customers")
        customers = parse_response_list(CustomerRead, data)
        logger.info("Recuperati %s clienti", len(customers))
        return customers

    async def get_by_id(self, gateway: RestGateway, customer_id: CustomerId) -> CustomerRead:
        """
        Recupera un cliente per ID.

        Raises:
            NotFoundError: Se il cliente non esiste
        """
        data = await gateway.get(f"/customers/{customer_id}")
        return parse_response(CustomerRead, data)

    async def create(self, gateway: RestGateway, data: CustomerCreate) -> CustomerRead:
        """Crea un nuovo cliente."""
        result = await gateway.post("/customers", data.to_payload())
        customer = parse_response(CustomerRead, result)
        logger.info("Creato cliente %s (%s)", customer.id, customer.business_name)
        return customer

    async def update(
        self,
        gateway: RestGateway,
        customer_id: CustomerId,
        data: CustomerUpdate,
    ) -> CustomerRead:
        """Aggiorna un cliente esistente."""
        result = await gateway.put(f"/customers/{customer_id}", data.to_payload())
        logger.info("Aggiornato cliente %s", customer_id)
        return parse_response(CustomerRead, result)

    async def delete(self, gateway: RestGateway, customer_id: CustomerId) -> None:
        """Elimina un cliente."""
        await gateway.delete(f"/customers/{customer_id}")
        logger.info("Eliminato cliente %s", customer_id)

    async def search(self, gateway: RestGateway, query: str) -> list[CustomerRead]:
        """Ricerca lato server (`GET /customers/search?q=`)."""
        data = await gateway.get("/customers/search", params={"q": query})
        return parse_response_list(CustomerRead, data)


customer_service = CustomerService()
