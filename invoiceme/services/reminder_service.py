"""
Service Layer per i Solleciti
Progetto: InvoiceMe (client fatturazione)

Lo storico solleciti è l'unica lettura tollerante: una fattura mai
sollecitata può non avere storico, e qualunque errore HTTP (404 compreso)
viene trattato come lista vuota. Errori di rete e sessione scaduta
vengono invece propagati.
"""

import logging
import uuid
from typing import Union

from invoiceme.core.exceptions import HttpError
from invoiceme.core.gateway import RestGateway
from invoiceme.schemas.base import parse_response, parse_response_list
from invoiceme.schemas.reminder import (
    OverdueInvoiceSummary,
    ReminderHistoryRead,
    ReminderPreview,
    ReminderSentResponse,
    ReminderType,
    SendReminderRequest,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)

InvoiceId = Union[uuid.UUID, str]


class ReminderService:
    """Service per invio, anteprima e storico dei solleciti."""

    async def send(
        self,
        gateway: RestGateway,
        invoice_id: InvoiceId,
        reminder_type: ReminderType,
    ) -> ReminderSentResponse:
        """
        Invia un sollecito per la fattura.

        Il server risponde con una conferma minima: la nuova voce di
        storico va letta con `get_history`.

        Returns:
            Conferma con l'ID del sollecito creato
        """
        payload = SendReminderRequest(
            invoice_id=invoice_id,
            reminder_type=reminder_type,
        ).to_payload()
        data = await gateway.post("/reminders/send", payload)
        sent = parse_response(ReminderSentResponse, data or {})
        logger.info("Sollecito %s inviato per la fattura %s", reminder_type.value, invoice_id)
        return sent

    async def get_history(
        self,
        gateway: RestGateway,
        invoice_id: InvoiceId,
    ) -> list[ReminderHistoryRead]:
        """Storico solleciti della fattura; vuoto se non disponibile."""
        try:
            data = await gateway.get(f"/reminders/history/{invoice_id}")
        except HttpError as exc:
            logger.info(
                "Storico solleciti non disponibile per %s (HTTP %s): lista vuota",
                invoice_id, exc.status,
            )
            return []
        return parse_response_list(ReminderHistoryRead, data)

    async def get_overdue(self, gateway: RestGateway) -> list[OverdueInvoiceSummary]:
        """Fatture scadute, calcolate dal server a ogni richiesta."""
        data = await gateway.get("/reminders/overdue")
        overdue = parse_response_list(OverdueInvoiceSummary, data)
        logger.info("Recuperate %s fatture scadute", len(overdue))
        return overdue

    async def preview(
        self,
        gateway: RestGateway,
        invoice_id: InvoiceId,
        reminder_type: ReminderType,
    ) -> ReminderPreview:
        """Anteprima dell'email di sollecito generata dal server."""
        data = await gateway.get(
            f"/reminders/preview/{invoice_id}",
            params={"type": reminder_type.value},
        )
        return parse_response(ReminderPreview, data)


reminder_service = ReminderService()
