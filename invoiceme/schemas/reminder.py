"""
Schemas Pydantic per i Solleciti
Progetto: InvoiceMe (client fatturazione)

Contiene:
- Enums: ReminderType, OverdueSeverity
- Richiesta di invio sollecito e anteprima email
- Storico solleciti e riepilogo fatture scadute
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, Field

from invoiceme.schemas.base import ApiSchema, Money


# -------------------------------------------------------------------
# Enum
# -------------------------------------------------------------------

class ReminderType(str, Enum):
    """Categorie di sollecito, in ordine crescente di urgenza."""
    BEFORE_DUE = "BEFORE_DUE"
    ON_DUE_DATE = "ON_DUE_DATE"
    OVERDUE_7_DAYS = "OVERDUE_7_DAYS"
    OVERDUE_14_DAYS = "OVERDUE_14_DAYS"
    OVERDUE_30_DAYS = "OVERDUE_30_DAYS"


class OverdueSeverity(str, Enum):
    """Gravità del ritardo, usata solo per i badge in lista."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


# -------------------------------------------------------------------
# Schemas per Reminder
# -------------------------------------------------------------------

class SendReminderRequest(ApiSchema):
    """Richiesta di invio sollecito."""

    invoice_id: uuid.UUID = Field(..., description="UUID della fattura")
    reminder_type: ReminderType = Field(..., description="Tipo di sollecito")


class ReminderSentResponse(ApiSchema):
    """Conferma di invio: il server restituisce solo l'ID del sollecito creato."""

    reminder_id: Optional[uuid.UUID] = Field(None, description="UUID del sollecito creato")
    message: str = Field(default="", description="Messaggio di conferma del server")


class ReminderPreview(ApiSchema):
    """Anteprima dell'email di sollecito generata dal server."""

    subject: str = Field(..., description="Oggetto dell'email")
    message: str = Field(
        ...,
        validation_alias=AliasChoices("message", "emailBody"),
        description="Corpo dell'email",
    )
    recipient_email: str = Field(..., description="Destinatario")
    invoice_number: Optional[str] = Field(None, description="Numero fattura")


class ReminderHistoryRead(ApiSchema):
    """Voce dello storico solleciti (append-only, mai modificata)."""

    id: uuid.UUID = Field(..., description="UUID del sollecito")
    invoice_id: uuid.UUID = Field(..., description="UUID della fattura")
    invoice_number: Optional[str] = Field(None, description="Numero fattura")
    reminder_type: ReminderType = Field(..., description="Tipo di sollecito")
    sent_date: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("sentDate", "sentAt", "sent_date"),
        description="Data/ora di invio",
    )
    recipient_email: str = Field(..., description="Destinatario")
    subject: str = Field(..., description="Oggetto dell'email")
    message: str = Field(
        default="",
        validation_alias=AliasChoices("message", "emailBody"),
        description="Corpo dell'email",
    )


class OverdueInvoiceSummary(ApiSchema):
    """Riepilogo di una fattura scaduta, calcolato dal server a ogni richiesta."""

    invoice_id: uuid.UUID = Field(..., description="UUID della fattura")
    invoice_number: str = Field(..., description="Numero fattura")
    customer_name: str = Field(..., description="Cliente")
    due_date: date = Field(..., description="Data scadenza")
    total_amount: Optional[Money] = Field(None, description="Totale fattura")
    balance_remaining: Money = Field(..., description="Saldo residuo")
    days_overdue: int = Field(default=0, description="Giorni di ritardo")
    last_reminder_sent: Optional[datetime] = Field(None, description="Ultimo sollecito inviato")

    @staticmethod
    def compute_days_overdue(due_date: date, today: Optional[date] = None) -> int:
        """Giorni di ritardo: max(0, oggi - scadenza)."""
        today = today or date.today()
        return max(0, (today - due_date).days)


class OverdueSummaryStats(ApiSchema):
    """Statistiche aggregate della lista solleciti."""

    count: int = Field(..., description="Numero di fatture scadute")
    total_outstanding: Money = Field(default=Decimal("0"), description="Totale da incassare")
    over_7_days: int = Field(..., description="Scadute da almeno 7 giorni")
    over_30_days: int = Field(..., description="Scadute da almeno 30 giorni")


__all__ = [
    "ReminderType",
    "OverdueSeverity",
    "SendReminderRequest",
    "ReminderSentResponse",
    "ReminderPreview",
    "ReminderHistoryRead",
    "OverdueInvoiceSummary",
    "OverdueSummaryStats",
]
