"""
Schemas Pydantic per la Fatturazione
Progetto: InvoiceMe (client fatturazione)

Contiene:
- Enums: InvoiceStatus
- Schemas per LineItem
- Schemas per Invoice (form di creazione/modifica e lettura)
- Filtri lista fatture e richiesta di annullamento
"""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from invoiceme.core.exceptions import BusinessValidationError
from invoiceme.schemas.base import ApiSchema, JsonDecimal, Money


# -------------------------------------------------------------------
# Enum
# -------------------------------------------------------------------

class InvoiceStatus(str, Enum):
    """Stato della fattura, gestito dal server."""
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


# -------------------------------------------------------------------
# Schemas per LineItem
# -------------------------------------------------------------------

class LineItemBase(ApiSchema):
    """Schema base per le righe della fattura."""

    description: str = Field(
        ...,
        min_length=1,
        description="Descrizione della riga",
    )
    quantity: JsonDecimal = Field(
        ...,
        ge=1,
        description="Quantità (almeno 1)",
    )
    unit_price: Money = Field(
        ...,
        ge=0,
        description="Prezzo unitario",
    )

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("La descrizione è obbligatoria")
        return v


class LineItemCreate(LineItemBase):
    """
    Schema per una riga nel form della fattura.

    Il totale riga è derivato e non viene inviato al server.
    """

    @property
    def line_total(self) -> Decimal:
        """Totale riga (quantità × prezzo unitario)."""
        return self.quantity * self.unit_price


class LineItemRead(ApiSchema):
    """Schema per la lettura di una riga fattura."""

    id: Optional[uuid.UUID] = Field(None, description="UUID della riga")
    description: str = Field(..., description="Descrizione della riga")
    quantity: JsonDecimal = Field(..., description="Quantità")
    unit_price: Money = Field(..., description="Prezzo unitario")
    line_total: Money = Field(..., description="Totale riga calcolato dal server")


# -------------------------------------------------------------------
# Schemas per Invoice
# -------------------------------------------------------------------

class InvoiceCreate(ApiSchema):
    """Schema per la creazione di una fattura (sempre in stato DRAFT)."""

    customer_id: uuid.UUID = Field(..., description="UUID del cliente")
    issue_date: date = Field(..., description="Data emissione")
    due_date: date = Field(..., description="Data scadenza pagamento")
    allows_partial_payment: bool = Field(
        default=False,
        description="Consente pagamenti parziali",
    )
    notes: Optional[str] = Field(None, description="Note")
    terms: Optional[str] = Field(None, description="Termini e condizioni")
    line_items: list[LineItemCreate] = Field(
        default_factory=list,
        description="Righe della fattura",
    )

    @model_validator(mode="after")
    def validate_invoice(self) -> "InvoiceCreate":
        """Valida righe presenti e due_date >= issue_date."""
        if not self.line_items:
            raise BusinessValidationError("È necessaria almeno una riga fattura")
        if self.due_date < self.issue_date:
            raise BusinessValidationError(
                "La data di scadenza non può essere precedente alla data di emissione"
            )
        return self

    @property
    def subtotal_preview(self) -> Decimal:
        """Imponibile stimato (le tasse sono calcolate dal server)."""
        return sum((item.line_total for item in self.line_items), Decimal("0"))


class InvoiceUpdate(InvoiceCreate):
    """Schema per l'aggiornamento di una fattura (solo in stato DRAFT)."""

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Stato corrente della fattura",
    )


class InvoiceRead(ApiSchema):
    """
    Schema per la lettura di una fattura.

    Gli importi sono calcolati dal server e non vengono mai modificati
    localmente: una nuova rappresentazione arriva solo dopo una chiamata.
    """

    id: uuid.UUID = Field(..., description="UUID della fattura")
    invoice_number: str = Field(..., description="Numero fattura")
    customer_id: uuid.UUID = Field(..., description="UUID del cliente")
    customer_name: str = Field(..., description="Ragione sociale del cliente")
    customer_email: Optional[str] = Field(None, description="Email del cliente, se inclusa dal server")
    issue_date: date = Field(..., description="Data emissione")
    due_date: date = Field(..., description="Data scadenza")
    status: InvoiceStatus = Field(..., description="Stato della fattura")
    subtotal: Money = Field(..., description="Totale imponibile")
    tax_amount: Money = Field(..., description="Importo tasse")
    total_amount: Money = Field(..., description="Totale fattura")
    amount_paid: Money = Field(default=Decimal("0"), description="Importo pagato")
    balance_remaining: Money = Field(..., description="Saldo residuo")
    allows_partial_payment: bool = Field(default=False, description="Pagamenti parziali consentiti")
    payment_link: Optional[str] = Field(None, description="Token del link di pagamento pubblico")
    line_items: list[LineItemRead] = Field(default_factory=list, description="Righe della fattura")
    notes: Optional[str] = Field(None, description="Note")
    terms: Optional[str] = Field(None, description="Termini e condizioni")

    model_config = ConfigDict(frozen=True)

    @property
    def recipient(self) -> str:
        """Destinatario da mostrare: email se nota, altrimenti il cliente."""
        return self.customer_email or self.customer_name

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """True se la fattura è inviata, scaduta e con saldo residuo."""
        today = today or date.today()
        return (
            self.status == InvoiceStatus.SENT
            and self.balance_remaining > 0
            and today > self.due_date
        )


class InvoiceFilters(ApiSchema):
    """Filtri opzionali per la lista fatture lato server."""

    status: Optional[InvoiceStatus] = None
    customer_id: Optional[uuid.UUID] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None

    def to_params(self) -> dict[str, str]:
        """Query string con i soli filtri valorizzati."""
        return {key: str(value) for key, value in self.to_payload().items()}


class CancelInvoiceRequest(ApiSchema):
    """Corpo della richiesta di annullamento fattura."""

    cancellation_reason: str = Field(..., min_length=1, description="Motivo dell'annullamento")


__all__ = [
    "InvoiceStatus",
    "LineItemBase",
    "LineItemCreate",
    "LineItemRead",
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoiceRead",
    "InvoiceFilters",
    "CancelInvoiceRequest",
]
