"""
Schemas Pydantic per i Pagamenti
Progetto: InvoiceMe (client fatturazione)

Contiene:
- Enums: PaymentMethod
- Schema del form di registrazione pagamento
- Schema di lettura del pagamento
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from invoiceme.schemas.base import ApiSchema, Money


# -------------------------------------------------------------------
# Enum
# -------------------------------------------------------------------

class PaymentMethod(str, Enum):
    """Metodi di pagamento supportati."""
    CREDIT_CARD = "CREDIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHECK = "CHECK"
    CASH = "CASH"
    OTHER = "OTHER"


# -------------------------------------------------------------------
# Schemas per Payment
# -------------------------------------------------------------------

class PaymentCreate(ApiSchema):
    """
    Schema per registrare un pagamento su una fattura.

    Il tetto dell'importo (saldo residuo) dipende dalla fattura e viene
    controllato dal workflow al momento dell'invio, non qui.
    """

    invoice_id: uuid.UUID = Field(..., description="UUID della fattura")
    payment_amount: Money = Field(
        ...,
        ge=Decimal("0.01"),
        description="Importo del pagamento (almeno 0.01)",
    )
    payment_date: date = Field(..., description="Data del pagamento")
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.BANK_TRANSFER,
        description="Metodo di pagamento",
    )
    transaction_reference: Optional[str] = Field(
        None,
        max_length=255,
        description="Riferimento (numero assegno, ID transazione, etc.)",
    )
    notes: Optional[str] = Field(None, description="Note aggiuntive sul pagamento")

    @field_validator("transaction_reference", "notes")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class PaymentRead(ApiSchema):
    """Schema per leggere un pagamento esistente (immutabile)."""

    id: uuid.UUID = Field(..., description="UUID del pagamento")
    invoice_id: uuid.UUID = Field(..., description="UUID della fattura")
    invoice_number: Optional[str] = Field(None, description="Numero fattura")
    payment_amount: Money = Field(..., description="Importo del pagamento")
    payment_date: date = Field(..., description="Data del pagamento")
    payment_method: PaymentMethod = Field(..., description="Metodo di pagamento")
    transaction_reference: Optional[str] = Field(None, description="Riferimento")
    notes: Optional[str] = Field(None, description="Note")
    created_at: Optional[datetime] = Field(None, description="Data/ora registrazione")


__all__ = [
    "PaymentMethod",
    "PaymentCreate",
    "PaymentRead",
]
