"""
Schemas Pydantic per i Clienti
Progetto: InvoiceMe (client fatturazione)

Contiene:
- Schema per l'indirizzo (fatturazione / spedizione)
- Schemas per la creazione e l'aggiornamento del cliente (form)
- Schema di lettura del cliente restituito dal backend
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from invoiceme.schemas.base import ApiSchema


# -------------------------------------------------------------------
# Indirizzo
# -------------------------------------------------------------------

class AddressSchema(ApiSchema):
    """Indirizzo completo: tutti i campi sono obbligatori."""

    street: str = Field(..., min_length=1, description="Via e numero civico")
    city: str = Field(..., min_length=1, description="Città")
    state: str = Field(..., min_length=1, description="Stato / provincia")
    postal_code: str = Field(..., min_length=1, description="Codice postale")
    country: str = Field(..., min_length=1, description="Nazione")

    @field_validator("street", "city", "state", "postal_code", "country")
    @classmethod
    def strip_not_blank(cls, v: str) -> str:
        """Rifiuta i campi composti da soli spazi."""
        v = v.strip()
        if not v:
            raise ValueError("Il campo è obbligatorio")
        return v

    def one_line(self) -> str:
        """Indirizzo su una riga, per liste e riepiloghi."""
        return f"{self.street}, {self.city}, {self.state} {self.postal_code}, {self.country}"


# -------------------------------------------------------------------
# Schemas per Customer
# -------------------------------------------------------------------

class CustomerBase(ApiSchema):
    """Schema base per i clienti."""

    business_name: str = Field(..., min_length=1, description="Ragione sociale")
    contact_name: str = Field(..., min_length=1, description="Nome del referente")
    email: EmailStr = Field(..., description="Indirizzo email")
    phone: Optional[str] = Field(None, description="Telefono")
    billing_address: AddressSchema = Field(..., description="Indirizzo di fatturazione")
    shipping_address: Optional[AddressSchema] = Field(
        None,
        description="Indirizzo di spedizione (opzionale)",
    )

    @field_validator("business_name", "contact_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Il campo è obbligatorio")
        return v

    @field_validator("phone")
    @classmethod
    def empty_phone_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class CustomerCreate(CustomerBase):
    """Schema per la creazione di un cliente."""
    pass


class CustomerUpdate(CustomerBase):
    """Schema per l'aggiornamento di un cliente (include lo stato attivo)."""

    active: bool = Field(default=True, description="Cliente attivo")


class CustomerRead(ApiSchema):
    """
    Schema per la lettura di un cliente.

    Non valida il formato email: i dati provengono dal server, che è autorevole.
    """

    id: uuid.UUID = Field(..., description="UUID del cliente")
    business_name: str = Field(..., description="Ragione sociale")
    contact_name: str = Field(..., description="Nome del referente")
    email: str = Field(..., description="Indirizzo email")
    phone: Optional[str] = Field(None, description="Telefono")
    billing_address: AddressSchema = Field(..., description="Indirizzo di fatturazione")
    shipping_address: Optional[AddressSchema] = Field(None, description="Indirizzo di spedizione")
    active: bool = Field(default=True, description="Cliente attivo")
    created_at: Optional[datetime] = Field(None, description="Data/ora creazione")
    updated_at: Optional[datetime] = Field(None, description="Data/ora ultimo aggiornamento")


__all__ = [
    "AddressSchema",
    "CustomerBase",
    "CustomerCreate",
    "CustomerUpdate",
    "CustomerRead",
]
