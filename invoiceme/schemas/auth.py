"""
Schemas Pydantic per l'autenticazione
Progetto: InvoiceMe (client fatturazione)

Il backend usa HTTP Basic: non esistono token, solo credenziali
codificate conservate nella sessione locale.
"""

from pydantic import BaseModel, Field, field_validator

from invoiceme.schemas.base import ApiSchema


class LoginCredentials(BaseModel):
    """
    Schema per le credenziali di login.

    Attributes:
        username: Nome utente
        password: Password in chiaro (mai persistita così com'è)
    """

    username: str = Field(..., min_length=1, description="Nome utente")
    password: str = Field(..., min_length=1, description="Password")

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Il nome utente è obbligatorio")
        return v


class UserInfo(ApiSchema):
    """Identità minima dell'utente collegato, salvata in sessione."""

    username: str = Field(..., description="Nome utente")
    is_authenticated: bool = Field(default=True, description="Utente autenticato")


__all__ = [
    "LoginCredentials",
    "UserInfo",
]
