"""
Schemas Pydantic per l'assistente conversazionale
Progetto: InvoiceMe (client fatturazione)
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from invoiceme.schemas.base import ApiSchema


class ChatSender(str, Enum):
    """Mittente di un messaggio della conversazione."""
    USER = "user"
    AI = "ai"


class ChatMessage(ApiSchema):
    """Messaggio della conversazione, valido solo per la sessione corrente."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="ID locale del messaggio")
    content: str = Field(..., description="Testo del messaggio")
    sender: ChatSender = Field(..., description="Mittente")
    timestamp: datetime = Field(default_factory=datetime.now, description="Data/ora del messaggio")


class ChatMessageRequest(ApiSchema):
    """Richiesta inoltrata all'assistente."""

    message: str = Field(..., min_length=1, description="Domanda dell'utente")
    conversation_id: Optional[str] = Field(None, description="ID della conversazione in corso")


class ChatMessageResponse(ApiSchema):
    """Risposta dell'assistente."""

    response: str = Field(..., description="Testo della risposta")
    suggestions: list[str] = Field(default_factory=list, description="Domande suggerite")
    conversation_id: Optional[str] = Field(None, description="ID della conversazione")


__all__ = [
    "ChatSender",
    "ChatMessage",
    "ChatMessageRequest",
    "ChatMessageResponse",
]
