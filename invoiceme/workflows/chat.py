"""
Assistente conversazionale
Progetto: InvoiceMe (client fatturazione)

Stato della finestra di chat: messaggi della sessione, conversazione in
corso e domande suggerite. I messaggi non vengono mai salvati.
"""

import logging
from typing import Optional

from invoiceme.core.exceptions import AppException, SessionExpiredError
from invoiceme.core.gateway import RestGateway
from invoiceme.schemas.chat import (
    ChatMessage,
    ChatMessageRequest,
    ChatSender,
)
from invoiceme.services.chat_service import ChatService

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Ciao! Sono l'assistente di InvoiceMe. Posso aiutarti con fatture, "
    "clienti e incassi. Prova a chiedere:\n\n"
    "- Quante fatture scadute ho?\n"
    "- Qual è il mio fatturato totale?\n"
    "- Mostrami le fatture in bozza\n\n"
    "Cosa vuoi sapere?"
)

DEFAULT_SUGGESTIONS = [
    "Mostrami le fatture scadute",
    "Qual è il mio fatturato totale?",
    "Quante fatture in bozza ho?",
]

ERROR_MESSAGE = (
    "Si è verificato un errore nell'elaborazione della richiesta. "
    "Riprova o verifica di aver effettuato il login."
)


class ChatAssistant:
    """Finestra di chat con l'assistente."""

    def __init__(self, gateway: RestGateway, chat_service: Optional[ChatService] = None) -> None:
        self.gateway = gateway
        self.chat_service = chat_service or ChatService()
        self.messages: list[ChatMessage] = []
        self.suggestions: list[str] = []
        self.conversation_id: Optional[str] = None
        self.is_open = False
        self.is_loading = False

    def open(self) -> None:
        """Apre la chat; se vuota mostra il benvenuto e i suggerimenti."""
        self.is_open = True
        if not self.messages:
            self.messages.append(
                ChatMessage(id="welcome", content=WELCOME_MESSAGE, sender=ChatSender.AI)
            )
            self.suggestions = list(DEFAULT_SUGGESTIONS)

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    async def send(self, text: str) -> Optional[ChatMessage]:
        """
        Invia una domanda all'assistente.

        Testo vuoto o invio durante una risposta in corso vengono ignorati.

        Returns:
            Il messaggio di risposta aggiunto (anche quello di errore), o None
        """
        if not text.strip() or self.is_loading:
            return None

        self.messages.append(ChatMessage(content=text, sender=ChatSender.USER))
        self.is_loading = True
        try:
            response = await self.chat_service.send_message(
                self.gateway,
                ChatMessageRequest(message=text, conversation_id=self.conversation_id),
            )
        except SessionExpiredError:
            raise
        except AppException as exc:
            logger.error("Errore assistente: %s", exc.detail)
            reply = ChatMessage(content=ERROR_MESSAGE, sender=ChatSender.AI)
            self.messages.append(reply)
            return reply
        finally:
            self.is_loading = False

        reply = ChatMessage(content=response.response, sender=ChatSender.AI)
        self.messages.append(reply)
        self.suggestions = list(response.suggestions)
        if response.conversation_id:
            self.conversation_id = response.conversation_id
        return reply

    async def use_suggestion(self, suggestion: str) -> Optional[ChatMessage]:
        """Invia una delle domande suggerite."""
        return await self.send(suggestion)

    def reset(self) -> None:
        """Svuota la conversazione."""
        self.messages = []
        self.suggestions = []
        self.conversation_id = None
