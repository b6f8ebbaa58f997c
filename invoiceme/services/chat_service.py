"""
Service Layer per l'assistente conversazionale
Progetto: InvoiceMe (client fatturazione)
"""

import logging

from invoiceme.core.gateway import RestGateway
from invoiceme.schemas.base import parse_response
from invoiceme.schemas.chat import ChatMessageRequest, ChatMessageResponse

logger = logging.getLogger(__name__)


class ChatService:
    """Inoltra le domande all'endpoint dell'assistente."""

    async def send_message(
        self,
        gateway: RestGateway,
        request: ChatMessageRequest,
    ) -> ChatMessageResponse:
        data = await gateway.post("/chat/message", request.to_payload())
        response = parse_response(ChatMessageResponse, data)
        logger.debug(
            "Risposta assistente (conversazione %s, %s suggerimenti)",
            response.conversation_id, len(response.suggestions),
        )
        return response


chat_service = ChatService()
