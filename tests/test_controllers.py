"""
Unit tests per assistente, portale di pagamento e lista solleciti.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from conftest import make_invoice, make_overdue_data, make_payment
from invoiceme.core.exceptions import (
    BusinessValidationError,
    ConflictError,
    HttpError,
    NetworkError,
    NotFoundError,
    SessionExpiredError,
)
from invoiceme.schemas.chat import ChatMessageResponse, ChatSender
from invoiceme.schemas.reminder import OverdueInvoiceSummary, OverdueSeverity, ReminderPreview, ReminderType
from invoiceme.services.chat_service import ChatService
from invoiceme.workflows.base import NoticeLevel
from invoiceme.workflows.chat import DEFAULT_SUGGESTIONS, ERROR_MESSAGE, ChatAssistant
from invoiceme.workflows.overdue import OverdueRemindersController
from invoiceme.workflows.portal import PaymentPortalController, PortalState
from invoiceme.workflows.reminder import ReminderState


# ============================================================
# Assistente
# ============================================================


class TestChatAssistant:

    @pytest.fixture
    def mock_chat_service(self):
        return AsyncMock(spec=ChatService)

    @pytest.fixture
    def assistant(self, mock_ctx, mock_chat_service):
        return ChatAssistant(mock_ctx.gateway, mock_chat_service)

    def test_open_shows_welcome_once(self, assistant):
        assistant.open()
        assistant.close()
        assistant.toggle()

        assert assistant.is_open is True
        assert [message.id for message in assistant.messages] == ["welcome"]
        assert assistant.suggestions == DEFAULT_SUGGESTIONS

    async def test_send_appends_question_and_answer(self, assistant, mock_chat_service):
        mock_chat_service.send_message.return_value = ChatMessageResponse(
            response="Hai 2 fatture scadute.",
            suggestions=["Invia un sollecito"],
            conversation_id="conv-1",
        )
        assistant.open()

        reply = await assistant.send("Quante scadute?")

        assert reply.content == "Hai 2 fatture scadute."
        assert [m.sender for m in assistant.messages] == [
            ChatSender.AI, ChatSender.USER, ChatSender.AI
        ]
        assert assistant.suggestions == ["Invia un sollecito"]
        assert assistant.conversation_id == "conv-1"
        assert assistant.is_loading is False

    async def test_conversation_id_is_reused(self, assistant, mock_chat_service):
        mock_chat_service.send_message.return_value = ChatMessageResponse(
            response="ok", conversation_id="conv-1"
        )
        await assistant.send("prima")
        await assistant.send("seconda")

        request = mock_chat_service.send_message.await_args.args[1]
        assert request.conversation_id == "conv-1"

    @pytest.mark.parametrize("text", ["", "   "])
    async def test_blank_text_is_ignored(self, assistant, mock_chat_service, text):
        assert await assistant.send(text) is None
        assert assistant.messages == []
        mock_chat_service.send_message.assert_not_called()

    async def test_error_becomes_a_message(self, assistant, mock_chat_service):
        mock_chat_service.send_message.side_effect = HttpError(500)

        reply = await assistant.send("ciao")

        assert reply.content == ERROR_MESSAGE
        assert reply.sender == ChatSender.AI
        assert len(assistant.messages) == 2

    async def test_session_expiry_propagates(self, assistant, mock_chat_service):
        mock_chat_service.send_message.side_effect = SessionExpiredError()
        with pytest.raises(SessionExpiredError):
            await assistant.send("ciao")
        assert assistant.is_loading is False

    async def test_reset(self, assistant, mock_chat_service):
        mock_chat_service.send_message.return_value = ChatMessageResponse(
            response="ok", conversation_id="conv-1"
        )
        await assistant.use_suggestion(DEFAULT_SUGGESTIONS[0])
        assistant.reset()

        assert assistant.messages == []
        assert assistant.conversation_id is None


# ============================================================
# Portale di pagamento
# ============================================================


class TestPaymentPortal:

    @pytest.fixture
    def portal(self, mock_ctx, mock_invoice_service, mock_payment_service):
        return PaymentPortalController(
            mock_ctx, "tok123",
            invoices=mock_invoice_service,
            payments=mock_payment_service,
        )

    async def test_invalid_link(self, portal, mock_invoice_service):
        mock_invoice_service.get_by_payment_link.side_effect = NotFoundError()

        assert await portal.load() is False
        assert portal.state == PortalState.INVALID_LINK
        assert portal.notice.level == NoticeLevel.ERROR

    async def test_payment_end_to_end(self, portal, mock_invoice_service, mock_payment_service):
        mock_invoice_service.get_by_payment_link.return_value = make_invoice(
            status="SENT", balanceRemaining=60, amountPaid=50
        )
        mock_payment_service.record_public.return_value = make_payment(paymentAmount=60)

        assert await portal.load(today=date(2025, 3, 1)) is True
        assert portal.form["payment_amount"] == Decimal("60")
        assert portal.can_pay is True

        assert await portal.submit(payment_method="CREDIT_CARD") is True

        assert portal.state == PortalState.PAID
        recorded = mock_payment_service.record_public.await_args.args[1]
        assert recorded.payment_amount == Decimal("60")
        assert recorded.payment_date == date(2025, 3, 1)
        assert portal.notice.level == NoticeLevel.SUCCESS

    async def test_paid_invoice_cannot_be_paid(self, portal, mock_invoice_service):
        mock_invoice_service.get_by_payment_link.return_value = make_invoice(
            status="PAID", balanceRemaining=0, amountPaid=110
        )
        await portal.load()

        assert portal.can_pay is False
        with pytest.raises(ConflictError):
            await portal.submit()

    async def test_amount_over_balance(self, portal, mock_invoice_service, mock_payment_service):
        mock_invoice_service.get_by_payment_link.return_value = make_invoice(
            status="SENT", balanceRemaining=60
        )
        await portal.load()

        with pytest.raises(BusinessValidationError):
            await portal.submit(payment_amount="100")

        assert portal.state == PortalState.READY
        mock_payment_service.record_public.assert_not_called()

    async def test_server_failure_returns_to_ready(
        self, portal, mock_invoice_service, mock_payment_service
    ):
        mock_invoice_service.get_by_payment_link.return_value = make_invoice(status="SENT")
        mock_payment_service.record_public.side_effect = NetworkError()
        await portal.load()

        assert await portal.submit() is False
        assert portal.state == PortalState.READY
        assert portal.notice.level == NoticeLevel.ERROR

    async def test_submit_before_load(self, portal):
        with pytest.raises(ConflictError):
            await portal.submit()


# ============================================================
# Lista solleciti
# ============================================================


class TestOverdueReminders:

    @pytest.fixture
    def controller(self, mock_ctx, mock_invoice_service, mock_payment_service, mock_reminder_service):
        return OverdueRemindersController(
            mock_ctx,
            invoices=mock_invoice_service,
            payments=mock_payment_service,
            reminders=mock_reminder_service,
        )

    async def test_rows_and_stats(self, controller, mock_reminder_service):
        mock_reminder_service.get_overdue.return_value = [
            OverdueInvoiceSummary.model_validate(make_overdue_data(3, balanceRemaining=10)),
            OverdueInvoiceSummary.model_validate(make_overdue_data(35, balanceRemaining=90)),
        ]

        assert await controller.load() is True

        assert [row.severity for row in controller.rows] == [
            OverdueSeverity.LOW, OverdueSeverity.CRITICAL
        ]
        assert controller.stats.total_outstanding == Decimal("100")
        assert controller.stats.over_30_days == 1

    async def test_load_failure_keeps_previous_list(self, controller, mock_reminder_service):
        mock_reminder_service.get_overdue.return_value = [
            OverdueInvoiceSummary.model_validate(make_overdue_data(3))
        ]
        await controller.load()
        mock_reminder_service.get_overdue.side_effect = HttpError(500)

        assert await controller.load() is False
        assert len(controller.overdue) == 1
        assert controller.notice.level == NoticeLevel.ERROR

    async def test_start_reminder_selects_type_from_days(
        self, controller, mock_invoice_service, mock_reminder_service
    ):
        invoice = make_invoice(status="SENT")
        mock_invoice_service.get_by_id.return_value = invoice
        mock_reminder_service.preview.return_value = ReminderPreview(
            subject="Promemoria", message="...", recipient_email="billing@acme.test"
        )

        detail = await controller.start_reminder(invoice.id, days_overdue=20)

        assert detail is not None
        assert detail.reminder.state == ReminderState.PREVIEW_OPEN
        assert detail.reminder.reminder_type == ReminderType.OVERDUE_14_DAYS

    async def test_start_reminder_preview_failure(
        self, controller, mock_invoice_service, mock_reminder_service
    ):
        mock_invoice_service.get_by_id.return_value = make_invoice(status="SENT")
        mock_reminder_service.preview.side_effect = HttpError(500, {"message": "Template mancante"})

        assert await controller.start_reminder("x", days_overdue=3) is None
        assert controller.notice.message == "Template mancante"
