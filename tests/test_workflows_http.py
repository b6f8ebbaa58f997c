"""
Test dei workflow con il gateway reale su httpx.MockTransport.

Le risposte hanno la forma restituita dal backend: fattura senza
`customerEmail`, conferma di sollecito `{reminderId, message}`,
storico con `emailBody`/`sentAt`.
"""

import httpx
import pytest

from conftest import INVOICE_ID, make_invoice_data, make_overdue_data, make_payment_data
from invoiceme.core.deps import AppContext
from invoiceme.schemas.invoice import InvoiceStatus
from invoiceme.workflows.base import NoticeLevel
from invoiceme.workflows.cancel import CancelState
from invoiceme.workflows.detail import InvoiceDetailController
from invoiceme.workflows.overdue import OverdueRemindersController
from invoiceme.workflows.reminder import ReminderState
from invoiceme.workflows.send import SendState

INVOICE_PATH = f"/api/invoices/{INVOICE_ID}"
PAYMENTS_PATH = f"/api/payments/invoice/{INVOICE_ID}"
HISTORY_PATH = f"/api/reminders/history/{INVOICE_ID}"
PREVIEW_PATH = f"/api/reminders/preview/{INVOICE_ID}"


def backend_invoice(**overrides):
    """Fattura come la serializza il backend: niente email del cliente."""
    data = make_invoice_data(
        cancellationReason=None,
        remindersSuppressed=False,
        lastReminderSentAt=None,
        createdAt="2025-01-05T09:00:00",
        updatedAt="2025-01-05T09:00:00",
        overdue=False,
    )
    del data["customerEmail"]
    data.update(overrides)
    return data


def backend_reminder_email(**overrides):
    """Voce di storico come la serializza il backend."""
    data = {
        "id": "44444444-4444-4444-4444-444444444444",
        "invoiceId": str(INVOICE_ID),
        "recipientEmail": "billing@acme.com",
        "subject": "Promemoria di pagamento",
        "emailBody": "La fattura INV-0001 risulta scaduta.",
        "reminderType": "OVERDUE_7_DAYS",
        "status": "SENT",
        "sentAt": "2025-02-12T08:00:00",
    }
    data.update(overrides)
    return data


class Routes:
    """Backend fittizio con risposte per (metodo, percorso)."""

    def __init__(self):
        self.replies: dict[tuple[str, str], tuple[int, object]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, body=None, status: int = 200) -> None:
        self.replies[(method, path)] = (status, body)

    def calls(self, method: str, path: str) -> int:
        return sum(
            1 for request in self.requests
            if request.method == method and request.url.path == path
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.replies.get(
            (request.method, request.url.path), (404, {"message": "Not found"})
        )
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


@pytest.fixture
def routes():
    routes = Routes()
    routes.on("GET", INVOICE_PATH, backend_invoice())
    routes.on("GET", PAYMENTS_PATH, [])
    routes.on("GET", HISTORY_PATH, [])
    return routes


@pytest.fixture
async def http_ctx(settings, session, navigator, make_gateway, routes):
    """Contesto con gateway reale instradato su `routes`."""
    async with make_gateway(routes) as gateway:
        yield AppContext(
            settings=settings,
            session=session,
            navigator=navigator,
            gateway=gateway,
        )


@pytest.fixture
def detail(http_ctx) -> InvoiceDetailController:
    return InvoiceDetailController(http_ctx, INVOICE_ID)


# ============================================================
# Caricamento
# ============================================================


class TestDetailLoadOverHttp:

    async def test_backend_invoice_loads(self, detail, routes):
        routes.on("GET", PAYMENTS_PATH, [make_payment_data()])
        routes.on("GET", HISTORY_PATH, [backend_reminder_email()])

        assert await detail.load() is True

        assert detail.invoice.customer_email is None
        assert detail.invoice.recipient == "Acme Corp"
        assert len(detail.payment_history) == 1
        assert detail.reminder_history[0].message == "La fattura INV-0001 risulta scaduta."
        assert detail.reminder_history[0].sent_date is not None

    async def test_malformed_invoice_routes_back_with_error(self, detail, routes, http_ctx):
        routes.on("GET", INVOICE_PATH, {"id": str(INVOICE_ID), "status": "DRAFT"})
        http_ctx.navigator.push(f"/invoices/{INVOICE_ID}")

        assert await detail.load() is False

        assert detail.invoice is None
        assert detail.notice.level == NoticeLevel.ERROR
        assert http_ctx.navigator.current_path == http_ctx.settings.invoices_path
        assert detail.is_loading is False


# ============================================================
# Azioni
# ============================================================


class TestReminderOverHttp:

    async def test_send_reminder_end_to_end(self, detail, routes):
        routes.on("GET", INVOICE_PATH, backend_invoice(status="SENT"))
        routes.on("GET", PREVIEW_PATH, {
            "subject": "Promemoria di pagamento",
            "emailBody": "Gentile cliente...",
            "recipientEmail": "billing@acme.com",
        })
        routes.on("POST", "/api/reminders/send", {
            "reminderId": "44444444-4444-4444-4444-444444444444",
            "message": "Reminder sent successfully",
        }, status=201)
        await detail.load()

        assert await detail.reminder.open_preview() is True
        assert detail.reminder.preview.message == "Gentile cliente..."

        routes.on("GET", HISTORY_PATH, [backend_reminder_email()])
        assert await detail.reminder.confirm() is True

        assert detail.reminder.state == ReminderState.IDLE
        assert detail.reminder.notice.level == NoticeLevel.SUCCESS
        assert "Acme Corp" in detail.reminder.notice.details
        assert len(detail.reminder_history) == 1
        assert routes.calls("GET", HISTORY_PATH) == 2


class TestMalformedReplies:

    async def test_send_invoice_returns_to_preview(self, detail, routes):
        routes.on("POST", f"{INVOICE_PATH}/send", {"result": "ok"})
        await detail.load()
        detail.send.open_preview()

        assert await detail.send.confirm() is False

        assert detail.send.state == SendState.PREVIEW_OPEN
        assert detail.send.is_processing is False
        assert detail.send.notice.level == NoticeLevel.ERROR
        assert detail.invoice.status == InvoiceStatus.DRAFT

    async def test_cancel_returns_to_email_preview(self, detail, routes):
        routes.on("GET", INVOICE_PATH, backend_invoice(status="SENT"))
        routes.on("POST", f"{INVOICE_PATH}/cancel", ["non", "una", "fattura"])
        await detail.load()
        detail.cancel.start()
        await detail.cancel.submit_reason("billing_error")

        assert await detail.cancel.confirm() is False

        assert detail.cancel.state == CancelState.EMAIL_PREVIEW
        assert detail.cancel.notice.level == NoticeLevel.ERROR
        assert detail.invoice.status == InvoiceStatus.SENT

    async def test_malformed_refresh_keeps_action_with_warning(self, detail, routes):
        await detail.load()
        routes.on("POST", f"{INVOICE_PATH}/send", backend_invoice(status="SENT"))
        routes.on("GET", PAYMENTS_PATH, {"unexpected": True})
        detail.send.open_preview()

        assert await detail.send.confirm() is True

        assert detail.send.state == SendState.IDLE
        assert detail.send.notice.level == NoticeLevel.WARNING
        assert detail.invoice.status == InvoiceStatus.SENT


# ============================================================
# Lista solleciti
# ============================================================


class TestOverdueOverHttp:

    @pytest.fixture
    def overdue(self, http_ctx, routes):
        routes.on("GET", "/api/reminders/overdue", [
            make_overdue_data(20, invoiceId=str(INVOICE_ID), invoiceNumber="INV-0001")
        ])
        return OverdueRemindersController(http_ctx)

    async def test_failed_invoice_load_stays_on_the_list(self, overdue, routes, http_ctx):
        http_ctx.navigator.push("/reminders")
        routes.on("GET", INVOICE_PATH, {"message": "Invoice not found"}, status=404)
        await overdue.load()

        assert await overdue.start_reminder(INVOICE_ID, days_overdue=20) is None

        assert http_ctx.navigator.current_path == "/reminders"
        assert overdue.notice.level == NoticeLevel.ERROR
        assert overdue.notice.message == "Invoice not found"

    async def test_confirm_reminder_refetches_the_list(self, overdue, routes):
        routes.on("GET", INVOICE_PATH, backend_invoice(status="SENT"))
        routes.on("GET", PREVIEW_PATH, {
            "subject": "Promemoria",
            "emailBody": "...",
            "recipientEmail": "billing@acme.com",
        })
        routes.on("POST", "/api/reminders/send", {"reminderId": None, "message": "ok"}, status=201)
        await overdue.load()
        detail = await overdue.start_reminder(INVOICE_ID, days_overdue=20)

        routes.on("GET", "/api/reminders/overdue", [])
        assert await overdue.confirm_reminder(detail) is True

        assert routes.calls("GET", "/api/reminders/overdue") == 2
        assert overdue.overdue == []
        assert overdue.notice.level == NoticeLevel.SUCCESS

    async def test_list_refetch_failure_is_a_warning(self, overdue, routes):
        routes.on("GET", INVOICE_PATH, backend_invoice(status="SENT"))
        routes.on("GET", PREVIEW_PATH, {
            "subject": "Promemoria",
            "emailBody": "...",
            "recipientEmail": "billing@acme.com",
        })
        routes.on("POST", "/api/reminders/send", {"message": "ok"}, status=201)
        await overdue.load()
        detail = await overdue.start_reminder(INVOICE_ID, days_overdue=20)

        routes.on("GET", "/api/reminders/overdue", {"message": "boom"}, status=500)
        assert await overdue.confirm_reminder(detail) is True

        assert overdue.notice.level == NoticeLevel.WARNING
        assert len(overdue.overdue) == 1
