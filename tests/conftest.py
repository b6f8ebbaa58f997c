"""
Pytest configuration and fixtures per il client InvoiceMe.

Le risposte del backend sono dizionari camelCase costruiti dalle factory
qui sotto; l'HTTP è simulato con httpx.MockTransport e i servizi, dove
serve, con AsyncMock.
"""

import uuid
from datetime import date, timedelta
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from invoiceme.core.config import Settings, get_settings
from invoiceme.core.deps import AppContext
from invoiceme.core.gateway import RestGateway
from invoiceme.core.navigation import Navigator
from invoiceme.core.session import CredentialStore, SessionState
from invoiceme.schemas.invoice import InvoiceRead
from invoiceme.schemas.payment import PaymentRead
from invoiceme.services.invoice_service import InvoiceService
from invoiceme.services.payment_service import PaymentService
from invoiceme.services.reminder_service import ReminderService
from invoiceme.workflows.detail import InvoiceDetailController

BASE_URL = "http://testserver/api"
INVOICE_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
CUSTOMER_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


# ============================================================
# Factory per i dati del backend (camelCase)
# ============================================================


def make_invoice_data(**overrides: Any) -> dict[str, Any]:
    """Fattura DRAFT da 110.00 (100.00 + 10.00 di tasse), nulla pagato."""
    data = {
        "id": str(INVOICE_ID),
        "invoiceNumber": "INV-0001",
        "customerId": str(CUSTOMER_ID),
        "customerName": "Acme Corp",
        "customerEmail": "billing@acme.test",
        "issueDate": "2025-01-05",
        "dueDate": "2025-02-04",
        "status": "DRAFT",
        "subtotal": 100.00,
        "taxAmount": 10.00,
        "totalAmount": 110.00,
        "amountPaid": 0,
        "balanceRemaining": 110.00,
        "allowsPartialPayment": True,
        "paymentLink": None,
        "lineItems": [
            {
                "id": str(uuid.uuid4()),
                "description": "Consulenza",
                "quantity": 2,
                "unitPrice": 50.00,
                "lineTotal": 100.00,
            }
        ],
        "notes": None,
        "terms": None,
    }
    data.update(overrides)
    return data


def make_invoice(**overrides: Any) -> InvoiceRead:
    return InvoiceRead.model_validate(make_invoice_data(**overrides))


def make_payment_data(**overrides: Any) -> dict[str, Any]:
    data = {
        "id": str(uuid.uuid4()),
        "invoiceId": str(INVOICE_ID),
        "invoiceNumber": "INV-0001",
        "paymentAmount": 50.00,
        "paymentDate": "2025-01-10",
        "paymentMethod": "BANK_TRANSFER",
        "transactionReference": None,
        "notes": None,
        "createdAt": "2025-01-10T09:30:00",
    }
    data.update(overrides)
    return data


def make_payment(**overrides: Any) -> PaymentRead:
    return PaymentRead.model_validate(make_payment_data(**overrides))


def make_customer_data(**overrides: Any) -> dict[str, Any]:
    address = {
        "street": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "postalCode": "62701",
        "country": "USA",
    }
    data = {
        "id": str(CUSTOMER_ID),
        "businessName": "Acme Corp",
        "contactName": "Jane Doe",
        "email": "jane@acme.test",
        "phone": None,
        "billingAddress": address,
        "shippingAddress": None,
        "active": True,
        "createdAt": "2025-01-01T10:00:00",
        "updatedAt": "2025-01-01T10:00:00",
    }
    data.update(overrides)
    return data


def make_reminder_data(**overrides: Any) -> dict[str, Any]:
    data = {
        "id": str(uuid.uuid4()),
        "invoiceId": str(INVOICE_ID),
        "invoiceNumber": "INV-0001",
        "reminderType": "OVERDUE_7_DAYS",
        "sentDate": "2025-02-12T08:00:00",
        "recipientEmail": "billing@acme.test",
        "subject": "Promemoria di pagamento",
        "message": "La fattura INV-0001 risulta scaduta.",
    }
    data.update(overrides)
    return data


def make_overdue_data(days_overdue: int = 10, **overrides: Any) -> dict[str, Any]:
    due = date.today() - timedelta(days=days_overdue)
    data = {
        "invoiceId": str(uuid.uuid4()),
        "invoiceNumber": "INV-0100",
        "customerName": "Acme Corp",
        "dueDate": due.isoformat(),
        "totalAmount": 110.00,
        "balanceRemaining": 110.00,
        "daysOverdue": days_overdue,
    }
    data.update(overrides)
    return data


# ============================================================
# Fixtures per configurazione, sessione e gateway
# ============================================================


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Resetta la cache di get_settings tra un test e l'altro."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings di test con file di sessione temporaneo."""
    return Settings(
        _env_file=None,
        api_base_url=BASE_URL,
        session_file=tmp_path / "session.json",
    )


@pytest.fixture
def session(settings) -> SessionState:
    """Sessione caricata con un utente già collegato."""
    state = SessionState(CredentialStore(settings.session_file))
    state.hydrate()
    state.login("admin", "secret")
    return state


@pytest.fixture
def navigator() -> Navigator:
    return Navigator("/invoices")


@pytest.fixture
def make_gateway(settings, session, navigator) -> Callable[..., RestGateway]:
    """Factory di gateway su MockTransport."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> RestGateway:
        return RestGateway(settings, session, navigator, transport=httpx.MockTransport(handler))

    return factory


# ============================================================
# Fixtures per servizi mock e controller
# ============================================================


@pytest.fixture
def mock_ctx(settings, session, navigator) -> AppContext:
    """Contesto con gateway fittizio (i servizi sono mock)."""
    return AppContext(
        settings=settings,
        session=session,
        navigator=navigator,
        gateway=MagicMock(spec=RestGateway),
    )


@pytest.fixture
def mock_invoice_service():
    return AsyncMock(spec=InvoiceService)


@pytest.fixture
def mock_payment_service():
    service = AsyncMock(spec=PaymentService)
    service.get_by_invoice.return_value = []
    return service


@pytest.fixture
def mock_reminder_service():
    service = AsyncMock(spec=ReminderService)
    service.get_history.return_value = []
    return service


@pytest.fixture
def make_detail(mock_ctx, mock_invoice_service, mock_payment_service, mock_reminder_service):
    """
    Factory di InvoiceDetailController già caricato.

    La fattura passata è restituita da get_by_id.
    """

    async def factory(invoice: InvoiceRead) -> InvoiceDetailController:
        mock_invoice_service.get_by_id.return_value = invoice
        detail = InvoiceDetailController(
            mock_ctx,
            invoice.id,
            invoices=mock_invoice_service,
            payments=mock_payment_service,
            reminders=mock_reminder_service,
        )
        assert await detail.load()
        return detail

    return factory
