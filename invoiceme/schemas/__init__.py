"""
Schemas Pydantic per il client InvoiceMe

Questo modulo contiene gli schemi usati per validare i form lato client
e per deserializzare le risposte del backend REST.
"""

# Import degli schemi per renderli disponibili tramite import diretto
# es: from invoiceme.schemas import InvoiceRead, CustomerRead, etc.

from invoiceme.schemas.base import (
    ApiSchema,
    JsonDecimal,
    Money,
    parse_response,
    parse_response_list,
    validate_form,
)
from invoiceme.schemas.auth import LoginCredentials, UserInfo
from invoiceme.schemas.customer import (
    AddressSchema,
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
)
from invoiceme.schemas.invoice import (
    CancelInvoiceRequest,
    InvoiceCreate,
    InvoiceFilters,
    InvoiceRead,
    InvoiceStatus,
    InvoiceUpdate,
    LineItemCreate,
    LineItemRead,
)
from invoiceme.schemas.payment import PaymentCreate, PaymentMethod, PaymentRead
from invoiceme.schemas.reminder import (
    OverdueInvoiceSummary,
    OverdueSeverity,
    OverdueSummaryStats,
    ReminderHistoryRead,
    ReminderPreview,
    ReminderSentResponse,
    ReminderType,
    SendReminderRequest,
)
from invoiceme.schemas.chat import (
    ChatMessage,
    ChatMessageRequest,
    ChatMessageResponse,
    ChatSender,
)
from invoiceme.schemas.dashboard import (
    DashboardMetrics,
    RevenueTrendPoint,
    StatusBreakdownEntry,
)

# Export degli schemas
__all__ = [
    # Base
    "ApiSchema",
    "JsonDecimal",
    "Money",
    "validate_form",
    "parse_response",
    "parse_response_list",
    # Auth
    "LoginCredentials",
    "UserInfo",
    # Customer
    "AddressSchema",
    "CustomerCreate",
    "CustomerRead",
    "CustomerUpdate",
    # Invoice
    "CancelInvoiceRequest",
    "InvoiceCreate",
    "InvoiceFilters",
    "InvoiceRead",
    "InvoiceStatus",
    "InvoiceUpdate",
    "LineItemCreate",
    "LineItemRead",
    # Payment
    "PaymentCreate",
    "PaymentMethod",
    "PaymentRead",
    # Reminder
    "OverdueInvoiceSummary",
    "OverdueSeverity",
    "OverdueSummaryStats",
    "ReminderHistoryRead",
    "ReminderPreview",
    "ReminderSentResponse",
    "ReminderType",
    "SendReminderRequest",
    # Chat
    "ChatMessage",
    "ChatMessageRequest",
    "ChatMessageResponse",
    "ChatSender",
    # Dashboard
    "DashboardMetrics",
    "RevenueTrendPoint",
    "StatusBreakdownEntry",
]
