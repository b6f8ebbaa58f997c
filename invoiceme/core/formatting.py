"""
Helper di formattazione per la visualizzazione
Progetto: InvoiceMe (client fatturazione)

Importi e date sono mostrati nel formato statunitense usato dal backend
(`$1,234.56`, `Jan 05, 2025`). Le funzioni sono registrate anche come
filtri Jinja2 in `render_service`.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

DateLike = Union[str, date, datetime]

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}

INVOICE_STATUS_LABELS = {
    "DRAFT": "Draft",
    "SENT": "Sent",
    "PAID": "Paid",
    "CANCELLED": "Cancelled",
}

PAYMENT_METHOD_LABELS = {
    "CREDIT_CARD": "Credit Card",
    "BANK_TRANSFER": "Bank Transfer",
    "CHECK": "Check",
    "CASH": "Cash",
    "OTHER": "Other",
}

REMINDER_TYPE_LABELS = {
    "BEFORE_DUE": "Before Due Date",
    "ON_DUE_DATE": "On Due Date",
    "OVERDUE_7_DAYS": "7 Days Overdue",
    "OVERDUE_14_DAYS": "14 Days Overdue",
    "OVERDUE_30_DAYS": "30 Days Overdue",
}


def _to_datetime(value: DateLike) -> datetime:
    """Converte stringa ISO, date o datetime in datetime."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(value)


def _code(value: object) -> str:
    # Enum str o stringa semplice
    return getattr(value, "value", value)  # type: ignore[return-value]


def format_currency(amount: Union[Decimal, float, int], currency: str = "USD") -> str:
    """
    Formatta un importo con simbolo valuta e separatore delle migliaia.

    Example:
        format_currency(Decimal("1234.5")) -> "$1,234.50"
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    symbol = _CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_date(value: DateLike) -> str:
    """Data leggibile, es. `Jan 05, 2025`."""
    dt = _to_datetime(value)
    return f"{_MONTHS[dt.month - 1]} {dt.day:02d}, {dt.year}"


def format_date_time(value: DateLike) -> str:
    """Data e ora, es. `Jan 05, 2025 03:30 PM`."""
    dt = _to_datetime(value)
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{format_date(dt)} {hour:02d}:{dt.minute:02d} {suffix}"


def format_date_for_input(value: DateLike) -> str:
    """Data nel formato dei campi input (YYYY-MM-DD)."""
    return _to_datetime(value).date().isoformat()


def calculate_days_until(due_date: DateLike, today: Optional[date] = None) -> int:
    """Giorni alla scadenza (negativi se già scaduta)."""
    today = today or date.today()
    return (_to_datetime(due_date).date() - today).days


def format_invoice_status(status: object) -> str:
    code = _code(status)
    return INVOICE_STATUS_LABELS.get(code, code)


def format_payment_method(method: object) -> str:
    code = _code(method)
    return PAYMENT_METHOD_LABELS.get(code, code)


def format_reminder_type(reminder_type: object) -> str:
    code = _code(reminder_type)
    return REMINDER_TYPE_LABELS.get(code, code)


def format_percentage(value: Union[float, Decimal]) -> str:
    """Percentuale con due decimali, es. `12.50%`."""
    return f"{float(value):.2f}%"
