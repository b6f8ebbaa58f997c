"""
Schemas Pydantic per la Dashboard
Progetto: InvoiceMe (client fatturazione)

Metriche derivate, ricalcolate a ogni caricamento e mai persistite.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from invoiceme.schemas.invoice import InvoiceRead, InvoiceStatus
from invoiceme.schemas.payment import PaymentRead
from invoiceme.schemas.reminder import OverdueInvoiceSummary


class RevenueTrendPoint(BaseModel):
    """Incasso di un singolo giorno (data ISO)."""

    date: str = Field(..., description="Giorno in formato YYYY-MM-DD")
    revenue: Decimal = Field(default=Decimal("0"), description="Somma dei pagamenti del giorno")


class StatusBreakdownEntry(BaseModel):
    """Voce del grafico per stato (solo stati con almeno una fattura)."""

    status: InvoiceStatus
    count: int


class DashboardMetrics(BaseModel):
    """Aggregato delle metriche mostrate in dashboard."""

    total_revenue: Decimal = Field(default=Decimal("0"), description="Totale fatture PAID")
    total_invoices: int = Field(default=0, description="Numero complessivo di fatture")
    status_counts: dict[InvoiceStatus, int] = Field(default_factory=dict)
    status_percentages: dict[InvoiceStatus, float] = Field(default_factory=dict)
    status_breakdown: list[StatusBreakdownEntry] = Field(default_factory=list)
    recent_invoices: list[InvoiceRead] = Field(default_factory=list)
    recent_payments: list[PaymentRead] = Field(default_factory=list)
    revenue_trend: list[RevenueTrendPoint] = Field(default_factory=list)
    overdue_invoices: list[OverdueInvoiceSummary] = Field(default_factory=list)


__all__ = [
    "RevenueTrendPoint",
    "StatusBreakdownEntry",
    "DashboardMetrics",
]
