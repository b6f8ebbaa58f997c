"""
Metriche derivate per dashboard e lista solleciti
Progetto: InvoiceMe (client fatturazione)

Funzioni pure su istantanee già scaricate: ricalcolate a ogni caricamento,
mai salvate. `DashboardService` si limita a scaricare i dati in parallelo
e ad applicarle.
"""

import asyncio
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from invoiceme.core.config import Settings
from invoiceme.core.gateway import RestGateway
from invoiceme.schemas.dashboard import (
    DashboardMetrics,
    RevenueTrendPoint,
    StatusBreakdownEntry,
)
from invoiceme.schemas.invoice import InvoiceRead, InvoiceStatus
from invoiceme.schemas.payment import PaymentRead
from invoiceme.schemas.reminder import (
    OverdueInvoiceSummary,
    OverdueSeverity,
    OverdueSummaryStats,
)
from invoiceme.services.invoice_service import InvoiceService
from invoiceme.services.payment_service import PaymentService
from invoiceme.services.reminder_service import ReminderService

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Soglie di gravità (giorni di ritardo), dalla più alta
SEVERITY_THRESHOLDS: tuple[tuple[int, OverdueSeverity], ...] = (
    (30, OverdueSeverity.CRITICAL),
    (14, OverdueSeverity.HIGH),
    (7, OverdueSeverity.MEDIUM),
)

# Ordine degli stati nel grafico
STATUS_CHART_ORDER = (
    InvoiceStatus.PAID,
    InvoiceStatus.SENT,
    InvoiceStatus.DRAFT,
    InvoiceStatus.CANCELLED,
)


# ------------------------------------------------------------
# Funzioni pure
# ------------------------------------------------------------

def total_revenue(invoices: Iterable[InvoiceRead]) -> Decimal:
    """Somma di totalAmount delle sole fatture PAID (0 se nessuna)."""
    return sum(
        (invoice.total_amount for invoice in invoices if invoice.status == InvoiceStatus.PAID),
        Decimal("0"),
    )


def status_counts(invoices: Iterable[InvoiceRead]) -> dict[InvoiceStatus, int]:
    """Numero di fatture per stato (tutti gli stati presenti, anche a zero)."""
    counts = {status: 0 for status in InvoiceStatus}
    for invoice in invoices:
        counts[invoice.status] += 1
    return counts


def status_percentages(invoices: Sequence[InvoiceRead]) -> dict[InvoiceStatus, float]:
    """Percentuale per stato; 0 per tutti gli stati se la lista è vuota."""
    total = len(invoices)
    counts = status_counts(invoices)
    if total == 0:
        return {status: 0.0 for status in InvoiceStatus}
    return {status: count / total * 100 for status, count in counts.items()}


def recent_invoices(invoices: Iterable[InvoiceRead], n: int = 5) -> list[InvoiceRead]:
    """Le `n` fatture con data di emissione più recente."""
    return sorted(invoices, key=lambda invoice: invoice.issue_date, reverse=True)[:n]


def recent_payments(payments: Iterable[PaymentRead], n: int = 5) -> list[PaymentRead]:
    """I `n` pagamenti con data più recente."""
    return sorted(payments, key=lambda payment: payment.payment_date, reverse=True)[:n]


def revenue_trend(
    payments: Sequence[PaymentRead],
    days: int = 7,
    today: Optional[date] = None,
) -> list[RevenueTrendPoint]:
    """
    Incassi giornalieri degli ultimi `days` giorni, dal più vecchio a oggi.

    Un pagamento è assegnato al giorno se la sua data ISO inizia con
    la data ISO del giorno.
    """
    today = today or date.today()
    points = []
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        revenue = sum(
            (
                payment.payment_amount
                for payment in payments
                if payment.payment_date.isoformat().startswith(day)
            ),
            Decimal("0"),
        )
        points.append(RevenueTrendPoint(date=day, revenue=revenue))
    return points


def overdue_severity(days_overdue: int) -> OverdueSeverity:
    """Gravità del ritardo: vince la prima soglia superata, dalla più alta."""
    for threshold, severity in SEVERITY_THRESHOLDS:
        if days_overdue >= threshold:
            return severity
    return OverdueSeverity.LOW


def overdue_summary(overdue: Sequence[OverdueInvoiceSummary]) -> OverdueSummaryStats:
    """Totale da incassare e conteggi per le fatture scadute."""
    return OverdueSummaryStats(
        count=len(overdue),
        total_outstanding=sum((item.balance_remaining for item in overdue), Decimal("0")),
        over_7_days=sum(1 for item in overdue if item.days_overdue >= 7),
        over_30_days=sum(1 for item in overdue if item.days_overdue >= 30),
    )


def status_breakdown(invoices: Sequence[InvoiceRead]) -> list[StatusBreakdownEntry]:
    """Voci del grafico per stato, senza gli stati a zero."""
    counts = status_counts(invoices)
    return [
        StatusBreakdownEntry(status=status, count=counts[status])
        for status in STATUS_CHART_ORDER
        if counts[status] > 0
    ]


# ------------------------------------------------------------
# Dashboard
# ------------------------------------------------------------

class DashboardService:
    """Carica i dati della dashboard e ne calcola le metriche."""

    def __init__(
        self,
        invoices: Optional[InvoiceService] = None,
        payments: Optional[PaymentService] = None,
        reminders: Optional[ReminderService] = None,
    ) -> None:
        self.invoices = invoices or InvoiceService()
        self.payments = payments or PaymentService()
        self.reminders = reminders or ReminderService()

    async def load(
        self,
        gateway: RestGateway,
        settings: Optional[Settings] = None,
        today: Optional[date] = None,
    ) -> DashboardMetrics:
        """
        Scarica fatture, pagamenti e scadute in parallelo.

        Un errore in una delle tre chiamate fa fallire l'intero caricamento.
        """
        recent_limit = settings.recent_items_limit if settings else 5
        trend_days = settings.revenue_trend_days if settings else 7

        invoices, payments, overdue = await asyncio.gather(
            self.invoices.get_all(gateway),
            self.payments.get_all(gateway),
            self.reminders.get_overdue(gateway),
        )

        metrics = DashboardMetrics(
            total_revenue=total_revenue(invoices),
            total_invoices=len(invoices),
            status_counts=status_counts(invoices),
            status_percentages=status_percentages(invoices),
            status_breakdown=status_breakdown(invoices),
            recent_invoices=recent_invoices(invoices, recent_limit),
            recent_payments=recent_payments(payments, recent_limit),
            revenue_trend=revenue_trend(payments, trend_days, today),
            overdue_invoices=overdue,
        )
        logger.info(
            "Dashboard: %s fatture, %s pagamenti, %s scadute",
            len(invoices), len(payments), len(overdue),
        )
        return metrics


dashboard_service = DashboardService()
