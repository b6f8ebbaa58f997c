"""
Controller della lista solleciti (fatture scadute)
Progetto: InvoiceMe (client fatturazione)
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from invoiceme.core.deps import AppContext
from invoiceme.core.exceptions import AppException, SessionExpiredError
from invoiceme.schemas.reminder import (
    OverdueInvoiceSummary,
    OverdueSeverity,
    OverdueSummaryStats,
)
from invoiceme.services.invoice_service import InvoiceService
from invoiceme.services.metrics_service import overdue_severity, overdue_summary
from invoiceme.services.payment_service import PaymentService
from invoiceme.services.reminder_service import ReminderService
from invoiceme.workflows.base import REFRESH_WARNING_TITLE, Notice
from invoiceme.workflows.detail import InvoiceDetailController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverdueRow:
    """Riga della lista con il badge di gravità."""

    summary: OverdueInvoiceSummary
    severity: OverdueSeverity


class OverdueRemindersController:
    """Lista delle fatture scadute e avvio dei solleciti."""

    def __init__(
        self,
        ctx: AppContext,
        invoices: Optional[InvoiceService] = None,
        payments: Optional[PaymentService] = None,
        reminders: Optional[ReminderService] = None,
    ) -> None:
        self.ctx = ctx
        self.invoices = invoices or InvoiceService()
        self.payments = payments or PaymentService()
        self.reminders = reminders or ReminderService()
        self.overdue: list[OverdueInvoiceSummary] = []
        self.is_loading = False
        self.notice: Optional[Notice] = None

    async def load(self) -> bool:
        """Carica le fatture scadute; in caso di errore mantiene la lista precedente."""
        self.is_loading = True
        try:
            self.overdue = await self.reminders.get_overdue(self.ctx.gateway)
        except SessionExpiredError:
            raise
        except AppException as exc:
            logger.error("Caricamento fatture scadute fallito: %s", exc.detail)
            self.notice = Notice.error("Impossibile caricare le fatture scadute", exc.detail)
            return False
        finally:
            self.is_loading = False
        return True

    @property
    def rows(self) -> list[OverdueRow]:
        return [OverdueRow(item, overdue_severity(item.days_overdue)) for item in self.overdue]

    @property
    def stats(self) -> OverdueSummaryStats:
        return overdue_summary(self.overdue)

    async def start_reminder(
        self,
        invoice_id: Union[uuid.UUID, str],
        days_overdue: int,
    ) -> Optional[InvoiceDetailController]:
        """
        Carica la fattura e apre l'anteprima del sollecito.

        Il tipo viene scelto dai giorni di ritardo. Se la fattura non si carica
        si resta sulla lista, con l'errore in `notice`.

        Returns:
            Il controller del dettaglio con l'anteprima aperta, o None
            se fattura o anteprima non sono disponibili (vedi `notice`)
        """
        detail = InvoiceDetailController(
            self.ctx,
            invoice_id,
            invoices=self.invoices,
            payments=self.payments,
            reminders=self.reminders,
        )
        if not await detail.load(navigate_on_failure=False):
            self.notice = detail.notice
            return None
        if not await detail.reminder.open_preview(days_overdue=days_overdue):
            self.notice = detail.reminder.notice
            return None
        return detail

    async def confirm_reminder(self, detail: InvoiceDetailController) -> bool:
        """
        Invia il sollecito aperto con `start_reminder` e ricarica la lista.

        Giorni di ritardo e ultimo sollecito sono calcolati dal server:
        dopo l'invio la lista va riletta. Se la rilettura fallisce il
        sollecito resta inviato e il notice diventa un avviso.

        Returns:
            True se il sollecito è stato inviato
        """
        if not await detail.reminder.confirm():
            self.notice = detail.reminder.notice
            return False

        sent = detail.reminder.notice
        if not await self.load():
            self.notice = Notice.warning(
                REFRESH_WARNING_TITLE,
                "Il sollecito è stato inviato, ma non è stato possibile "
                "ricaricare la lista delle fatture scadute.",
                f"{sent.title}: {sent.message}" if sent else "",
            )
            return True
        self.notice = sent
        return True
