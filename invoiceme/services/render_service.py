"""
Service per la resa testuale delle viste con Jinja2.
Progetto: InvoiceMe (client fatturazione)

I template in `invoiceme/templates` producono il testo mostrato dalla
riga di comando; gli helper di `core.formatting` sono registrati come filtri.
"""

import logging
import os
from typing import Any, Iterable, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from invoiceme.core import formatting
from invoiceme.schemas.customer import CustomerRead
from invoiceme.schemas.dashboard import DashboardMetrics
from invoiceme.schemas.invoice import InvoiceRead
from invoiceme.schemas.reminder import ReminderPreview
from invoiceme.workflows.base import Notice
from invoiceme.workflows.chat import ChatAssistant
from invoiceme.workflows.detail import InvoiceDetailController
from invoiceme.workflows.overdue import OverdueRemindersController

logger = logging.getLogger(__name__)

# Path alla cartella templates
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TEMPLATES_DIR = os.path.join(BASE_DIR, "templates")


class RenderService:
    """
    Rende le viste come testo semplice.

    La valuta di visualizzazione è fissata alla creazione e usata dal
    filtro `currency`.
    """

    def __init__(self, currency: str = "USD"):
        self.currency = currency
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters.update(
            currency=self._currency,
            date=formatting.format_date,
            datetime=formatting.format_date_time,
            status=formatting.format_invoice_status,
            method=formatting.format_payment_method,
            reminder_type=formatting.format_reminder_type,
            percentage=formatting.format_percentage,
        )

    def _currency(self, amount: Any) -> str:
        return formatting.format_currency(amount, self.currency)

    def render(self, template_name: str, **context: Any) -> str:
        """Rende un template con il contesto dato."""
        logger.debug("Rendering template %s", template_name)
        return self.env.get_template(template_name).render(**context)

    # ------------------------------------------------------------
    # Viste
    # ------------------------------------------------------------

    def dashboard(self, metrics: DashboardMetrics) -> str:
        return self.render("dashboard.txt.j2", metrics=metrics)

    def invoice_list(self, invoices: Iterable[InvoiceRead]) -> str:
        return self.render("invoice_list.txt.j2", invoices=list(invoices))

    def invoice_detail(self, detail: InvoiceDetailController) -> str:
        return self.render(
            "invoice_detail.txt.j2",
            invoice=detail.invoice,
            payments=detail.payment_history,
            reminders=detail.reminder_history,
            actions=detail.actions,
        )

    def customer_list(self, customers: Iterable[CustomerRead]) -> str:
        return self.render("customer_list.txt.j2", customers=list(customers))

    def customer_detail(self, customer: CustomerRead, invoices: Iterable[InvoiceRead] = ()) -> str:
        return self.render("customer_detail.txt.j2", customer=customer, invoices=list(invoices))

    def overdue_list(self, controller: OverdueRemindersController) -> str:
        return self.render("overdue_list.txt.j2", rows=controller.rows, stats=controller.stats)

    def send_preview(self, invoice: InvoiceRead) -> str:
        return self.render("send_preview.txt.j2", invoice=invoice)

    def cancel_preview(self, invoice: InvoiceRead, reason: str) -> str:
        return self.render("cancel_preview.txt.j2", invoice=invoice, reason=reason)

    def reminder_preview(self, preview: ReminderPreview, reminder_type: Any) -> str:
        return self.render("reminder_preview.txt.j2", preview=preview, reminder_type=reminder_type)

    def chat(self, assistant: ChatAssistant) -> str:
        return self.render(
            "chat.txt.j2",
            messages=assistant.messages,
            suggestions=assistant.suggestions,
        )

    def notice(self, notice: Optional[Notice]) -> str:
        if notice is None:
            return ""
        return self.render("notice.txt.j2", notice=notice)
