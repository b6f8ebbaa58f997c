"""
Controller del dettaglio fattura
Progetto: InvoiceMe (client fatturazione)

Tiene fattura, pagamenti e storico solleciti di una singola fattura,
li carica in parallelo e possiede i cinque workflow delle azioni.
"""

import asyncio
import logging
import uuid
from typing import Optional, Union

from invoiceme.core.deps import AppContext
from invoiceme.core.exceptions import AppException, SessionExpiredError
from invoiceme.schemas.invoice import InvoiceRead
from invoiceme.schemas.payment import PaymentRead
from invoiceme.schemas.reminder import ReminderHistoryRead
from invoiceme.services.invoice_service import InvoiceService
from invoiceme.services.payment_service import PaymentService
from invoiceme.services.reminder_service import ReminderService
from invoiceme.workflows.actions import (
    InvoiceAction,
    InvoicePermissions,
    permissions_for,
    permitted_actions,
)
from invoiceme.workflows.base import Notice
from invoiceme.workflows.cancel import CancelInvoiceWorkflow
from invoiceme.workflows.mark_paid import MarkAsPaidWorkflow
from invoiceme.workflows.record_payment import RecordPaymentWorkflow
from invoiceme.workflows.reminder import SendReminderWorkflow
from invoiceme.workflows.send import SendInvoiceWorkflow

logger = logging.getLogger(__name__)


class InvoiceDetailController:
    """
    Vista di dettaglio di una fattura.

    I permessi sono calcolati a ogni accesso dall'ultima istantanea;
    la fattura cambia solo con una rappresentazione restituita dal server.
    """

    def __init__(
        self,
        ctx: AppContext,
        invoice_id: Union[uuid.UUID, str],
        invoices: Optional[InvoiceService] = None,
        payments: Optional[PaymentService] = None,
        reminders: Optional[ReminderService] = None,
    ) -> None:
        self.ctx = ctx
        self.invoice_id = invoice_id
        self.invoices = invoices or InvoiceService()
        self.payments = payments or PaymentService()
        self.reminders = reminders or ReminderService()

        self.invoice: Optional[InvoiceRead] = None
        self.payment_history: list[PaymentRead] = []
        self.reminder_history: list[ReminderHistoryRead] = []
        self.is_loading = False
        self.notice: Optional[Notice] = None

        self.send = SendInvoiceWorkflow(self)
        self.cancel = CancelInvoiceWorkflow(self)
        self.reminder = SendReminderWorkflow(self)
        self.mark_paid = MarkAsPaidWorkflow(self)
        self.record_payment = RecordPaymentWorkflow(self)

    # Collaboratori usati dai workflow

    @property
    def gateway(self):
        return self.ctx.gateway

    @property
    def navigator(self):
        return self.ctx.navigator

    @property
    def settings(self):
        return self.ctx.settings

    # ------------------------------------------------------------
    # Caricamento
    # ------------------------------------------------------------

    async def refresh(self) -> None:
        """
        Ricarica fattura, pagamenti e solleciti in parallelo.

        Lo storico solleciti è tollerante (lista vuota); un errore nelle
        altre due chiamate fa fallire l'intero gruppo senza modificare
        i dati già mostrati.

        Raises:
            AppException: Errore di una delle chiamate
        """
        invoice, payments, reminders = await asyncio.gather(
            self.invoices.get_by_id(self.gateway, self.invoice_id),
            self.payments.get_by_invoice(self.gateway, self.invoice_id),
            self.reminders.get_history(self.gateway, self.invoice_id),
        )
        self.invoice = invoice
        self.payment_history = payments
        self.reminder_history = reminders

    async def load(self, navigate_on_failure: bool = True) -> bool:
        """
        Primo caricamento della vista.

        Se fallisce registra l'errore e mostra un notice; aperta come
        vista a sé riporta anche alla lista fatture.

        Args:
            navigate_on_failure: False quando il dettaglio è aperto da
                un'altra vista, che resta quella corrente

        Returns:
            True se i dati sono stati caricati
        """
        self.is_loading = True
        try:
            await self.refresh()
        except SessionExpiredError:
            raise
        except AppException as exc:
            logger.error("Caricamento fattura %s fallito: %s", self.invoice_id, exc.detail)
            self.notice = Notice.error("Impossibile caricare la fattura", exc.detail)
            if navigate_on_failure:
                self.navigator.push(self.settings.invoices_path)
            return False
        finally:
            self.is_loading = False
        logger.info(
            "Caricata fattura %s (%s pagamenti, %s solleciti)",
            self.invoice_id, len(self.payment_history), len(self.reminder_history),
        )
        return True

    def apply_invoice(self, invoice: InvoiceRead) -> None:
        """Sostituisce la fattura con la rappresentazione del server."""
        self.invoice = invoice

    # ------------------------------------------------------------
    # Stato derivato
    # ------------------------------------------------------------

    @property
    def permissions(self) -> Optional[InvoicePermissions]:
        if self.invoice is None:
            return None
        return permissions_for(self.invoice)

    @property
    def actions(self) -> list[InvoiceAction]:
        if self.invoice is None:
            return []
        return permitted_actions(self.invoice)

    @property
    def workflows(self) -> tuple:
        return (self.send, self.cancel, self.reminder, self.mark_paid, self.record_payment)

    @property
    def is_processing(self) -> bool:
        return any(workflow.is_processing for workflow in self.workflows)

    @property
    def latest_notice(self) -> Optional[Notice]:
        """Primo notice presente tra vista e workflow."""
        if self.notice is not None:
            return self.notice
        for workflow in self.workflows:
            if workflow.notice is not None:
                return workflow.notice
        return None
