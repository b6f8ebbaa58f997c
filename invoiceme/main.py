"""
Entry point della riga di comando
Progetto: InvoiceMe (client fatturazione)

Ogni sottocomando corrisponde a una vista o a un'azione del client.
I comandi protetti passano dalla guardia di sessione; gli errori vengono
stampati come notice e restituiscono exit code 1.
"""

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Optional

from invoiceme.core.config import Settings, get_settings
from invoiceme.core.deps import AppContext, app_context
from invoiceme.core.exceptions import AppException, SessionExpiredError
from invoiceme.core.navigation import GuardOutcome, guard_protected_view
from invoiceme.schemas.invoice import InvoiceFilters, InvoiceStatus
from invoiceme.schemas.payment import PaymentMethod
from invoiceme.schemas.reminder import ReminderType
from invoiceme.services.auth_service import auth_service
from invoiceme.services.customer_service import customer_service, filter_customers
from invoiceme.services.invoice_service import invoice_service
from invoiceme.services.metrics_service import dashboard_service
from invoiceme.services.render_service import RenderService
from invoiceme.workflows.base import Notice
from invoiceme.workflows.cancel import CANCELLATION_REASONS, CancelState
from invoiceme.workflows.chat import ERROR_MESSAGE as CHAT_ERROR_MESSAGE, ChatAssistant
from invoiceme.workflows.detail import InvoiceDetailController
from invoiceme.workflows.overdue import OverdueRemindersController

logger = logging.getLogger(__name__)


def _emit(text: str) -> None:
    if text:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")


def _fail(renderer: RenderService, notice: Optional[Notice]) -> int:
    """Stampa il notice di errore e restituisce exit code 1."""
    if notice is not None:
        sys.stderr.write(renderer.notice(notice))
    return 1


# ------------------------------------------------------------
# Sessione
# ------------------------------------------------------------

async def cmd_login(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    user = auth_service.login(ctx.session, {"username": args.username, "password": password})
    _emit(f"Accesso salvato per {user.username}.")
    return 0


async def cmd_logout(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    auth_service.logout(ctx.session)
    _emit("Sessione chiusa.")
    return 0


async def cmd_whoami(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    user = auth_service.current_user(ctx.session)
    if user is None or not ctx.session.is_authenticated():
        _emit("Nessun utente collegato.")
        return 1
    _emit(user.username)
    return 0


# ------------------------------------------------------------
# Dashboard, clienti, fatture
# ------------------------------------------------------------

async def cmd_dashboard(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    metrics = await dashboard_service.load(ctx.gateway, ctx.settings)
    _emit(renderer.dashboard(metrics))
    return 0


async def cmd_customers_list(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    customers = await customer_service.get_all(ctx.gateway)
    if args.search:
        customers = filter_customers(customers, args.search)
    _emit(renderer.customer_list(customers))
    return 0


async def cmd_customers_show(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    customer, invoices = await asyncio.gather(
        customer_service.get_by_id(ctx.gateway, args.customer_id),
        invoice_service.get_by_customer(ctx.gateway, args.customer_id),
    )
    _emit(renderer.customer_detail(customer, invoices))
    return 0


async def cmd_invoices_list(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    filters = InvoiceFilters(status=InvoiceStatus(args.status)) if args.status else None
    invoices = await invoice_service.get_filtered(ctx.gateway, filters)
    _emit(renderer.invoice_list(invoices))
    return 0


async def _load_detail(ctx: AppContext, invoice_id: str) -> InvoiceDetailController:
    detail = InvoiceDetailController(ctx, invoice_id)
    await detail.load()
    return detail


async def cmd_invoices_show(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    detail = await _load_detail(ctx, args.invoice_id)
    if detail.invoice is None:
        return _fail(renderer, detail.notice)
    _emit(renderer.invoice_detail(detail))
    return 0


async def cmd_invoices_send(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    detail = await _load_detail(ctx, args.invoice_id)
    if detail.invoice is None:
        return _fail(renderer, detail.notice)

    detail.send.open_preview()
    _emit(renderer.send_preview(detail.invoice))
    if args.dry_run:
        detail.send.close()
        return 0
    if not await detail.send.confirm():
        return _fail(renderer, detail.send.notice)
    _emit(renderer.notice(detail.send.notice))
    return 0


async def cmd_invoices_cancel(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    detail = await _load_detail(ctx, args.invoice_id)
    if detail.invoice is None:
        return _fail(renderer, detail.notice)

    workflow = detail.cancel
    workflow.start()
    if args.dry_run and not workflow.requires_email_preview:
        _emit("La fattura non è mai stata inviata: verrà annullata senza email.")
        workflow.close()
        return 0

    if not await workflow.submit_reason(args.reason, args.details):
        return _fail(renderer, workflow.notice)

    if workflow.state == CancelState.EMAIL_PREVIEW:
        _emit(renderer.cancel_preview(detail.invoice, workflow.reason or ""))
        if args.dry_run:
            workflow.close()
            return 0
        if not await workflow.confirm():
            return _fail(renderer, workflow.notice)

    _emit(renderer.notice(workflow.notice))
    return 0


async def cmd_invoices_mark_paid(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    detail = await _load_detail(ctx, args.invoice_id)
    if detail.invoice is None:
        return _fail(renderer, detail.notice)

    detail.mark_paid.open_confirm()
    _emit(detail.mark_paid.warning)
    if args.dry_run:
        detail.mark_paid.close()
        return 0
    if not await detail.mark_paid.confirm():
        return _fail(renderer, detail.mark_paid.notice)
    _emit(renderer.notice(detail.mark_paid.notice))
    return 0


# ------------------------------------------------------------
# Pagamenti e solleciti
# ------------------------------------------------------------

async def cmd_payments_record(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    detail = await _load_detail(ctx, args.invoice_id)
    if detail.invoice is None:
        return _fail(renderer, detail.notice)

    workflow = detail.record_payment
    workflow.open_form()
    changes = {}
    if args.amount is not None:
        changes["payment_amount"] = args.amount
    if args.method:
        changes["payment_method"] = PaymentMethod(args.method)
    if args.reference:
        changes["transaction_reference"] = args.reference
    if args.notes:
        changes["notes"] = args.notes

    if not await workflow.submit(**changes):
        return _fail(renderer, workflow.notice)
    _emit(renderer.notice(workflow.notice))
    return 0


async def cmd_reminders_overdue(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    controller = OverdueRemindersController(ctx)
    if not await controller.load():
        return _fail(renderer, controller.notice)
    _emit(renderer.overdue_list(controller))
    return 0


async def cmd_reminders_send(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    controller = None
    if args.type:
        detail = await _load_detail(ctx, args.invoice_id)
        if detail.invoice is None:
            return _fail(renderer, detail.notice)
        if not await detail.reminder.open_preview(reminder_type=ReminderType(args.type)):
            return _fail(renderer, detail.reminder.notice)
    else:
        # Tipo scelto dai giorni di ritardo riportati nella lista scadute
        controller = OverdueRemindersController(ctx)
        if not await controller.load():
            return _fail(renderer, controller.notice)
        days = next(
            (item.days_overdue for item in controller.overdue if str(item.invoice_id) == args.invoice_id),
            0,
        )
        detail = await controller.start_reminder(args.invoice_id, days)
        if detail is None:
            return _fail(renderer, controller.notice)

    workflow = detail.reminder
    _emit(renderer.reminder_preview(workflow.preview, workflow.reminder_type))
    if args.dry_run:
        workflow.close()
        return 0
    if controller is None:
        if not await workflow.confirm():
            return _fail(renderer, workflow.notice)
        _emit(renderer.notice(workflow.notice))
        return 0
    if not await controller.confirm_reminder(detail):
        return _fail(renderer, controller.notice)
    _emit(renderer.notice(controller.notice))
    return 0


async def cmd_chat(ctx: AppContext, args: argparse.Namespace, renderer: RenderService) -> int:
    assistant = ChatAssistant(ctx.gateway)
    reply = await assistant.send(args.message)
    _emit(renderer.chat(assistant))
    if reply is None or reply.content == CHAT_ERROR_MESSAGE:
        return 1
    return 0


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="invoiceme",
        description="Client a riga di comando per la fatturazione InvoiceMe",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Salva le credenziali di accesso")
    login.add_argument("username")
    login.add_argument("--password", help="Password (se omessa viene richiesta)")
    login.set_defaults(handler=cmd_login, protected=False)

    commands.add_parser("logout", help="Chiude la sessione").set_defaults(handler=cmd_logout, protected=False)
    commands.add_parser("whoami", help="Utente collegato").set_defaults(handler=cmd_whoami, protected=False)
    commands.add_parser("dashboard", help="Metriche principali").set_defaults(handler=cmd_dashboard, protected=True)

    # clienti
    customers = commands.add_parser("customers", help="Clienti").add_subparsers(dest="action", required=True)
    customers_list = customers.add_parser("list", help="Elenco clienti")
    customers_list.add_argument("--search", help="Filtra per nome, referente o email")
    customers_list.set_defaults(handler=cmd_customers_list, protected=True)
    customers_show = customers.add_parser("show", help="Dettaglio cliente")
    customers_show.add_argument("customer_id")
    customers_show.set_defaults(handler=cmd_customers_show, protected=True)

    # fatture
    invoices = commands.add_parser("invoices", help="Fatture").add_subparsers(dest="action", required=True)
    invoices_list = invoices.add_parser("list", help="Elenco fatture")
    invoices_list.add_argument("--status", choices=[status.value for status in InvoiceStatus])
    invoices_list.set_defaults(handler=cmd_invoices_list, protected=True)

    for name, handler, help_text in (
        ("show", cmd_invoices_show, "Dettaglio fattura"),
        ("send", cmd_invoices_send, "Invia la fattura al cliente"),
        ("mark-paid", cmd_invoices_mark_paid, "Segna la fattura come pagata"),
    ):
        sub = invoices.add_parser(name, help=help_text)
        sub.add_argument("invoice_id")
        if name != "show":
            sub.add_argument("--dry-run", action="store_true", help="Mostra l'anteprima senza confermare")
        sub.set_defaults(handler=handler, protected=True)

    cancel = invoices.add_parser("cancel", help="Annulla la fattura")
    cancel.add_argument("invoice_id")
    cancel.add_argument("--reason", required=True, choices=list(CANCELLATION_REASONS))
    cancel.add_argument("--details", help="Motivo libero (obbligatorio con --reason other)")
    cancel.add_argument("--dry-run", action="store_true", help="Mostra l'anteprima senza confermare")
    cancel.set_defaults(handler=cmd_invoices_cancel, protected=True)

    # pagamenti
    payments = commands.add_parser("payments", help="Pagamenti").add_subparsers(dest="action", required=True)
    record = payments.add_parser("record", help="Registra un pagamento")
    record.add_argument("invoice_id")
    record.add_argument("--amount", help="Importo (default: saldo residuo)")
    record.add_argument("--method", choices=[method.value for method in PaymentMethod])
    record.add_argument("--reference", help="Riferimento transazione")
    record.add_argument("--notes")
    record.set_defaults(handler=cmd_payments_record, protected=True)

    # solleciti
    reminders = commands.add_parser("reminders", help="Solleciti").add_subparsers(dest="action", required=True)
    reminders.add_parser("overdue", help="Fatture scadute").set_defaults(handler=cmd_reminders_overdue, protected=True)
    send_reminder = reminders.add_parser("send", help="Invia un sollecito")
    send_reminder.add_argument("invoice_id")
    send_reminder.add_argument("--type", choices=[reminder_type.value for reminder_type in ReminderType])
    send_reminder.add_argument("--dry-run", action="store_true", help="Mostra l'anteprima senza inviare")
    send_reminder.set_defaults(handler=cmd_reminders_send, protected=True)

    chat = commands.add_parser("chat", help="Domanda all'assistente")
    chat.add_argument("message")
    chat.set_defaults(handler=cmd_chat, protected=True)

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Esegue il comando dentro un contesto applicativo."""
    start_path = settings.login_path if args.command == "login" else "/"
    async with app_context(settings, start_path=start_path) as ctx:
        renderer = RenderService(settings.currency)
        if args.protected:
            outcome = guard_protected_view(ctx.session, ctx.navigator, settings)
            if outcome != GuardOutcome.ALLOW:
                sys.stderr.write("Effettua il login: invoiceme login <username>\n")
                return 1
        try:
            return await args.handler(ctx, args, renderer)
        except SessionExpiredError as exc:
            logger.warning("Sessione scaduta durante %s", args.command)
            sys.stderr.write(f"{exc.detail}\n")
            return 1
        except AppException as exc:
            logger.error("Comando %s fallito: %s", args.command, exc.detail)
            return _fail(renderer, Notice.error("Errore", exc.detail))


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug("Avvio %s %s (%s)", settings.app_name, settings.app_version, settings.app_env)

    return asyncio.run(run(args, settings))


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
