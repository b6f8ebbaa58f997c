"""
Regole delle azioni sulle fatture
Progetto: InvoiceMe (client fatturazione)

Quali azioni sono consentite dipende solo dall'ultima istantanea della
fattura (stato e saldo residuo). Le regole sono tabelle esplicite, così
ogni combinazione stato/azione è enumerabile nei test. I permessi vanno
ricalcolati a ogni accesso e mai salvati.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from invoiceme.core.exceptions import ConflictError
from invoiceme.schemas.invoice import InvoiceRead, InvoiceStatus

__all__ = [
    "InvoiceStatus",
    "InvoiceAction",
    "ActionRule",
    "ACTION_RULES",
    "STATUS_TRANSITIONS",
    "ACTION_TARGET_STATUS",
    "InvoicePermissions",
    "is_action_permitted",
    "permitted_actions",
    "permissions_for",
    "ensure_action_permitted",
    "is_legal_transition",
]


class InvoiceAction(str, Enum):
    """Azioni disponibili dal dettaglio fattura."""
    EDIT = "EDIT"
    SEND = "SEND"
    RECORD_PAYMENT = "RECORD_PAYMENT"
    SEND_REMINDER = "SEND_REMINDER"
    MARK_PAID = "MARK_PAID"
    CANCEL = "CANCEL"


@dataclass(frozen=True)
class ActionRule:
    """Stati in cui l'azione è ammessa e se richiede saldo positivo."""

    allowed_statuses: frozenset[InvoiceStatus]
    requires_balance: bool = False


ACTION_RULES: dict[InvoiceAction, ActionRule] = {
    InvoiceAction.EDIT: ActionRule(frozenset({InvoiceStatus.DRAFT})),
    InvoiceAction.SEND: ActionRule(frozenset({InvoiceStatus.DRAFT})),
    InvoiceAction.RECORD_PAYMENT: ActionRule(frozenset({InvoiceStatus.SENT}), requires_balance=True),
    InvoiceAction.SEND_REMINDER: ActionRule(frozenset({InvoiceStatus.SENT})),
    InvoiceAction.MARK_PAID: ActionRule(frozenset({InvoiceStatus.SENT}), requires_balance=True),
    InvoiceAction.CANCEL: ActionRule(frozenset({InvoiceStatus.DRAFT, InvoiceStatus.SENT})),
}

# Transizioni di stato legali (monotone: PAID e CANCELLED sono terminali)
STATUS_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}

# Stato di arrivo per le azioni che cambiano stato in modo certo.
# RECORD_PAYMENT può portare a PAID solo se il server salda la fattura.
ACTION_TARGET_STATUS: dict[InvoiceAction, Optional[InvoiceStatus]] = {
    InvoiceAction.EDIT: None,
    InvoiceAction.SEND: InvoiceStatus.SENT,
    InvoiceAction.RECORD_PAYMENT: None,
    InvoiceAction.SEND_REMINDER: None,
    InvoiceAction.MARK_PAID: InvoiceStatus.PAID,
    InvoiceAction.CANCEL: InvoiceStatus.CANCELLED,
}


@dataclass(frozen=True)
class InvoicePermissions:
    """Azioni abilitate per una fattura."""

    can_edit: bool
    can_send: bool
    can_record_payment: bool
    can_send_reminder: bool
    can_mark_paid: bool
    can_cancel: bool


def _rule_allows(rule: ActionRule, status: InvoiceStatus, balance: Decimal) -> bool:
    if status not in rule.allowed_statuses:
        return False
    return balance > 0 if rule.requires_balance else True


def is_action_permitted(invoice: InvoiceRead, action: InvoiceAction) -> bool:
    """True se l'azione è ammessa per la fattura nel suo stato attuale."""
    return _rule_allows(ACTION_RULES[action], invoice.status, invoice.balance_remaining)


def permitted_actions(invoice: InvoiceRead) -> list[InvoiceAction]:
    """Azioni ammesse, nell'ordine della enum."""
    return [action for action in InvoiceAction if is_action_permitted(invoice, action)]


def permissions_for(invoice: InvoiceRead) -> InvoicePermissions:
    """Calcola i permessi a partire dall'istantanea della fattura."""
    return InvoicePermissions(
        can_edit=is_action_permitted(invoice, InvoiceAction.EDIT),
        can_send=is_action_permitted(invoice, InvoiceAction.SEND),
        can_record_payment=is_action_permitted(invoice, InvoiceAction.RECORD_PAYMENT),
        can_send_reminder=is_action_permitted(invoice, InvoiceAction.SEND_REMINDER),
        can_mark_paid=is_action_permitted(invoice, InvoiceAction.MARK_PAID),
        can_cancel=is_action_permitted(invoice, InvoiceAction.CANCEL),
    )


def ensure_action_permitted(invoice: InvoiceRead, action: InvoiceAction) -> None:
    """
    Verifica che l'azione sia ammessa.

    Raises:
        ConflictError: Se lo stato o il saldo della fattura non la consentono
    """
    if not is_action_permitted(invoice, action):
        raise ConflictError(
            f"Azione {action.value} non consentita per la fattura "
            f"{invoice.invoice_number} in stato {invoice.status.value}",
            extra={
                "action": action.value,
                "status": invoice.status.value,
                "balance_remaining": str(invoice.balance_remaining),
            },
        )


def is_legal_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    """True se il passaggio da `current` a `target` è ammesso."""
    return target in STATUS_TRANSITIONS[current]
