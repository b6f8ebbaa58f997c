"""
Workflow e controller delle viste

Regole delle azioni sulle fatture, macchine a stati delle azioni in più
passi e controller delle viste (dettaglio, solleciti, portale, chat).
"""

from invoiceme.workflows.actions import (
    InvoiceAction,
    InvoicePermissions,
    ensure_action_permitted,
    is_action_permitted,
    is_legal_transition,
    permissions_for,
    permitted_actions,
)
from invoiceme.workflows.base import Notice, NoticeLevel
from invoiceme.workflows.reminder import select_reminder_type

__all__ = [
    "InvoiceAction",
    "InvoicePermissions",
    "ensure_action_permitted",
    "is_action_permitted",
    "is_legal_transition",
    "permissions_for",
    "permitted_actions",
    "Notice",
    "NoticeLevel",
    "select_reminder_type",
]
