"""
Navigazione tra viste e guardia delle viste protette
Progetto: InvoiceMe (client fatturazione)
"""

import logging
from enum import Enum

from invoiceme.core.config import Settings
from invoiceme.core.session import SessionState

logger = logging.getLogger(__name__)


class Navigator:
    """Tiene traccia della vista corrente e della cronologia."""

    def __init__(self, start_path: str = "/") -> None:
        self.history: list[str] = [start_path]

    @property
    def current_path(self) -> str:
        return self.history[-1]

    def push(self, path: str) -> None:
        """Naviga verso `path`."""
        logger.debug("Navigazione: %s -> %s", self.current_path, path)
        self.history.append(path)

    def is_on(self, path: str) -> bool:
        """True se la vista corrente è `path` (o una sua sotto-vista)."""
        current = self.current_path
        return current == path or current.startswith(path.rstrip("/") + "/")


class GuardOutcome(str, Enum):
    """Esito della guardia di una vista protetta."""
    LOADING = "LOADING"
    REDIRECT = "REDIRECT"
    ALLOW = "ALLOW"


def guard_protected_view(
    session: SessionState,
    navigator: Navigator,
    settings: Settings,
) -> GuardOutcome:
    """
    Decide se una vista protetta può essere mostrata.

    Finché la sessione non è stata caricata la vista resta in LOADING:
    un redirect prima del caricamento manderebbe al login anche un utente
    già collegato.

    Args:
        session: Stato della sessione
        navigator: Navigatore usato per il redirect
        settings: Configurazione, da cui si legge il percorso del login

    Returns:
        LOADING, REDIRECT (già navigato al login) o ALLOW
    """
    if not session.is_hydrated:
        return GuardOutcome.LOADING
    if not session.is_authenticated():
        if not navigator.is_on(settings.login_path):
            navigator.push(settings.login_path)
        return GuardOutcome.REDIRECT
    return GuardOutcome.ALLOW
