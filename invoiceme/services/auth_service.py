"""
Service Layer per l'autenticazione
Progetto: InvoiceMe (client fatturazione)

Il login non contatta il server: le credenziali vengono validate nel
formato, codificate e salvate; la prima chiamata autenticata le verifica.
"""

import logging
from typing import Any, Optional, Union

from invoiceme.core.session import SessionState
from invoiceme.schemas.auth import LoginCredentials, UserInfo
from invoiceme.schemas.base import validate_form

logger = logging.getLogger(__name__)


class AuthService:
    """Service per login e logout."""

    def login(
        self,
        session: SessionState,
        credentials: Union[LoginCredentials, dict[str, Any]],
    ) -> UserInfo:
        """
        Valida le credenziali e apre la sessione.

        Args:
            session: Sessione del processo
            credentials: Credenziali (schema o dati grezzi del form)

        Returns:
            UserInfo dell'utente collegato

        Raises:
            BusinessValidationError: Se username o password sono vuoti
        """
        if not isinstance(credentials, LoginCredentials):
            credentials = validate_form(LoginCredentials, credentials)
        return session.login(credentials.username, credentials.password)

    def logout(self, session: SessionState) -> None:
        session.logout()

    def current_user(self, session: SessionState) -> Optional[UserInfo]:
        return session.current_user()


auth_service = AuthService()
