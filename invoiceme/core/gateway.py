"""
Gateway REST verso il backend
Progetto: InvoiceMe (client fatturazione)

Un unico client HTTP configurato che:
- aggiunge `Authorization: Basic <credenziali>` alle chiamate autenticate
- su 401 fuori dalla vista di login cancella la sessione e porta al login
- traduce errori di trasporto e risposte non 2xx nelle eccezioni del client
"""

import logging
from typing import Any, Optional

import httpx

from invoiceme.core.config import Settings
from invoiceme.core.exceptions import (
    HttpError,
    NetworkError,
    SessionExpiredError,
    http_error_for_status,
)
from invoiceme.core.navigation import Navigator
from invoiceme.core.session import SessionState

# Logger per questo modulo
logger = logging.getLogger(__name__)


class RestGateway:
    """
    Dispatcher uniforme delle richieste REST.

    Usage:
        async with RestGateway(settings, session, navigator) as gateway:
            data = await gateway.get("/invoices")
    """

    def __init__(
        self,
        settings: Settings,
        session: SessionState,
        navigator: Navigator,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Inizializza il gateway.

        Args:
            settings: Impostazioni (base URL, timeout, percorso login)
            session: Sessione da cui leggere le credenziali
            navigator: Navigatore usato per il redirect al login
            transport: Trasporto httpx alternativo (es. MockTransport nei test)
        """
        self.settings = settings
        self.session = session
        self.navigator = navigator

        client_kwargs: dict[str, Any] = {
            "base_url": settings.api_base_url,
            "headers": {"Content-Type": "application/json"},
        }
        # Senza timeout configurato resta quello di default del trasporto
        if settings.request_timeout is not None:
            client_kwargs["timeout"] = settings.request_timeout
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> "RestGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Chiude il client HTTP sottostante."""
        await self._client.aclose()

    # ------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Esegue una richiesta e restituisce il corpo decodificato.

        Args:
            method: Metodo HTTP
            path: Percorso relativo alla base URL (es. "/invoices")
            json: Corpo JSON opzionale
            params: Query string opzionale
            authenticated: False per le chiamate pubbliche (portale pagamenti)

        Returns:
            Corpo JSON decodificato, testo se non JSON, None se vuoto

        Raises:
            NetworkError: Se il trasporto non completa la richiesta
            SessionExpiredError: Su 401 autenticato fuori dalla vista di login
            HttpError: Per ogni altra risposta non 2xx
        """
        headers: dict[str, str] = {}
        if authenticated and self.session.credentials:
            headers["Authorization"] = f"Basic {self.session.credentials}"

        logger.debug("%s %s (auth=%s)", method, path, authenticated)
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.TransportError as exc:
            logger.error("Errore di rete su %s %s: %s", method, path, exc)
            raise NetworkError(extra={"method": method, "path": path}) from exc

        body = _decode_body(response)

        if response.is_success:
            return body

        if response.status_code == 401 and authenticated:
            self._handle_unauthorized(method, path, body)

        logger.warning("%s %s -> HTTP %s", method, path, response.status_code)
        raise http_error_for_status(response.status_code, body)

    def _handle_unauthorized(self, method: str, path: str, body: Any) -> None:
        """Gestisce un 401 su chiamata autenticata."""
        login_path = self.settings.login_path
        if self.navigator.is_on(login_path):
            # Già sul login: nessun redirect, l'errore arriva alla vista
            logger.info("401 ricevuto sulla vista di login (%s %s)", method, path)
            raise HttpError(401, body)

        logger.warning("Sessione scaduta su %s %s, redirect al login", method, path)
        self.session.logout()
        self.navigator.push(login_path)
        raise SessionExpiredError(extra={"method": method, "path": path})

    # ------------------------------------------------------------
    # Helper per metodo
    # ------------------------------------------------------------

    async def get(self, path: str, *, params: Optional[dict[str, Any]] = None, authenticated: bool = True) -> Any:
        return await self.request("GET", path, params=params, authenticated=authenticated)

    async def post(self, path: str, json: Any = None, *, params: Optional[dict[str, Any]] = None, authenticated: bool = True) -> Any:
        return await self.request("POST", path, json=json, params=params, authenticated=authenticated)

    async def put(self, path: str, json: Any = None, *, authenticated: bool = True) -> Any:
        return await self.request("PUT", path, json=json, authenticated=authenticated)

    async def delete(self, path: str, *, authenticated: bool = True) -> Any:
        return await self.request("DELETE", path, authenticated=authenticated)


def _decode_body(response: httpx.Response) -> Any:
    """JSON se possibile, altrimenti testo; None per corpo vuoto."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
