"""
Contesto applicativo e dependency injection
Progetto: InvoiceMe (client fatturazione)

`AppContext` possiede l'unica sessione del processo, il navigatore e il
gateway REST. Viene creato all'avvio (la sessione è caricata subito) e
chiuso alla fine; i componenti ricevono ciò che serve come argomento.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

import httpx

from invoiceme.core.config import Settings, get_settings
from invoiceme.core.gateway import RestGateway
from invoiceme.core.navigation import Navigator
from invoiceme.core.session import CredentialStore, SessionState

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Dipendenze condivise per tutta la vita del processo."""

    settings: Settings
    session: SessionState
    navigator: Navigator
    gateway: RestGateway


def build_context(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    start_path: str = "/",
) -> AppContext:
    """
    Costruisce il contesto con la sessione già caricata.

    Args:
        settings: Impostazioni (default: get_settings())
        transport: Trasporto httpx alternativo per i test
        start_path: Vista iniziale del navigatore

    Returns:
        AppContext pronto all'uso
    """
    settings = settings or get_settings()
    session = SessionState(CredentialStore(settings.session_file))
    session.hydrate()
    navigator = Navigator(start_path)
    gateway = RestGateway(settings, session, navigator, transport=transport)
    return AppContext(
        settings=settings,
        session=session,
        navigator=navigator,
        gateway=gateway,
    )


@asynccontextmanager
async def app_context(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    start_path: str = "/",
) -> AsyncGenerator[AppContext, None]:
    """
    Crea il contesto e chiude il gateway all'uscita.

    Yields:
        AppContext: Contesto con sessione caricata

    Example:
        async with app_context() as ctx:
            invoices = await invoice_service.get_all(ctx.gateway)
    """
    ctx = build_context(settings, transport=transport, start_path=start_path)
    try:
        yield ctx
    finally:
        await ctx.gateway.aclose()
        logger.debug("Contesto applicativo chiuso")
