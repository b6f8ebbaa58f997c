"""
Eccezioni Custom per il client.
Progetto: InvoiceMe (client fatturazione)

Definisce le eccezioni del dominio per una gestione centralizzata
degli errori tra gateway REST, servizi e workflow.

NOTA: BusinessValidationError è volutamente distinta da pydantic.ValidationError.
- pydantic.ValidationError: errori di formato/tipo nei dati (sollevati da pydantic)
- BusinessValidationError: rifiuto dei dati di un form lato client
  (gli schemi la sollevano direttamente, `validate_form` converte le altre)
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NetworkError",
    "HttpError",
    "NotFoundError",
    "AuthorizationError",
    "SessionExpiredError",
    "BusinessValidationError",
    "ValidationError",       # alias di BusinessValidationError
    "ConflictError",
    "ResponseFormatError",
    "http_error_for_status",
]


class AppException(Exception):
    """
    Base exception per il client.

    Tutte le eccezioni custom ereditano da questa classe base.

    Attributes:
        status_code: HTTP status code equivalente
        error_code: Identificativo univoco dell'errore
        detail: Messaggio di errore leggibile per l'utente
        extra: Dizionario con dati aggiuntivi
    """

    # Default values - overridden in subclasses
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Inizializza l'eccezione.

        Args:
            detail: Messaggio di errore dettagliato
            error_code: Identificativo univoco (default: quello di classe)
            extra: Dati aggiuntivi (default: None)
        """
        self.detail = detail
        # Use provided error_code or fall back to class-level default
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(detail)


class NetworkError(AppException):
    """
    Eccezione sollevata quando il trasporto non riesce a completare la richiesta.

    Copre connessione rifiutata, DNS, timeout e simili: nessuna risposta
    HTTP è stata ricevuta.
    """

    status_code: int = 503
    error_code: str = "NETWORK_ERROR"

    def __init__(
        self,
        detail: str = "Impossibile contattare il server",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class HttpError(AppException):
    """
    Eccezione sollevata per una risposta HTTP non 2xx.

    Attributes:
        status: Status code della risposta
        body: Corpo della risposta (JSON decodificato o testo)
    """

    error_code: str = "HTTP_ERROR"

    def __init__(
        self,
        status: int,
        body: Any = None,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Inizializza l'eccezione HttpError.

        Args:
            status: Status code HTTP ricevuto
            body: Corpo della risposta
            detail: Messaggio (default: ricavato dal corpo o dallo status)
            error_code: Identificativo univoco (default: "HTTP_ERROR")
            extra: Dati aggiuntivi (default: None)
        """
        super().__init__(detail or _detail_from_body(status, body), error_code, extra)
        self.status = status
        self.status_code = status
        self.body = body


class NotFoundError(HttpError):
    """Eccezione sollevata quando il backend risponde 404."""

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Risorsa non trovata",
        body: Any = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(404, body, detail, error_code, extra)


class AuthorizationError(HttpError):
    """
    Eccezione sollevata quando il backend risponde 403.

    L'utente è autenticato ma non ha i permessi per l'operazione.
    """

    status_code: int = 403
    error_code: str = "FORBIDDEN"

    def __init__(
        self,
        detail: str = "Accesso non autorizzato",
        body: Any = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(403, body, detail, error_code, extra)


class SessionExpiredError(AppException):
    """
    Eccezione sollevata per un 401 ricevuto fuori dalla vista di login.

    Il gateway ha già cancellato le credenziali e navigato al login:
    le viste non devono gestirla singolarmente.
    """

    status_code: int = 401
    error_code: str = "SESSION_EXPIRED"

    def __init__(
        self,
        detail: str = "Sessione scaduta, effettua di nuovo il login",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Eccezione sollevata quando i dati di un form vengono rifiutati lato client.

    Eredita da ValueError per essere catturata dai validatori Pydantic.
    La validazione lato client è solo indicativa: il server resta autorevole.

    Esempi di utilizzo:
        - "È necessaria almeno una riga fattura"
        - "L'importo supera il saldo residuo"
        - "Specifica il motivo dell'annullamento"
    """

    status_code: int = 422
    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Validazione dati fallita",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chiama AppException.__init__ direttamente per evitare ValueError
        AppException.__init__(self, detail, error_code, extra)


# Alias per compatibilità
ValidationError = BusinessValidationError


class ConflictError(AppException):
    """
    Eccezione sollevata quando un'azione non è consentita nello stato corrente.

    Utilizzata dai workflow: ad esempio inviare una fattura già SENT
    o confermare un'anteprima che non è aperta.
    """

    status_code: int = 409
    error_code: str = "ACTION_NOT_ALLOWED"

    def __init__(
        self,
        detail: str = "Azione non consentita nello stato corrente",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class ResponseFormatError(AppException):
    """
    Eccezione sollevata quando una risposta 2xx non rispetta lo schema atteso.

    La chiamata è arrivata al server ma il corpo non è interpretabile:
    i workflow la trattano come qualunque altro errore della chiamata.
    """

    status_code: int = 502
    error_code: str = "INVALID_RESPONSE"

    def __init__(
        self,
        detail: str = "Risposta del server non valida",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


def _detail_from_body(status: int, body: Any) -> str:
    """Estrae un messaggio leggibile dal corpo di una risposta di errore."""
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(body, str) and body.strip():
        return body.strip()
    return f"Richiesta fallita con stato HTTP {status}"


def http_error_for_status(status: int, body: Any = None) -> HttpError:
    """
    Costruisce l'eccezione più specifica per uno status HTTP.

    Args:
        status: Status code della risposta
        body: Corpo della risposta

    Returns:
        NotFoundError per 404, AuthorizationError per 403, HttpError altrimenti
    """
    if status == 404:
        return NotFoundError(_detail_from_body(status, body), body)
    if status == 403:
        return AuthorizationError(_detail_from_body(status, body), body)
    return HttpError(status, body)
