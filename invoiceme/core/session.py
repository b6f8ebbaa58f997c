"""
Gestione sessione e credenziali
Progetto: InvoiceMe (client fatturazione)

La sessione conserva una sola credenziale codificata (HTTP Basic) e
l'identità minima dell'utente in un file JSON con due chiavi fisse:
`auth_credentials` e `user_info`. Nessun altro stato viene persistito.

Ciclo di vita:
- `hydrate()` all'avvio, prima di mostrare qualunque vista protetta
- `login()` salva credenziali e utente senza contattare il server
- `logout()` (o un 401 intercettato dal gateway) cancella entrambe le chiavi
"""

import base64
import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from invoiceme.schemas.auth import UserInfo

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Chiavi fisse dello storage durevole
CREDENTIALS_KEY = "auth_credentials"
USER_INFO_KEY = "user_info"


def encode_basic_credentials(username: str, password: str) -> str:
    """Codifica `username:password` in base64 per l'header Basic."""
    raw = f"{username}:{password}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


class CredentialStore:
    """
    Storage durevole su file JSON.

    Un file mancante o illeggibile equivale a uno storage vuoto.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read(self) -> dict[str, Any]:
        """Legge il contenuto dello storage (solo le chiavi note)."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("File di sessione illeggibile %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("File di sessione con formato inatteso: %s", self.path)
            return {}
        return {key: data[key] for key in (CREDENTIALS_KEY, USER_INFO_KEY) if key in data}

    def write(self, credentials: str, user_info: dict[str, Any]) -> None:
        """Scrive credenziali e utente, creando la cartella se necessario."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(
                {
                    CREDENTIALS_KEY: credentials,
                    USER_INFO_KEY: user_info,
                },
                indent=2,
            ),
            encoding="utf-8",
        )

    def clear(self) -> None:
        """Rimuove entrambe le chiavi eliminando il file."""
        self.path.unlink(missing_ok=True)


class SessionState:
    """
    Stato della sessione utente.

    Unica istanza per processo, posseduta da `AppContext` e passata
    esplicitamente a gateway, servizi e viste.
    """

    def __init__(self, store: CredentialStore) -> None:
        self._store = store
        self._credentials: Optional[str] = None
        self._user: Optional[UserInfo] = None
        self.is_hydrated = False

    def hydrate(self) -> None:
        """Carica lo stato dallo storage durevole."""
        data = self._store.read()
        credentials = data.get(CREDENTIALS_KEY)
        self._credentials = credentials if isinstance(credentials, str) and credentials else None

        self._user = None
        user_data = data.get(USER_INFO_KEY)
        if user_data is not None:
            try:
                self._user = UserInfo.model_validate(user_data)
            except PydanticValidationError:
                logger.warning("user_info non valido nel file di sessione, ignorato")

        self.is_hydrated = True
        logger.debug("Sessione caricata (autenticato=%s)", self.is_authenticated())

    def login(self, username: str, password: str) -> UserInfo:
        """
        Salva le credenziali codificate e l'utente.

        Non viene fatta nessuna chiamata al server: le credenziali sono
        verificate implicitamente dalla prima richiesta autenticata.

        Args:
            username: Nome utente
            password: Password in chiaro

        Returns:
            UserInfo dell'utente collegato
        """
        credentials = encode_basic_credentials(username, password)
        user = UserInfo(username=username, is_authenticated=True)
        self._store.write(credentials, user.model_dump(mode="json", by_alias=True))

        self._credentials = credentials
        self._user = user
        self.is_hydrated = True
        logger.info("Login salvato per l'utente %s", username)
        return user

    def logout(self) -> None:
        """Cancella credenziali e utente, in memoria e su disco."""
        self._store.clear()
        self._credentials = None
        self._user = None
        logger.info("Sessione chiusa")

    def current_user(self) -> Optional[UserInfo]:
        """Utente collegato, o None."""
        return self._user

    def is_authenticated(self) -> bool:
        """True se e solo se sono presenti credenziali."""
        return self._credentials is not None

    @property
    def credentials(self) -> Optional[str]:
        """Credenziali codificate per l'header Authorization."""
        return self._credentials
