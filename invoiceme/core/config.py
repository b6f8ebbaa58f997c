"""
Configurazione applicazione - Settings
Progetto: InvoiceMe (client fatturazione)

Definisce le impostazioni del client caricate da variabili d'ambiente.
"""


from __future__ import annotations
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configurazione del client.

    Carica le impostazioni da variabili d'ambiente (o da `.env`).
    Valori di default adatti per sviluppo locale.

    Per ottenere un'istanza singleton usa `get_settings()`;
    il resto dell'applicazione la riceve tramite `AppContext`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # ------------------------------------------------------------
    # Configurazione Backend REST
    # ------------------------------------------------------------
    api_base_url: str = Field(
        default="http://localhost:8080/api",
        description="URL base del backend REST",
    )

    request_timeout: Optional[float] = Field(
        default=None,
        description="Timeout richieste in secondi (None = default del trasporto)",
    )

    # ------------------------------------------------------------
    # Configurazione Applicazione
    # ------------------------------------------------------------
    app_name: str = Field(
        default="InvoiceMe",
        description="Nome applicazione",
    )

    app_version: str = Field(
        default="1.0.0",
        description="Versione applicazione",
    )

    app_env: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Ambiente di esecuzione (development | production | testing)",
    )

    debug: bool = Field(
        default=False,
        description="Modalità debug",
    )

    # ------------------------------------------------------------
    # Configurazione Sessione e Navigazione
    # ------------------------------------------------------------
    session_file: Path = Field(
        default=Path("~/.invoiceme/session.json"),
        description="File JSON in cui vengono salvate credenziali e utente",
    )

    login_path: str = Field(
        default="/login",
        description="Percorso della vista di login",
    )

    invoices_path: str = Field(
        default="/invoices",
        description="Percorso della lista fatture (vista sicura di ripiego)",
    )

    # ------------------------------------------------------------
    # Configurazione Logging
    # ------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Livello logging",
    )

    # ------------------------------------------------------------
    # Configurazione Dashboard
    # ------------------------------------------------------------
    currency: str = Field(
        default="USD",
        description="Valuta usata per la visualizzazione degli importi",
    )

    recent_items_limit: int = Field(
        default=5,
        ge=1,
        description="Numero di fatture/pagamenti recenti mostrati in dashboard",
    )

    revenue_trend_days: int = Field(
        default=7,
        ge=1,
        description="Giorni coperti dal grafico andamento incassi",
    )

    @property
    def is_production(self) -> bool:
        """Verifica se l'applicazione è in produzione."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Verifica se l'applicazione è in sviluppo."""
        return self.app_env == "development"

    # ------------------------------------------------------------
    # Validatori
    # ------------------------------------------------------------

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Valida lo schema dell'URL e rimuove lo slash finale."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url deve iniziare con http:// o https://")
        return v.rstrip("/")

    @field_validator("session_file")
    @classmethod
    def expand_session_file(cls, v: Path) -> Path:
        """Espande `~` nel percorso del file di sessione."""
        return Path(v).expanduser()

    @field_validator("login_path", "invoices_path")
    @classmethod
    def validate_view_path(cls, v: str) -> str:
        """I percorsi delle viste devono essere assoluti."""
        if not v.startswith("/"):
            raise ValueError("I percorsi delle viste devono iniziare con '/'")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validazione settings obbligatori in produzione."""
        if self.app_env != "production":
            return self

        errors = []

        if "localhost" in self.api_base_url or "127.0.0.1" in self.api_base_url:
            errors.append(
                f"- api_base_url: l'indirizzo '{self.api_base_url}' non è consentito in produzione"
            )

        if self.debug:
            errors.append("- debug: deve essere False in produzione")

        if errors:
            error_msg = "Errore di configurazione in produzione:\n" + "\n".join(errors)
            raise ValueError(error_msg)

        return self


@lru_cache()
def get_settings() -> Settings:
    """
    Restituisce l'istanza singleton delle impostazioni.

    Usa lru_cache per garantire che Settings() venga istanziato
    una sola volta e riutilizzato in tutta l'applicazione.
    In fase di test, usa get_settings.cache_clear() per resettare.

    Returns:
        Settings: Istanza delle impostazioni applicazione
    """
    return Settings()
