"""
Schema base condiviso
Progetto: InvoiceMe (client fatturazione)

Il backend parla JSON in camelCase: gli schemi usano nomi snake_case
in Python e alias camelCase sul filo.
"""

import logging
from decimal import Decimal
from typing import Annotated, Any, Type, TypeVar

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from invoiceme.core.exceptions import BusinessValidationError, ResponseFormatError

logger = logging.getLogger(__name__)

# Decimal in Python, numero JSON sul filo
JsonDecimal = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Importi monetari
Money = JsonDecimal

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class ApiSchema(BaseModel):
    """Schema base con alias camelCase, popolabile anche per nome."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """Serializza lo schema nel corpo JSON atteso dal backend."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _field_errors(exc: PydanticValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


def validate_form(schema: Type[SchemaT], data: dict[str, Any]) -> SchemaT:
    """
    Valida i dati di un form contro uno schema.

    Converte gli errori pydantic in BusinessValidationError, con la lista
    dei campi non validi in `extra["errors"]`.

    Args:
        schema: Classe dello schema di destinazione
        data: Dati grezzi del form

    Returns:
        Istanza validata dello schema

    Raises:
        BusinessValidationError: Se i dati non superano la validazione
    """
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        errors = _field_errors(exc)
        first = errors[0] if errors else {"field": "", "message": "dati non validi"}
        raise BusinessValidationError(
            f"Dati non validi ({first['field']}): {first['message']}",
            extra={"errors": errors},
        ) from exc


# -------------------------------------------------------------------
# Lettura delle risposte del backend
# -------------------------------------------------------------------

def parse_response(schema: Type[SchemaT], data: Any) -> SchemaT:
    """
    Deserializza il corpo di una risposta 2xx.

    Args:
        schema: Classe dello schema atteso
        data: Corpo JSON già decodificato dal gateway

    Returns:
        Istanza validata dello schema

    Raises:
        ResponseFormatError: Se il corpo non rispetta lo schema
    """
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        errors = _field_errors(exc)
        logger.error("Risposta non valida per %s: %s", schema.__name__, errors)
        raise ResponseFormatError(
            f"Risposta del server non valida ({schema.__name__})",
            extra={"errors": errors},
        ) from exc


def parse_response_list(schema: Type[SchemaT], data: Any) -> list[SchemaT]:
    """Deserializza una risposta che contiene una lista; None vale lista vuota."""
    if data is None:
        return []
    if not isinstance(data, list):
        logger.error("Attesa una lista di %s, ricevuto %s", schema.__name__, type(data).__name__)
        raise ResponseFormatError(f"Risposta del server non valida ({schema.__name__})")
    return [parse_response(schema, item) for item in data]
