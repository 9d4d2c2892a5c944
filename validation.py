"""
=============================================================================
VALIDATION.PY — Limpieza y validación de datos de entrada
=============================================================================
Todo lo que llega de un formulario es "sucio" hasta que pasa por aquí.

Flujo de una acción:
  1. extract_form_data()  → recorta espacios y convierte "" en None
  2. validate_form_data() → pasa los datos por un esquema Pydantic (schemas.py)
     - Si es válido → devuelve el modelo ya tipado
     - Si no → devuelve un ActionError con un mensaje POR CAMPO

sanitize_string() quita HTML y patrones tipo script. La interfaz ya escapa
al pintar, esto es una segunda capa.
"""

import re
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

from action_types import ActionError, ActionErrorCode, FieldError, create_error

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_HTML_TAG = re.compile(r"<[^>]*>")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)


def sanitize_string(value: str) -> str:
    """
    Quita etiquetas HTML, caracteres de control (menos \\t \\n \\r),
    "javascript:" y atributos tipo onclick=, y recorta espacios.
    """
    value = _HTML_TAG.sub("", value)
    value = _CONTROL_CHARS.sub("", value)
    value = _JS_PROTOCOL.sub("", value)
    value = _EVENT_HANDLER.sub("", value)
    return value.strip()


def sanitize_optional_string(value: Optional[str]) -> Optional[str]:
    """Igual que sanitize_string, pero None o "" (antes o después de limpiar) → None"""
    if not value:
        return None
    sanitized = sanitize_string(value)
    return sanitized or None


def extract_form_data(form: Mapping[str, Any]) -> dict[str, Any]:
    """
    Prepara los campos de un formulario.
    Los strings vacíos (o solo espacios) se guardan como None.
    Los ficheros subidos se ignoran. El resto (números, booleanos, listas
    que llegan por JSON) pasa tal cual: el esquema decide si vale o no.
    """
    data: dict[str, Any] = {}
    for key, value in form.items():
        if isinstance(value, UploadFile):
            continue
        if isinstance(value, str):
            stripped = value.strip()
            data[key] = stripped if stripped else None
        else:
            data[key] = value
    return data


def _field_name(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "__root__"


def validate_form_data(
    schema: Type[SchemaT], data: Mapping[str, Any]
) -> Union[SchemaT, ActionError]:
    """
    Valida `data` contra `schema`.
    Devuelve el modelo validado o un ActionError(VALIDATION_ERROR) con un
    FieldError por cada problema encontrado.
    """
    try:
        return schema.model_validate(dict(data))
    except ValidationError as exc:
        validation_errors = [
            FieldError(field=_field_name(err["loc"]), message=err["msg"])
            for err in exc.errors()
        ]
        return create_error(
            "Validation failed. Please check your input.",
            ActionErrorCode.VALIDATION_ERROR,
            validation_errors,
        )
