"""
=============================================================================
ACTION_TYPES.PY — El "sobre" de respuesta de las acciones
=============================================================================
Todas las acciones (actions/) devuelven SIEMPRE una de estas dos formas:

  Éxito:  {"success": true, "data": ...}
  Error:  {"error": "mensaje", "code": "NOT_FOUND", "validationErrors": [...]}

Así la interfaz solo tiene que preguntar una cosa: ¿tiene "error"?

Códigos de error:
  UNAUTHORIZED     → no hay sesión
  VALIDATION_ERROR → los datos del formulario no son válidos (lleva detalle por campo)
  NOT_FOUND        → no existe O no es tuyo (a propósito no se distingue)
  DATABASE_ERROR   → falló la base de datos
  UNKNOWN_ERROR    → cualquier otro fallo inesperado
"""

import enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field


class ActionErrorCode(str, enum.Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DATABASE_ERROR = "DATABASE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class FieldError(BaseModel):
    """Error de validación de un campo concreto"""
    field: str
    message: str


class ActionError(BaseModel):
    error: str
    code: ActionErrorCode
    validation_errors: Optional[list[FieldError]] = Field(
        default=None, serialization_alias="validationErrors"
    )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ActionSuccess(BaseModel):
    success: Literal[True] = True
    data: Any = None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


# Lo que devuelve cualquier acción
ActionResponse = Union[ActionSuccess, ActionError]


def create_error(
    message: str,
    code: ActionErrorCode,
    validation_errors: Optional[list[FieldError]] = None,
) -> ActionError:
    return ActionError(error=message, code=code, validation_errors=validation_errors or None)


def create_success(data: Any) -> ActionSuccess:
    return ActionSuccess(data=data)


def is_action_error(response: Any) -> bool:
    return isinstance(response, ActionError)


def is_action_success(response: Any) -> bool:
    return isinstance(response, ActionSuccess)
