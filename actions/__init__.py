"""
=============================================================================
ACTIONS — Punto de entrada de todas las mutaciones
=============================================================================
La interfaz llama a estas funciones. Cada una sigue los mismos pasos:

  1. ¿Hay sesión?            No → UNAUTHORIZED (no se llama al servicio)
  2. ¿Datos válidos?         No → VALIDATION_ERROR con detalle por campo
  3. Llamar al servicio con el id del usuario de la sesión
  4. ¿None / False?          → NOT_FOUND ("no existe o no es tuyo")
  5. ¿Excepción inesperada?  → se registra en el log y DATABASE_ERROR
                               (o UNKNOWN_ERROR), sin enseñar el error real
  6. Éxito → invalidar páginas afectadas y devolver {"success": true, "data": ...}

La sesión se recibe como parámetro (nunca se lee de un estado global):
el id del usuario que actúa SIEMPRE sale de ahí, nunca del formulario.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from action_types import ActionError, ActionErrorCode, create_error
from auth import AuthSession

logger = logging.getLogger("goaltracker.actions")


def session_user_id(session: Optional[AuthSession]) -> Optional[str]:
    """El id del usuario de la sesión, o None si no hay sesión válida"""
    if session is None or session.user is None or not session.user.id:
        return None
    return session.user.id


def unauthorized(message: str = "Unauthorized") -> ActionError:
    return create_error(message, ActionErrorCode.UNAUTHORIZED)


def not_found(message: str) -> ActionError:
    return create_error(message, ActionErrorCode.NOT_FOUND)


def unexpected_error(db: Session, action: str, exc: Exception, message: str) -> ActionError:
    """
    Traduce cualquier excepción que se escape del servicio.
    El detalle va al log del servidor; al usuario solo le llega `message`.
    """
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.exception(f"❌ [{action}] Rollback fallido")

    if isinstance(exc, SQLAlchemyError):
        logger.exception(f"❌ [{action}] Database error: {exc}")
        return create_error(message, ActionErrorCode.DATABASE_ERROR)

    logger.exception(f"❌ [{action}] Unexpected error: {exc}")
    return create_error(message, ActionErrorCode.UNKNOWN_ERROR)
