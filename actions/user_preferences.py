from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from action_types import ActionResponse, create_success, is_action_error
from actions import not_found, session_user_id, unauthorized, unexpected_error
from auth import AuthSession
from cache import revalidate_path
from schemas import UserPreferencesResponse, UserPreferencesUpdate
from services import user_preferences as preferences_service
from validation import extract_form_data, validate_form_data


def get_user_preferences_action(db: Session, session: Optional[AuthSession]) -> ActionResponse:
    """Preferencias del usuario (se crean con valores por defecto si no hay)"""
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized("You must be logged in to view preferences")

        preferences = preferences_service.get_user_preferences(db, user_id)
        return create_success(UserPreferencesResponse.model_validate(preferences))
    except Exception as exc:
        return unexpected_error(db, "get_user_preferences_action", exc, "Failed to load preferences")


def update_user_preferences_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    """
    Cambia idioma ("en" | "de") y/o tema ("light" | "dark" | "system").
    La interfaz aplica el cambio antes de tener respuesta y lo deshace si
    aquí se devuelve un error.
    """
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized("You must be logged in to update preferences")

        validated = validate_form_data(UserPreferencesUpdate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        preferences = preferences_service.update_user_preferences(db, user_id, validated)
        if not preferences:
            return not_found("Preferences not found")

        revalidate_path("/settings")
        return create_success(UserPreferencesResponse.model_validate(preferences))
    except Exception as exc:
        return unexpected_error(db, "update_user_preferences_action", exc, "Failed to update preferences")
