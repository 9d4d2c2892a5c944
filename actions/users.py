"""
Acciones sobre el propio usuario (página de ajustes).
"""

from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from action_types import ActionResponse, create_success, is_action_error
from actions import not_found, session_user_id, unauthorized, unexpected_error
from auth import AuthSession
from cache import revalidate_path
from schemas import UserNameUpdate, UserResponse
from services import users as users_service
from validation import extract_form_data, validate_form_data


def get_current_user_action(db: Session, session: Optional[AuthSession]) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized("You must be logged in to view your profile")

        user = users_service.get_user_by_id(db, user_id)
        if not user:
            return not_found("User not found")

        return create_success(UserResponse.model_validate(user))
    except Exception as exc:
        return unexpected_error(db, "get_current_user_action", exc, "Failed to load profile. Please try again.")


def update_user_name_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    """
    Cambia el nombre visible. Un nombre vacío o de solo espacios se guarda
    como None (sin nombre); el HTML se elimina antes de guardar.
    """
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized("You must be logged in to update your name")

        validated = validate_form_data(UserNameUpdate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        user = users_service.update_user_name(db, user_id, validated.name)
        if not user:
            return not_found("User not found")

        revalidate_path("/settings")
        return create_success(UserResponse.model_validate(user))
    except Exception as exc:
        return unexpected_error(db, "update_user_name_action", exc, "Failed to update name. Please try again.")
