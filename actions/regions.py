"""
Acciones de regiones. Crear necesita goal_id en el formulario; el
servicio comprueba que ese objetivo es del usuario.
"""

from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from action_types import ActionResponse, create_success, is_action_error
from actions import not_found, session_user_id, unauthorized, unexpected_error
from auth import AuthSession
from cache import revalidate_path
from schemas import RegionCreate, RegionResponse, RegionUpdate
from services import regions as regions_service
from validation import extract_form_data, validate_form_data


def create_region_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        validated = validate_form_data(RegionCreate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        region = regions_service.create_region(db, user_id, validated)
        if not region:
            return not_found("Goal not found or unauthorized")

        revalidate_path("/goals")
        revalidate_path(f"/goals/{region.goal_id}")
        return create_success(RegionResponse.model_validate(region))
    except Exception as exc:
        return unexpected_error(db, "create_region_action", exc, "Failed to create region. Please try again.")


def update_region_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        validated = validate_form_data(RegionUpdate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        region = regions_service.update_region(db, validated.id, user_id, validated)
        if not region:
            return not_found("Region not found or unauthorized")

        revalidate_path("/goals")
        revalidate_path(f"/goals/{region.goal_id}")
        return create_success(RegionResponse.model_validate(region))
    except Exception as exc:
        return unexpected_error(db, "update_region_action", exc, "Failed to update region. Please try again.")


def delete_region_action(
    db: Session, session: Optional[AuthSession], region_id: str
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        if not regions_service.delete_region(db, region_id, user_id):
            return not_found("Region not found or unauthorized")

        revalidate_path("/goals")
        return create_success({"deleted": True})
    except Exception as exc:
        return unexpected_error(db, "delete_region_action", exc, "Failed to delete region. Please try again.")


def get_regions_action(
    db: Session, session: Optional[AuthSession], goal_id: Optional[str] = None
) -> ActionResponse:
    """Sin goal_id devuelve las regiones de todos los objetivos del usuario"""
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        regions = regions_service.get_regions_for_goal(db, goal_id, user_id)
        return create_success([RegionResponse.model_validate(r) for r in regions])
    except Exception as exc:
        return unexpected_error(db, "get_regions_action", exc, "Failed to fetch regions. Please try again.")


def get_region_action(
    db: Session, session: Optional[AuthSession], region_id: str
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        region = regions_service.get_region_by_id(db, region_id, user_id)
        if not region:
            return not_found("Region not found or unauthorized")

        return create_success(RegionResponse.model_validate(region))
    except Exception as exc:
        return unexpected_error(db, "get_region_action", exc, "Failed to fetch region. Please try again.")
