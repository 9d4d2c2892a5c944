"""
Acciones de objetivos (Goals).
"""

from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from action_types import ActionResponse, create_success, is_action_error
from actions import not_found, session_user_id, unauthorized, unexpected_error
from auth import AuthSession
from cache import revalidate_path
from schemas import GoalCreate, GoalResponse, GoalUpdate
from services import goals as goals_service
from validation import extract_form_data, validate_form_data


def create_goal_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        validated = validate_form_data(GoalCreate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        goal = goals_service.create_goal(db, user_id, validated)

        revalidate_path("/goals")
        return create_success(GoalResponse.model_validate(goal))
    except Exception as exc:
        return unexpected_error(db, "create_goal_action", exc, "Failed to create goal. Please try again.")


def update_goal_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    """El id del objetivo viaja dentro del formulario (campo "id")"""
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        validated = validate_form_data(GoalUpdate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        goal = goals_service.update_goal(db, validated.id, user_id, validated)
        if not goal:
            return not_found("Goal not found or unauthorized")

        revalidate_path("/goals")
        revalidate_path(f"/goals/{goal.id}")
        return create_success(GoalResponse.model_validate(goal))
    except Exception as exc:
        return unexpected_error(db, "update_goal_action", exc, "Failed to update goal. Please try again.")


def delete_goal_action(
    db: Session, session: Optional[AuthSession], goal_id: str
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        if not goals_service.delete_goal(db, goal_id, user_id):
            return not_found("Goal not found or unauthorized")

        revalidate_path("/goals")
        return create_success({"deleted": True})
    except Exception as exc:
        return unexpected_error(db, "delete_goal_action", exc, "Failed to delete goal. Please try again.")


def get_goals_action(db: Session, session: Optional[AuthSession]) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        goals = goals_service.get_goals_for_user(db, user_id)
        return create_success([GoalResponse.model_validate(g) for g in goals])
    except Exception as exc:
        return unexpected_error(db, "get_goals_action", exc, "Failed to fetch goals. Please try again.")


def get_goal_action(db: Session, session: Optional[AuthSession], goal_id: str) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        goal = goals_service.get_goal_by_id(db, goal_id, user_id)
        if not goal:
            return not_found("Goal not found or unauthorized")

        return create_success(GoalResponse.model_validate(goal))
    except Exception as exc:
        return unexpected_error(db, "get_goal_action", exc, "Failed to fetch goal. Please try again.")
