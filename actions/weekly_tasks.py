"""
Acciones de tareas semanales.

Las fechas de semana que llegan de fuera (formulario o filtro) se
normalizan SIEMPRE al domingo con get_week_start() antes de guardar o
filtrar; el servicio compara por igualdad exacta.
"""

from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from action_types import (
    ActionErrorCode, ActionResponse, FieldError, create_error, create_success, is_action_error
)
from actions import not_found, session_user_id, unauthorized, unexpected_error
from auth import AuthSession
from cache import revalidate_path
from dates import get_week_start, parse_datetime_value
from schemas import WeeklyTaskCreate, WeeklyTaskResponse, WeeklyTaskUpdate
from services import weekly_tasks as weekly_tasks_service
from validation import extract_form_data, validate_form_data


def create_weekly_task_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        validated = validate_form_data(WeeklyTaskCreate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        weekly_task = weekly_tasks_service.create_weekly_task(db, user_id, validated)
        if not weekly_task:
            return not_found(
                "Task not found or you don't have permission to create weekly tasks for it"
            )

        revalidate_path("/goals")
        return create_success(WeeklyTaskResponse.model_validate(weekly_task))
    except Exception as exc:
        return unexpected_error(
            db, "create_weekly_task_action", exc, "Failed to create weekly task. Please try again."
        )


def update_weekly_task_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        validated = validate_form_data(WeeklyTaskUpdate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        weekly_task = weekly_tasks_service.update_weekly_task(db, validated.id, user_id, validated)
        if not weekly_task:
            return not_found("Weekly task not found or you don't have permission to update it")

        revalidate_path("/goals")
        return create_success(WeeklyTaskResponse.model_validate(weekly_task))
    except Exception as exc:
        return unexpected_error(
            db, "update_weekly_task_action", exc, "Failed to update weekly task. Please try again."
        )


def delete_weekly_task_action(
    db: Session, session: Optional[AuthSession], weekly_task_id: str
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        if not weekly_tasks_service.delete_weekly_task(db, weekly_task_id, user_id):
            return not_found("Weekly task not found or you don't have permission to delete it")

        revalidate_path("/goals")
        return create_success({"deleted": True})
    except Exception as exc:
        return unexpected_error(
            db, "delete_weekly_task_action", exc, "Failed to delete weekly task. Please try again."
        )


def get_weekly_tasks_action(
    db: Session,
    session: Optional[AuthSession],
    task_id: Optional[str],
    week_start_date: Optional[str] = None,
) -> ActionResponse:
    """
    Lista las tareas semanales de una tarea.
    week_start_date puede ser cualquier día: se usa el domingo de esa semana.
    """
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        week_start = None
        if week_start_date:
            parsed = parse_datetime_value(week_start_date)
            if parsed is None:
                return create_error(
                    "Validation failed. Please check your input.",
                    ActionErrorCode.VALIDATION_ERROR,
                    [FieldError(field="week_start_date", message="Invalid week start date")],
                )
            week_start = get_week_start(parsed)

        weekly_tasks = weekly_tasks_service.get_weekly_tasks_for_task(
            db, task_id, user_id, week_start
        )
        return create_success([WeeklyTaskResponse.model_validate(w) for w in weekly_tasks])
    except Exception as exc:
        return unexpected_error(
            db, "get_weekly_tasks_action", exc, "Failed to fetch weekly tasks. Please try again."
        )


def get_weekly_task_action(
    db: Session, session: Optional[AuthSession], weekly_task_id: str
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        weekly_task = weekly_tasks_service.get_weekly_task_by_id(db, weekly_task_id, user_id)
        if not weekly_task:
            return not_found("Weekly task not found or you don't have permission to view it")

        return create_success(WeeklyTaskResponse.model_validate(weekly_task))
    except Exception as exc:
        return unexpected_error(
            db, "get_weekly_task_action", exc, "Failed to fetch weekly task. Please try again."
        )
