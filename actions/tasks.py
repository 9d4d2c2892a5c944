from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from action_types import ActionResponse, create_success, is_action_error
from actions import not_found, session_user_id, unauthorized, unexpected_error
from auth import AuthSession
from cache import revalidate_path
from schemas import TaskCreate, TaskResponse, TaskUpdate
from services import tasks as tasks_service
from validation import extract_form_data, validate_form_data


def create_task_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        validated = validate_form_data(TaskCreate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        task = tasks_service.create_task(db, user_id, validated)
        if not task:
            return not_found("Region not found or unauthorized")

        revalidate_path("/goals")
        return create_success(TaskResponse.model_validate(task))
    except Exception as exc:
        return unexpected_error(db, "create_task_action", exc, "Failed to create task. Please try again.")


def update_task_action(
    db: Session, session: Optional[AuthSession], form_data: Mapping[str, Any]
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        validated = validate_form_data(TaskUpdate, extract_form_data(form_data))
        if is_action_error(validated):
            return validated

        task = tasks_service.update_task(db, validated.id, user_id, validated)
        if not task:
            return not_found("Task not found or unauthorized")

        revalidate_path("/goals")
        return create_success(TaskResponse.model_validate(task))
    except Exception as exc:
        return unexpected_error(db, "update_task_action", exc, "Failed to update task. Please try again.")


def delete_task_action(
    db: Session, session: Optional[AuthSession], task_id: str
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        if not tasks_service.delete_task(db, task_id, user_id):
            return not_found("Task not found or unauthorized")

        revalidate_path("/goals")
        return create_success({"deleted": True})
    except Exception as exc:
        return unexpected_error(db, "delete_task_action", exc, "Failed to delete task. Please try again.")


def get_tasks_action(
    db: Session, session: Optional[AuthSession], region_id: Optional[str] = None
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        tasks = tasks_service.get_tasks_for_region(db, region_id, user_id)
        return create_success([TaskResponse.model_validate(t) for t in tasks])
    except Exception as exc:
        return unexpected_error(db, "get_tasks_action", exc, "Failed to fetch tasks. Please try again.")


def get_task_action(
    db: Session, session: Optional[AuthSession], task_id: str
) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        task = tasks_service.get_task_by_id(db, task_id, user_id)
        if not task:
            return not_found("Task not found or unauthorized")

        return create_success(TaskResponse.model_validate(task))
    except Exception as exc:
        return unexpected_error(db, "get_task_action", exc, "Failed to fetch task. Please try again.")
