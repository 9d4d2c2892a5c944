"""
Tareas semanales: el trabajo de una semana concreta dentro de una Task.
Propiedad: weekly_task.task.region.goal.user_id

week_start_date se compara por IGUALDAD exacta. Quien llama tiene que
normalizar antes la fecha con dates.get_week_start() (un miércoles no
encuentra nada).
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from models import Goal, Region, Task, WeeklyTask
from schemas import WeeklyTaskCreate, WeeklyTaskUpdate
from services import apply_changes, update_fields


def _owned_weekly_tasks(db: Session, user_id: str):
    return (
        db.query(WeeklyTask)
        .join(Task, WeeklyTask.task_id == Task.id)
        .join(Region, Task.region_id == Region.id)
        .join(Goal, Region.goal_id == Goal.id)
        .filter(Goal.user_id == user_id)
    )


def _owned_weekly_task(db: Session, weekly_task_id: str, user_id: str) -> Optional[WeeklyTask]:
    return _owned_weekly_tasks(db, user_id).filter(WeeklyTask.id == weekly_task_id).first()


def get_weekly_tasks_for_task(
    db: Session,
    task_id: Optional[str],
    user_id: str,
    week_start_date: Optional[datetime] = None,
) -> list[WeeklyTask]:
    """
    Tareas semanales de una tarea, ordenadas por prioridad (1 primero).
    Sin task_id → todas las del usuario. Con week_start_date → solo esa semana.
    """
    query = _owned_weekly_tasks(db, user_id)
    if task_id:
        query = query.filter(WeeklyTask.task_id == task_id)
    if week_start_date is not None:
        query = query.filter(WeeklyTask.week_start_date == week_start_date)
    return query.order_by(WeeklyTask.priority.asc(), WeeklyTask.created_at.asc()).all()


def get_weekly_task_by_id(
    db: Session, weekly_task_id: str, user_id: str
) -> Optional[WeeklyTask]:
    return _owned_weekly_task(db, weekly_task_id, user_id)


def create_weekly_task(
    db: Session, user_id: str, data: WeeklyTaskCreate
) -> Optional[WeeklyTask]:
    """None si la tarea padre no existe o no es del usuario"""
    task = (
        db.query(Task)
        .join(Region, Task.region_id == Region.id)
        .join(Goal, Region.goal_id == Goal.id)
        .filter(Task.id == data.task_id, Goal.user_id == user_id)
        .first()
    )
    if not task:
        return None

    weekly_task = WeeklyTask(
        task_id=task.id,
        title=data.title,
        description=data.description,
        priority=data.priority,
        week_start_date=data.week_start_date,
    )
    db.add(weekly_task)
    db.commit()
    db.refresh(weekly_task)
    return weekly_task


def update_weekly_task(
    db: Session, weekly_task_id: str, user_id: str, data: WeeklyTaskUpdate
) -> Optional[WeeklyTask]:
    weekly_task = _owned_weekly_task(db, weekly_task_id, user_id)
    if not weekly_task:
        return None

    apply_changes(weekly_task, update_fields(data))
    db.commit()
    db.refresh(weekly_task)
    return weekly_task


def delete_weekly_task(db: Session, weekly_task_id: str, user_id: str) -> bool:
    weekly_task = _owned_weekly_task(db, weekly_task_id, user_id)
    if not weekly_task:
        return False

    db.delete(weekly_task)
    db.commit()
    return True
