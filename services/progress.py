"""
Resumen de progreso del usuario (página /progress).
Solo lectura, todo filtrado por la cadena de propiedad.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from dates import format_week_range, get_week_start
from models import Goal, Region, Task, TaskStatus, WeeklyTask, WeeklyTaskStatus


def _count_by_status(rows, statuses) -> dict[str, int]:
    counts = {status.value: 0 for status in statuses}
    for status, total in rows:
        counts[status] = total
    return counts


def get_progress_summary(
    db: Session, user_id: str, today: Optional[date] = None
) -> dict:
    """
    Devuelve:
      - cuántos objetivos, regiones y tareas tiene el usuario
      - tareas por estado y cuántas están vencidas (sin completar)
      - tareas semanales de ESTA semana por estado
    """
    today = today or datetime.utcnow().date()
    week_start = get_week_start(today)

    total_goals = db.query(func.count(Goal.id)).filter(Goal.user_id == user_id).scalar()

    total_regions = (
        db.query(func.count(Region.id))
        .join(Goal, Region.goal_id == Goal.id)
        .filter(Goal.user_id == user_id)
        .scalar()
    )

    task_rows = (
        db.query(Task.status, func.count(Task.id))
        .join(Region, Task.region_id == Region.id)
        .join(Goal, Region.goal_id == Goal.id)
        .filter(Goal.user_id == user_id)
        .group_by(Task.status)
        .all()
    )
    tasks_by_status = _count_by_status(task_rows, TaskStatus)
    total_tasks = sum(tasks_by_status.values())

    overdue_tasks = (
        db.query(func.count(Task.id))
        .join(Region, Task.region_id == Region.id)
        .join(Goal, Region.goal_id == Goal.id)
        .filter(
            Goal.user_id == user_id,
            Task.deadline < today,
            Task.status != TaskStatus.completed.value,
        )
        .scalar()
    )

    weekly_rows = (
        db.query(WeeklyTask.status, func.count(WeeklyTask.id))
        .join(Task, WeeklyTask.task_id == Task.id)
        .join(Region, Task.region_id == Region.id)
        .join(Goal, Region.goal_id == Goal.id)
        .filter(Goal.user_id == user_id, WeeklyTask.week_start_date == week_start)
        .group_by(WeeklyTask.status)
        .all()
    )

    completed = tasks_by_status[TaskStatus.completed.value]
    completion_rate = round(completed / total_tasks * 100, 1) if total_tasks else 0.0

    return {
        "total_goals": total_goals or 0,
        "total_regions": total_regions or 0,
        "total_tasks": total_tasks,
        "tasks_by_status": tasks_by_status,
        "week_start_date": week_start,
        "week_range": format_week_range(week_start),
        "weekly_tasks_by_status": _count_by_status(weekly_rows, WeeklyTaskStatus),
        "overdue_tasks": overdue_tasks or 0,
        "completion_rate": completion_rate,
    }
