"""
=============================================================================
SEED.PY — Datos de demostración
=============================================================================
Crea un par de usuarios con objetivos, regiones, tareas y tareas
semanales para poder probar la interfaz sin empezar de cero.

Uso:
  python seed.py          → añade los datos si no existen
  python seed.py --reset  → borra TODO y vuelve a crearlo

No manda emails: para entrar como estos usuarios hay que pedir un
magic link con su email (en desarrollo el link sale en el log).
"""

import logging
import sys
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from database import SessionLocal, init_db
from dates import get_week_start
from models import (
    Goal, Region, Task, TaskStatus, User, UserPreferences,
    VerificationToken, WeeklyTask, WeeklyTaskStatus
)

logger = logging.getLogger("goaltracker.seed")


# Cada usuario: email, nombre, idioma, tema y sus objetivos.
# Cada objetivo: título, descripción y {región: [(tarea, días hasta el deadline, estado)]}
DEMO_USERS = [
    {
        "email": "alice@example.com",
        "name": "Alice Johnson",
        "language": "en",
        "theme": "light",
        "goals": [
            {
                "title": "Run a half marathon",
                "description": "Finish 21 km in under 2 hours by autumn",
                "regions": {
                    "Endurance": [
                        ("Build a base of 30 km per week", 30, TaskStatus.active),
                        ("Long run of 15 km", 45, TaskStatus.active),
                    ],
                    "Strength": [
                        ("Two gym sessions per week", 20, TaskStatus.incomplete),
                    ],
                },
            },
            {
                "title": "Ship the goal tracker",
                "description": "Finish the first public version",
                "regions": {
                    "Backend": [
                        ("Add create, read, update, delete for goals", -5, TaskStatus.completed),
                        ("Add weekly task planning", 10, TaskStatus.active),
                    ],
                    "Frontend": [
                        ("Settings page with language and theme", 14, TaskStatus.active),
                    ],
                },
            },
        ],
    },
    {
        "email": "bob@example.com",
        "name": "Bob Schmidt",
        "language": "de",
        "theme": "dark",
        "goals": [
            {
                "title": "Spanisch lernen",
                "description": "B1-Niveau bis Jahresende",
                "regions": {
                    "Vokabeln": [
                        ("500 neue Wörter", 60, TaskStatus.active),
                    ],
                    "Konversation": [
                        ("Wöchentlicher Sprachaustausch", 90, TaskStatus.active),
                    ],
                },
            },
        ],
    },
]

WEEKLY_TEMPLATES = [
    ("Plan the week", 1, WeeklyTaskStatus.completed),
    ("Make progress on the main item", 2, WeeklyTaskStatus.in_progress),
    ("Review and adjust", 3, WeeklyTaskStatus.pending),
]


def reset_database(db: Session):
    """Borra todo (en orden, de las hojas hacia arriba)"""
    for model in (WeeklyTask, Task, Region, Goal, UserPreferences, VerificationToken, User):
        db.query(model).delete()
    db.commit()
    logger.info("🧹 Base de datos vaciada")


def seed_demo_data(db: Session, today=None) -> int:
    """
    Inserta los usuarios de demo que no existan todavía.
    Devuelve cuántos usuarios se han creado.
    """
    now = datetime.utcnow()
    today = today or now.date()
    this_week = get_week_start(today)
    created = 0

    for user_def in DEMO_USERS:
        if db.query(User).filter(User.email == user_def["email"]).first():
            continue

        user = User(email=user_def["email"], name=user_def["name"], email_verified=now)
        user.preferences = UserPreferences(
            language=user_def["language"], theme=user_def["theme"]
        )
        db.add(user)

        for goal_def in user_def["goals"]:
            goal = Goal(title=goal_def["title"], description=goal_def["description"])
            user.goals.append(goal)

            for region_title, task_defs in goal_def["regions"].items():
                region = Region(title=region_title)
                goal.regions.append(region)

                for task_title, days, status in task_defs:
                    task = Task(
                        title=task_title,
                        deadline=today + timedelta(days=days),
                        status=status.value,
                    )
                    region.tasks.append(task)

                    # Solo las tareas activas tienen plan semanal
                    if status != TaskStatus.active:
                        continue
                    for title, priority, weekly_status in WEEKLY_TEMPLATES:
                        task.weekly_tasks.append(WeeklyTask(
                            title=title,
                            priority=priority,
                            week_start_date=this_week,
                            status=weekly_status.value,
                        ))

        created += 1
        logger.info(f"👤 Usuario demo creado: {user_def['email']}")

    db.commit()
    return created


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
    init_db()
    db = SessionLocal()
    try:
        if "--reset" in sys.argv:
            reset_database(db)
        total = seed_demo_data(db)
        logger.info(f"✅ Seed completado ({total} usuarios nuevos)")
    finally:
        db.close()
