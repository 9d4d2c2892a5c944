from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth import AuthSession, SessionUser
from cache import clear_revalidation_hooks, register_revalidation_hook
from database import Base, enable_sqlite_foreign_keys
from models import User
from schemas import GoalCreate, RegionCreate, TaskCreate, WeeklyTaskCreate
from services import goals as goals_service
from services import regions as regions_service
from services import tasks as tasks_service
from services import weekly_tasks as weekly_tasks_service

SUNDAY = datetime(2025, 11, 9)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def _make_user(db, email, name):
    user = User(email=email, name=name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def alice(db):
    return _make_user(db, "alice@example.com", "Alice Johnson")


@pytest.fixture
def bob(db):
    return _make_user(db, "bob@example.com", "Bob Schmidt")


def session_for(user) -> AuthSession:
    return AuthSession(
        user=SessionUser(id=user.id, email=user.email, name=user.name),
        expires=datetime(2099, 1, 1),
    )


@pytest.fixture
def alice_session(alice):
    return session_for(alice)


@pytest.fixture
def bob_session(bob):
    return session_for(bob)


@pytest.fixture
def revalidated():
    """Rutas invalidadas durante el test"""
    paths = []
    register_revalidation_hook(paths.append)
    yield paths
    clear_revalidation_hooks()


@pytest.fixture
def hierarchy(db, alice):
    """Goal → Region → Task → WeeklyTask de Alice"""
    goal = goals_service.create_goal(
        db, alice.id, GoalCreate(title="Run a marathon", description="42 km")
    )
    region = regions_service.create_region(
        db, alice.id, RegionCreate(goal_id=goal.id, title="Endurance")
    )
    task = tasks_service.create_task(
        db, alice.id,
        TaskCreate(region_id=region.id, title="Long runs", deadline=date(2025, 12, 31)),
    )
    weekly_task = weekly_tasks_service.create_weekly_task(
        db, alice.id,
        WeeklyTaskCreate(task_id=task.id, title="Run 15 km", priority=2, week_start_date=SUNDAY),
    )
    return {"goal": goal, "region": region, "task": task, "weekly_task": weekly_task}
