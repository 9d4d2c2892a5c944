from datetime import date, datetime

from models import Goal, User, UserPreferences, WeeklyTask
from seed import DEMO_USERS, reset_database, seed_demo_data


def test_seed_is_idempotent(db):
    today = date(2025, 11, 12)
    assert seed_demo_data(db, today=today) == len(DEMO_USERS)
    assert seed_demo_data(db, today=today) == 0

    assert db.query(User).count() == len(DEMO_USERS)
    assert db.query(Goal).count() == sum(len(u["goals"]) for u in DEMO_USERS)

    bob = db.query(User).filter(User.email == "bob@example.com").one()
    prefs = db.query(UserPreferences).filter(UserPreferences.user_id == bob.id).one()
    assert (prefs.language, prefs.theme) == ("de", "dark")


def test_seeded_weekly_tasks_start_on_sunday(db):
    seed_demo_data(db, today=date(2025, 11, 12))
    weeks = {w.week_start_date for w in db.query(WeeklyTask).all()}
    assert weeks == {datetime(2025, 11, 9)}


def test_reset_database(db):
    seed_demo_data(db)
    reset_database(db)
    assert db.query(User).count() == 0
    assert db.query(WeeklyTask).count() == 0
