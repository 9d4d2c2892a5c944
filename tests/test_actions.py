from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from action_types import ActionErrorCode, is_action_error, is_action_success
from actions.goals import (
    create_goal_action, delete_goal_action, get_goal_action, get_goals_action, update_goal_action
)
from actions.locale import DEFAULT_LOCALE, resolve_locale, set_locale_action
from actions.progress import get_progress_action
from actions.regions import create_region_action, get_regions_action, update_region_action
from actions.tasks import create_task_action, delete_task_action, update_task_action
from actions.user_preferences import get_user_preferences_action, update_user_preferences_action
from actions.users import get_current_user_action, update_user_name_action
from actions.weekly_tasks import (
    create_weekly_task_action, delete_weekly_task_action, get_weekly_task_action,
    get_weekly_tasks_action, update_weekly_task_action
)
from dates import format_week_range
from models import Goal, User, WeeklyTask
from services import goals as goals_service

from conftest import SUNDAY


def _boom(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))


# ===================== SESIÓN =====================

def test_create_goal_without_session_never_reaches_the_service(db, monkeypatch):
    calls = []
    monkeypatch.setattr(goals_service, "create_goal", lambda *a, **k: calls.append(a))

    result = create_goal_action(db, None, {"title": "Learn German"})

    assert result.to_dict() == {"error": "Unauthorized", "code": "UNAUTHORIZED"}
    assert calls == []
    assert db.query(Goal).count() == 0


@pytest.mark.parametrize("action, args", [
    (get_goals_action, ()),
    (get_goal_action, ("any",)),
    (delete_goal_action, ("any",)),
    (get_regions_action, ()),
    (delete_task_action, ("any",)),
    (get_weekly_tasks_action, ("any",)),
    (get_weekly_task_action, ("any",)),
    (delete_weekly_task_action, ("any",)),
    (get_progress_action, ()),
])
def test_read_and_delete_actions_require_session(db, action, args):
    result = action(db, None, *args)
    assert result.code == ActionErrorCode.UNAUTHORIZED


def test_user_actions_have_specific_unauthorized_messages(db):
    assert get_current_user_action(db, None).error == "You must be logged in to view your profile"
    assert update_user_name_action(db, None, {"name": "x"}).error == (
        "You must be logged in to update your name"
    )
    assert get_user_preferences_action(db, None).error == "You must be logged in to view preferences"
    assert update_user_preferences_action(db, None, {"theme": "dark"}).error == (
        "You must be logged in to update preferences"
    )


# ===================== GOALS =====================

def test_create_goal_success_revalidates(db, alice_session, revalidated):
    result = create_goal_action(db, alice_session, {"title": "  Learn German  ", "description": ""})

    assert is_action_success(result)
    assert result.data.title == "Learn German"
    assert result.data.description is None
    assert result.data.user_id == alice_session.user.id
    assert revalidated == ["/goals"]


def test_create_goal_ignores_user_id_in_form(db, alice_session, bob):
    result = create_goal_action(db, alice_session, {"title": "Mine", "user_id": bob.id})
    assert result.data.user_id == alice_session.user.id


def test_create_goal_validation_error(db, alice_session, revalidated):
    result = create_goal_action(db, alice_session, {"title": "   "})

    assert result.code == ActionErrorCode.VALIDATION_ERROR
    assert result.validation_errors[0].field == "title"
    assert revalidated == []


def test_update_goal_of_other_user_is_not_found(db, bob_session, hierarchy, revalidated):
    goal = hierarchy["goal"]
    result = update_goal_action(db, bob_session, {"id": goal.id, "title": "Hacked"})

    assert result.to_dict() == {"error": "Goal not found or unauthorized", "code": "NOT_FOUND"}
    assert revalidated == []


def test_update_goal_revalidates_list_and_detail(db, alice_session, hierarchy, revalidated):
    goal = hierarchy["goal"]
    result = update_goal_action(db, alice_session, {"id": goal.id, "title": "Run an ultra"})

    assert result.data.title == "Run an ultra"
    assert revalidated == ["/goals", f"/goals/{goal.id}"]


def test_delete_goal_twice(db, alice_session, hierarchy):
    goal_id = hierarchy["goal"].id
    assert delete_goal_action(db, alice_session, goal_id).to_dict() == {
        "success": True, "data": {"deleted": True}
    }
    assert delete_goal_action(db, alice_session, goal_id).code == ActionErrorCode.NOT_FOUND


def test_get_goals_only_lists_own(db, alice_session, bob_session, hierarchy):
    assert [g.id for g in get_goals_action(db, alice_session).data] == [hierarchy["goal"].id]
    assert get_goals_action(db, bob_session).data == []


def test_database_failure_becomes_generic_error(db, alice_session, monkeypatch, revalidated):
    monkeypatch.setattr(goals_service, "create_goal", _boom)

    result = create_goal_action(db, alice_session, {"title": "Learn German"})

    assert result.to_dict() == {
        "error": "Failed to create goal. Please try again.",
        "code": "DATABASE_ERROR",
    }
    assert revalidated == []


def test_unexpected_failure_is_unknown_error(db, alice_session, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(goals_service, "get_goals_for_user", explode)
    result = get_goals_action(db, alice_session)
    assert result.code == ActionErrorCode.UNKNOWN_ERROR
    assert "boom" not in result.error


def test_failing_revalidation_hook_does_not_break_action(db, alice_session, revalidated):
    from cache import register_revalidation_hook

    def broken(path):
        raise RuntimeError("cache down")

    register_revalidation_hook(broken)
    result = create_goal_action(db, alice_session, {"title": "Still works"})
    assert is_action_success(result)
    assert revalidated == ["/goals"]


# ===================== REGIONS / TASKS =====================

def test_create_region_in_foreign_goal(db, bob_session, hierarchy):
    result = create_region_action(db, bob_session, {
        "goal_id": hierarchy["goal"].id, "title": "Sneaky",
    })
    assert result.to_dict() == {"error": "Goal not found or unauthorized", "code": "NOT_FOUND"}


def test_create_region_revalidates_goal_page(db, alice_session, hierarchy, revalidated):
    goal_id = hierarchy["goal"].id
    result = create_region_action(db, alice_session, {"goal_id": goal_id, "title": "Speed"})

    assert result.data.goal_id == goal_id
    assert revalidated == ["/goals", f"/goals/{goal_id}"]


def test_update_region_not_found(db, bob_session, hierarchy):
    region_id = hierarchy["region"].id
    result = update_region_action(db, bob_session, {"id": region_id, "title": "x"})
    assert result.error == "Region not found or unauthorized"


def test_create_task_in_foreign_region(db, bob_session, hierarchy):
    result = create_task_action(db, bob_session, {
        "region_id": hierarchy["region"].id, "title": "Sneaky", "deadline": "2026-01-01",
    })
    assert result.to_dict() == {"error": "Region not found or unauthorized", "code": "NOT_FOUND"}


def test_create_and_update_task(db, alice_session, hierarchy, revalidated):
    created = create_task_action(db, alice_session, {
        "region_id": hierarchy["region"].id, "title": "Intervals", "deadline": "2026-02-01",
    })
    assert created.data.status == "active"

    updated = update_task_action(db, alice_session, {
        "id": created.data.id, "title": "Intervals", "deadline": "2026-02-01", "status": "completed",
    })
    assert updated.data.status == "completed"
    assert revalidated == ["/goals", "/goals"]


def test_update_task_of_other_user(db, bob_session, hierarchy):
    result = update_task_action(db, bob_session, {
        "id": hierarchy["task"].id, "title": "x", "deadline": "2026-01-01", "status": "active",
    })
    assert result.error == "Task not found or unauthorized"


# ===================== WEEKLY TASKS =====================

def test_create_weekly_task_bad_priority(db, alice_session, hierarchy):
    result = create_weekly_task_action(db, alice_session, {
        "task_id": hierarchy["task"].id, "title": "Run", "priority": "5",
        "week_start_date": "2025-11-09",
    })
    assert result.code == ActionErrorCode.VALIDATION_ERROR
    assert [e.field for e in result.validation_errors] == ["priority"]


def test_create_weekly_task_rejects_boolean_priority(db, alice_session, hierarchy):
    result = create_weekly_task_action(db, alice_session, {
        "task_id": hierarchy["task"].id, "title": "Run", "priority": True,
        "week_start_date": "2025-11-09",
    })
    assert result.to_dict() == {
        "error": "Validation failed. Please check your input.",
        "code": "VALIDATION_ERROR",
        "validationErrors": [{"field": "priority", "message": "Priority must be 1, 2, or 3"}],
    }
    assert db.query(WeeklyTask).count() == 1


def test_update_weekly_task_rejects_list_status(db, alice_session, hierarchy):
    weekly_id = hierarchy["weekly_task"].id
    result = update_weekly_task_action(db, alice_session, {
        "id": weekly_id, "title": "Run 15 km", "status": ["bogus"],
    })
    assert result.code == ActionErrorCode.VALIDATION_ERROR
    assert [e.field for e in result.validation_errors] == ["status"]

    db.expire_all()
    assert db.get(WeeklyTask, weekly_id).status == "pending"


def test_create_weekly_task_normalizes_week(db, alice_session, hierarchy):
    result = create_weekly_task_action(db, alice_session, {
        "task_id": hierarchy["task"].id, "title": "Tempo run", "priority": "1",
        "week_start_date": "2025-11-12T15:30:00.000Z",
    })
    assert result.data.week_start_date == SUNDAY
    assert result.data.status == "pending"


def test_create_weekly_task_for_foreign_task(db, bob_session, hierarchy):
    result = create_weekly_task_action(db, bob_session, {
        "task_id": hierarchy["task"].id, "title": "Run", "week_start_date": "2025-11-09",
    })
    assert result.error == (
        "Task not found or you don't have permission to create weekly tasks for it"
    )


def test_weekly_tasks_filter_accepts_any_day_of_the_week(db, alice_session, hierarchy):
    task_id = hierarchy["task"].id

    midweek = get_weekly_tasks_action(db, alice_session, task_id, "2025-11-13")
    assert [w.title for w in midweek.data] == ["Run 15 km"]

    other_week = get_weekly_tasks_action(db, alice_session, task_id, "2025-11-16")
    assert other_week.data == []


def test_weekly_tasks_filter_rejects_bad_date(db, alice_session, hierarchy):
    result = get_weekly_tasks_action(db, alice_session, hierarchy["task"].id, "someday")
    assert result.to_dict() == {
        "error": "Validation failed. Please check your input.",
        "code": "VALIDATION_ERROR",
        "validationErrors": [{"field": "week_start_date", "message": "Invalid week start date"}],
    }


def test_weekly_task_update_and_delete_messages(db, bob_session, hierarchy):
    weekly_id = hierarchy["weekly_task"].id
    updated = update_weekly_task_action(db, bob_session, {"id": weekly_id, "title": "x"})
    assert updated.error == "Weekly task not found or you don't have permission to update it"

    deleted = delete_weekly_task_action(db, bob_session, weekly_id)
    assert deleted.error == "Weekly task not found or you don't have permission to delete it"

    viewed = get_weekly_task_action(db, bob_session, weekly_id)
    assert viewed.error == "Weekly task not found or you don't have permission to view it"


def test_weekly_task_status_update(db, alice_session, hierarchy):
    weekly_id = hierarchy["weekly_task"].id
    result = update_weekly_task_action(db, alice_session, {
        "id": weekly_id, "title": "Run 15 km", "status": "completed",
    })
    assert result.data.status == "completed"
    assert result.data.priority == 2


# ===================== USUARIO =====================

def test_update_user_name(db, alice_session, revalidated):
    result = update_user_name_action(db, alice_session, {"name": "  Jane Doe  "})
    assert result.data.name == "Jane Doe"

    result = update_user_name_action(db, alice_session, {"name": ""})
    assert result.data.name is None

    db.expire_all()
    assert db.get(User, alice_session.user.id).name is None
    assert revalidated == ["/settings", "/settings"]


def test_update_user_name_strips_html(db, alice_session):
    result = update_user_name_action(db, alice_session, {"name": "<script>x</script>Jane"})
    assert result.data.name == "xJane"


def test_current_user(db, alice_session):
    result = get_current_user_action(db, alice_session)
    assert result.data.email == "alice@example.com"


def test_preferences_flow(db, alice_session, revalidated):
    assert update_user_preferences_action(db, alice_session, {"theme": "dark"}).to_dict() == {
        "error": "Preferences not found", "code": "NOT_FOUND",
    }

    defaults = get_user_preferences_action(db, alice_session)
    assert (defaults.data.language, defaults.data.theme) == ("en", "system")

    updated = update_user_preferences_action(db, alice_session, {"theme": "dark"})
    assert (updated.data.language, updated.data.theme) == ("en", "dark")
    assert revalidated == ["/settings"]

    invalid = update_user_preferences_action(db, alice_session, {"language": "fr"})
    assert invalid.code == ActionErrorCode.VALIDATION_ERROR


# ===================== IDIOMA / PROGRESO =====================

def test_set_locale():
    assert set_locale_action({"locale": "de"}).to_dict() == {"success": True, "data": {"locale": "de"}}
    assert is_action_error(set_locale_action({"locale": "xx"}))


def test_resolve_locale():
    assert resolve_locale("de") == "de"
    assert resolve_locale("xx") == DEFAULT_LOCALE
    assert resolve_locale(None) == DEFAULT_LOCALE


def test_progress_action(db, alice_session, hierarchy):
    result = get_progress_action(db, alice_session)
    assert result.data.total_goals == 1
    assert result.data.total_tasks == 1
    assert isinstance(result.data.week_start_date, datetime)
    assert result.data.week_range == format_week_range(result.data.week_start_date)
