import io
from datetime import date, datetime

from starlette.datastructures import UploadFile

from action_types import ActionError, ActionErrorCode, is_action_error
from schemas import (
    GoalCreate, LocaleUpdate, TaskCreate, TaskUpdate, UserNameUpdate,
    UserPreferencesUpdate, WeeklyTaskCreate, WeeklyTaskUpdate
)
from validation import (
    extract_form_data, sanitize_optional_string, sanitize_string, validate_form_data
)

TASK_ID = "5f3c2a8e-1b7d-4c1e-9a2f-0d6b8e4f7a11"
REGION_ID = "0b9d5e3a-7c2f-4e8b-a1d6-3f5c9e2b7d40"


def _errors_by_field(result: ActionError) -> dict:
    return {err.field: err.message for err in result.validation_errors}


# ===================== sanitize / extract =====================

def test_sanitize_string_strips_markup_and_script_patterns():
    assert sanitize_string("  <b>Hola</b> mundo  ") == "Hola mundo"
    assert sanitize_string("javascript:alert(1)") == "alert(1)"
    assert sanitize_string('click onclick="x"') == 'click "x"'
    assert sanitize_string("a\x00b\x07c") == "abc"
    assert sanitize_string("line\nbreak") == "line\nbreak"


def test_sanitize_optional_string():
    assert sanitize_optional_string(None) is None
    assert sanitize_optional_string("") is None
    assert sanitize_optional_string("<br>") is None
    assert sanitize_optional_string(" ok ") == "ok"


def test_extract_form_data_trims_and_turns_blank_into_none():
    data = extract_form_data({
        "title": "  Goal  ",
        "description": "   ",
        "priority": 2,
        "done": True,
        "status": ["bogus"],
        "file": UploadFile(file=io.BytesIO(b"data"), filename="notes.txt"),
    })
    assert data == {
        "title": "Goal",
        "description": None,
        "priority": 2,
        "done": True,
        "status": ["bogus"],
    }


# ===================== schemas =====================

def test_goal_requires_title():
    result = validate_form_data(GoalCreate, {"title": None})
    assert is_action_error(result)
    assert result.code == ActionErrorCode.VALIDATION_ERROR
    assert result.error == "Validation failed. Please check your input."
    assert _errors_by_field(result) == {"title": "Title is required"}


def test_goal_title_only_markup_counts_as_empty():
    result = validate_form_data(GoalCreate, {"title": "<p></p>"})
    assert _errors_by_field(result)["title"] == "Title is required"


def test_goal_title_too_long():
    result = validate_form_data(GoalCreate, {"title": "x" * 256})
    assert _errors_by_field(result)["title"] == "Title must be 255 characters or less"
    ok = validate_form_data(GoalCreate, {"title": "x" * 255})
    assert isinstance(ok, GoalCreate)


def test_goal_title_length_counts_markup():
    # 250 letras + etiquetas = 257 antes de limpiar
    result = validate_form_data(GoalCreate, {"title": "<b>" + "x" * 250 + "</b>"})
    assert _errors_by_field(result) == {"title": "Title must be 255 characters or less"}


def test_non_text_values_are_rejected_not_dropped():
    result = validate_form_data(GoalCreate, {"title": ["Learn German"], "description": 7})
    assert _errors_by_field(result) == {
        "title": "Title must be text",
        "description": "Description must be text",
    }


def test_goal_title_and_description_are_cleaned():
    goal = validate_form_data(GoalCreate, {"title": "  Learn <i>German</i> ", "description": "  "})
    assert goal.title == "Learn German"
    assert goal.description is None


def test_weekly_task_priority_out_of_range_is_rejected():
    result = validate_form_data(WeeklyTaskCreate, {
        "task_id": TASK_ID,
        "title": "Run",
        "priority": "5",
        "week_start_date": "2025-11-09",
    })
    assert is_action_error(result)
    assert _errors_by_field(result) == {"priority": "Priority must be 1, 2, or 3"}


def test_weekly_task_priority_must_be_a_real_number():
    for priority in (True, False, 2.5, [2], {"value": 2}):
        result = validate_form_data(WeeklyTaskCreate, {
            "task_id": TASK_ID, "title": "Run", "priority": priority,
            "week_start_date": "2025-11-09",
        })
        assert _errors_by_field(result) == {"priority": "Priority must be 1, 2, or 3"}

    parsed = validate_form_data(WeeklyTaskCreate, {
        "task_id": TASK_ID, "title": "Run", "priority": 3, "week_start_date": "2025-11-09",
    })
    assert parsed.priority == 3


def test_weekly_task_valid_priorities_and_default():
    for priority in ("1", "2", "3"):
        parsed = validate_form_data(WeeklyTaskCreate, {
            "task_id": TASK_ID, "title": "Run", "priority": priority,
            "week_start_date": "2025-11-09",
        })
        assert parsed.priority == int(priority)

    parsed = validate_form_data(WeeklyTaskCreate, {
        "task_id": TASK_ID, "title": "Run", "week_start_date": "2025-11-09",
    })
    assert parsed.priority == 1


def test_weekly_task_week_start_is_normalized_to_sunday():
    parsed = validate_form_data(WeeklyTaskCreate, {
        "task_id": TASK_ID, "title": "Run", "week_start_date": "2025-11-12T15:30:00Z",
    })
    assert parsed.week_start_date == datetime(2025, 11, 9)


def test_weekly_task_requires_week_start_and_valid_task_id():
    result = validate_form_data(WeeklyTaskCreate, {"task_id": "nope", "title": "Run"})
    errors = _errors_by_field(result)
    assert errors["task_id"] == "Invalid task ID"
    assert errors["week_start_date"] == "Invalid week start date"


def test_weekly_task_update_leaves_optional_fields_unset():
    parsed = validate_form_data(WeeklyTaskUpdate, {"id": TASK_ID, "title": "Run"})
    assert parsed.priority is None
    assert parsed.week_start_date is None
    assert parsed.status is None


def test_weekly_task_update_rejects_unknown_status():
    for status in ("done", ["bogus"], {"status": "completed"}, True):
        result = validate_form_data(WeeklyTaskUpdate, {"id": TASK_ID, "title": "Run", "status": status})
        assert _errors_by_field(result) == {
            "status": "Status must be pending, in_progress, or completed"
        }


def test_task_create_defaults_status_and_parses_deadline():
    parsed = validate_form_data(TaskCreate, {
        "region_id": REGION_ID, "title": "Long runs", "deadline": "2025-12-31",
    })
    assert parsed.status == "active"
    assert parsed.deadline == date(2025, 12, 31)


def test_task_create_invalid_deadline():
    result = validate_form_data(TaskCreate, {
        "region_id": REGION_ID, "title": "Long runs", "deadline": "tomorrow",
    })
    assert _errors_by_field(result) == {"deadline": "Invalid deadline date"}


def test_task_update_requires_status():
    result = validate_form_data(TaskUpdate, {
        "id": REGION_ID, "title": "Long runs", "deadline": "2025-12-31",
    })
    assert _errors_by_field(result) == {
        "status": "Status must be active, incomplete, or completed"
    }


def test_user_name_update():
    assert validate_form_data(UserNameUpdate, {"name": None}).name is None
    assert validate_form_data(UserNameUpdate, {"name": "  Jane Doe "}).name == "Jane Doe"
    result = validate_form_data(UserNameUpdate, {"name": "n" * 101})
    assert _errors_by_field(result) == {"name": "Name must be 100 characters or less"}


def test_preferences_update_only_accepts_known_values():
    parsed = validate_form_data(UserPreferencesUpdate, {"language": "de"})
    assert parsed.language == "de"
    assert parsed.theme is None

    result = validate_form_data(UserPreferencesUpdate, {"language": "fr", "theme": "neon"})
    assert _errors_by_field(result) == {
        "language": "Language must be one of: en, de",
        "theme": "Theme must be one of: light, dark, system",
    }


def test_locale_update():
    assert validate_form_data(LocaleUpdate, {"locale": "de"}).locale == "de"
    result = validate_form_data(LocaleUpdate, {"locale": "es"})
    assert _errors_by_field(result) == {"locale": "Invalid locale"}


def test_error_envelope_serialization():
    result = validate_form_data(GoalCreate, {})
    assert result.to_dict() == {
        "error": "Validation failed. Please check your input.",
        "code": "VALIDATION_ERROR",
        "validationErrors": [{"field": "title", "message": "Title is required"}],
    }
