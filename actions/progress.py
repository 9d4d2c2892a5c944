from typing import Optional

from sqlalchemy.orm import Session

from action_types import ActionResponse, create_success
from actions import session_user_id, unauthorized, unexpected_error
from auth import AuthSession
from schemas import ProgressSummary
from services import progress as progress_service


def get_progress_action(db: Session, session: Optional[AuthSession]) -> ActionResponse:
    try:
        user_id = session_user_id(session)
        if not user_id:
            return unauthorized()

        summary = progress_service.get_progress_summary(db, user_id)
        return create_success(ProgressSummary(**summary))
    except Exception as exc:
        return unexpected_error(db, "get_progress_action", exc, "Failed to load progress. Please try again.")
