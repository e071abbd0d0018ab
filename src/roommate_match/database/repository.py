"""Repository layer for database operations."""

import functools
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from sqlalchemy import or_
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from typing_extensions import ParamSpec

from roommate_match.models.db_models import MatchScore, SurveyResponse

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Retry configuration for database operations
DB_RETRY_MAX_ATTEMPTS = 5
DB_RETRY_WAIT_MIN = 1  # seconds
DB_RETRY_WAIT_MAX = 8  # seconds
DB_RETRY_WAIT_MULTIPLIER = 2


def with_db_retry(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to retry database operations on SQLite lock errors.

    Retries on sqlalchemy.exc.OperationalError using exponential backoff.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        for attempt in Retrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(DB_RETRY_MAX_ATTEMPTS),
            wait=wait_exponential(
                multiplier=DB_RETRY_WAIT_MULTIPLIER,
                min=DB_RETRY_WAIT_MIN,
                max=DB_RETRY_WAIT_MAX,
            ),
            reraise=True,
        ):
            with attempt:
                return func(*args, **kwargs)
        raise RuntimeError("Retry logic failed unexpectedly")

    return wrapper


class SurveyRepository:
    """Repository for survey responses, one row per user."""

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    # ========== READ ==========

    def get_survey(self, user_id: str) -> SurveyResponse | None:
        """Get the survey response of a user.

        Args:
            user_id: User identifier.

        Returns:
            SurveyResponse if found, None otherwise.
        """
        return self._session.query(SurveyResponse).filter(SurveyResponse.user_id == user_id).first()

    def get_surveys(self, exclude_user_id: str | None = None) -> list[SurveyResponse]:
        """Get all survey responses ordered by user id.

        Args:
            exclude_user_id: Optional user to leave out (typically the viewer).

        Returns:
            List of SurveyResponse objects.
        """
        query = self._session.query(SurveyResponse)
        if exclude_user_id is not None:
            query = query.filter(SurveyResponse.user_id != exclude_user_id)
        return query.order_by(SurveyResponse.user_id).all()

    def count_surveys(self) -> int:
        return self._session.query(SurveyResponse).count()

    # ========== UPSERT ==========

    @with_db_retry
    def upsert_survey(
        self,
        user_id: str,
        answers: dict[str, Any],
        profile: dict[str, Any] | None = None,
        display_name: str | None = None,
    ) -> tuple[SurveyResponse, bool]:
        """Create or replace the survey response of a user.

        Every update bumps the version so cached scores go stale.

        Args:
            user_id: User identifier.
            answers: Raw survey row.
            profile: Profile fields (age, gender, city).
            display_name: Optional name shown in rankings.

        Returns:
            Tuple of (SurveyResponse, created) where created is True if new.
        """
        existing = self.get_survey(user_id)

        if existing is None:
            survey = SurveyResponse(
                user_id=user_id,
                display_name=display_name,
                profile=profile or {},
                answers=answers,
                version=1,
            )
            self._session.add(survey)
            self._session.commit()
            self._session.refresh(survey)
            return survey, True

        existing.answers = answers
        if profile is not None:
            existing.profile = profile
        existing.display_name = display_name or existing.display_name
        existing.version = existing.version + 1
        existing.updated_at = datetime.now(timezone.utc)

        self._session.commit()
        self._session.refresh(existing)
        return existing, False

    # ========== DELETE ==========

    def delete_survey(self, user_id: str) -> bool:
        """Delete the survey response of a user and every cached score involving them.

        A re-created survey starts again at version 1, so its old scores
        must not outlive the row.

        Args:
            user_id: User identifier.

        Returns:
            True if deleted, False if not found.
        """
        survey = self.get_survey(user_id)
        if survey is None:
            return False

        self._session.query(MatchScore).filter(
            or_(MatchScore.user_id == user_id, MatchScore.other_user_id == user_id)
        ).delete(synchronize_session=False)
        self._session.delete(survey)
        self._session.commit()
        return True


class MatchScoreRepository:
    """Repository for cached pair scores.

    A cached score is valid only for the exact survey versions it was
    computed from.
    """

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    def _get_pair(self, user_id: str, other_user_id: str) -> MatchScore | None:
        return (
            self._session.query(MatchScore)
            .filter(MatchScore.user_id == user_id, MatchScore.other_user_id == other_user_id)
            .first()
        )

    def get_cached_score(
        self,
        user_id: str,
        other_user_id: str,
        user_version: int,
        other_version: int,
    ) -> MatchScore | None:
        """Get a cached score if it matches both survey versions.

        Returns:
            MatchScore if fresh, None if missing or stale.
        """
        cached = self._get_pair(user_id, other_user_id)
        if cached is None:
            return None
        if cached.user_version != user_version or cached.other_version != other_version:
            logger.debug("Stale cached score for %s -> %s", user_id, other_user_id)
            return None
        return cached

    @with_db_retry
    def save_score(
        self,
        user_id: str,
        other_user_id: str,
        user_version: int,
        other_version: int,
        score: int,
    ) -> MatchScore:
        """Store or replace the cached score of a user pair."""
        cached = self._get_pair(user_id, other_user_id)
        if cached is None:
            cached = MatchScore(user_id=user_id, other_user_id=other_user_id)
            self._session.add(cached)

        cached.user_version = user_version
        cached.other_version = other_version
        cached.score = score
        cached.computed_at = datetime.now(timezone.utc)

        self._session.commit()
        self._session.refresh(cached)
        return cached

    @with_db_retry
    def invalidate_user(self, user_id: str) -> int:
        """Delete every cached score involving a user.

        Returns:
            Number of deleted rows.
        """
        deleted = (
            self._session.query(MatchScore)
            .filter(or_(MatchScore.user_id == user_id, MatchScore.other_user_id == user_id))
            .delete(synchronize_session=False)
        )
        self._session.commit()
        return deleted
