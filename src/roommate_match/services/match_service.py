"""Service layer for survey storage and match scoring."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from roommate_match.database.repository import MatchScoreRepository, SurveyRepository
from roommate_match.matching.scorer import active_criteria, explain_match
from roommate_match.matching.survey_builder import build_survey_answers
from roommate_match.models.db_models import SurveyResponse
from roommate_match.models.pydantic_models import (
    CandidateMatch,
    MatchBreakdown,
    ScoringConfig,
    SurveyAnswers,
    SurveyRead,
)

logger = logging.getLogger(__name__)


class SurveyNotFoundError(Exception):
    """Raised when a user has no stored survey."""

    pass


class MatchService:
    """Service for survey storage and match scoring.

    Scores are cached per user pair and survey versions, so an updated
    survey is re-scored on next access. Scores are cached only when the
    effective weights equal the defaults.
    """

    def __init__(self, session: Session, config: ScoringConfig | None = None) -> None:
        """Initialize with database session.

        Args:
            session: SQLAlchemy session instance.
            config: Scoring config. Defaults to the core criteria.
        """
        self._session = session
        self._config = config or ScoringConfig()
        self._cache_enabled = active_criteria(self._config) == active_criteria(ScoringConfig())
        self._survey_repo = SurveyRepository(session)
        self._score_repo = MatchScoreRepository(session)

    def submit_survey(
        self,
        user_id: str,
        answers: dict[str, Any],
        profile: dict[str, Any] | None = None,
        display_name: str | None = None,
    ) -> SurveyAnswers:
        """Store a raw survey row and return its normalized answers.

        Args:
            user_id: User identifier.
            answers: Raw survey row.
            profile: Profile fields (age, gender, city).
            display_name: Optional display name.

        Returns:
            Normalized SurveyAnswers.
        """
        survey, created = self._survey_repo.upsert_survey(
            user_id, answers, profile=profile, display_name=display_name
        )
        # A re-created user restarts at version 1
        self._score_repo.invalidate_user(user_id)
        logger.info(
            "Stored survey for %s (version %d, %s)", user_id, survey.version, "new" if created else "updated"
        )
        return self._to_answers(survey)

    def delete_survey(self, user_id: str) -> None:
        """Delete the survey of a user along with their cached scores.

        Raises:
            SurveyNotFoundError: If the user has no survey.
        """
        if not self._survey_repo.delete_survey(user_id):
            raise SurveyNotFoundError(f"No survey found for user {user_id}")
        logger.info("Deleted survey for %s", user_id)

    def get_survey(self, user_id: str) -> SurveyRead:
        """Get the stored survey of a user.

        Raises:
            SurveyNotFoundError: If the user has no survey.
        """
        return SurveyRead.model_validate(self._require_survey(user_id))

    def get_answers(self, user_id: str) -> SurveyAnswers:
        """Get the normalized answers of a user.

        Raises:
            SurveyNotFoundError: If the user has no survey.
        """
        return self._to_answers(self._require_survey(user_id))

    def explain(self, user_id: str, other_user_id: str) -> MatchBreakdown:
        """Score two stored users with a per-criterion breakdown.

        Raises:
            SurveyNotFoundError: If either user has no survey.
        """
        mine = self._require_survey(user_id)
        theirs = self._require_survey(other_user_id)
        return explain_match(self._to_answers(mine), self._to_answers(theirs), self._config)

    def score_users(self, user_id: str, other_user_id: str, use_cache: bool = True) -> CandidateMatch:
        """Score two stored users, using the score cache when fresh.

        Args:
            user_id: Viewing user.
            other_user_id: Other user.
            use_cache: Read cached scores. New default-config scores are always written.

        Returns:
            CandidateMatch for the other user.

        Raises:
            SurveyNotFoundError: If either user has no survey.
        """
        mine = self._require_survey(user_id)
        theirs = self._require_survey(other_user_id)
        return self._score_pair(mine, theirs, self._to_answers(mine), use_cache)

    def rank_candidates(
        self,
        user_id: str,
        limit: int | None = None,
        min_score: int = 0,
        use_cache: bool = True,
    ) -> list[CandidateMatch]:
        """Rank every other stored user by compatibility.

        Args:
            user_id: Viewing user.
            limit: Maximum number of candidates to return.
            min_score: Drop candidates scoring below this value.
            use_cache: Read cached scores.

        Returns:
            Candidates sorted by score (desc), then user id.

        Raises:
            SurveyNotFoundError: If the viewing user has no survey.
        """
        mine = self._require_survey(user_id)
        my_answers = self._to_answers(mine)

        matches = [
            self._score_pair(mine, theirs, my_answers, use_cache)
            for theirs in self._survey_repo.get_surveys(exclude_user_id=user_id)
        ]
        matches = [m for m in matches if m.score >= min_score]
        matches.sort(key=lambda m: (-m.score, m.user_id))

        if limit is not None:
            matches = matches[:limit]
        return matches

    def _score_pair(
        self,
        mine: SurveyResponse,
        theirs: SurveyResponse,
        my_answers: SurveyAnswers,
        use_cache: bool,
    ) -> CandidateMatch:
        if use_cache and self._cache_enabled:
            cached = self._score_repo.get_cached_score(
                mine.user_id, theirs.user_id, mine.version, theirs.version
            )
            if cached is not None:
                logger.debug("Cache hit for %s -> %s", mine.user_id, theirs.user_id)
                return CandidateMatch(
                    user_id=theirs.user_id,
                    display_name=theirs.display_name,
                    score=cached.score,
                    cached=True,
                    computed_at=cached.computed_at,
                )

        breakdown = explain_match(my_answers, self._to_answers(theirs), self._config)
        match = CandidateMatch(user_id=theirs.user_id, display_name=theirs.display_name, score=breakdown.score)
        if self._cache_enabled:
            stored = self._score_repo.save_score(
                mine.user_id, theirs.user_id, mine.version, theirs.version, breakdown.score
            )
            match = match.model_copy(update={"computed_at": stored.computed_at})
        return match

    def _require_survey(self, user_id: str) -> SurveyResponse:
        survey = self._survey_repo.get_survey(user_id)
        if survey is None:
            raise SurveyNotFoundError(f"No survey found for user {user_id}")
        return survey

    @staticmethod
    def _to_answers(survey: SurveyResponse) -> SurveyAnswers:
        return build_survey_answers(survey.profile or {}, survey.answers or {})
