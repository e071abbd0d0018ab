"""Data models for roommate matching."""

from roommate_match.models.pydantic_models import (
    CandidateMatch,
    CriterionScore,
    MatchBreakdown,
    ScoringConfig,
    SurveyAnswers,
    SurveyRead,
)

__all__ = [
    "CandidateMatch",
    "CriterionScore",
    "MatchBreakdown",
    "ScoringConfig",
    "SurveyAnswers",
    "SurveyRead",
]
