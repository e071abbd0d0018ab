"""Service layer for roommate-match business logic."""

from roommate_match.services.match_service import MatchService, SurveyNotFoundError

__all__ = ["MatchService", "SurveyNotFoundError"]
