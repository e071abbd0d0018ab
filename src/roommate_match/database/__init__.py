"""Database modules."""

from roommate_match.database.engine import get_engine, get_session, init_db, reset_engine
from roommate_match.database.repository import MatchScoreRepository, SurveyRepository

__all__ = [
    "get_engine",
    "get_session",
    "init_db",
    "reset_engine",
    "MatchScoreRepository",
    "SurveyRepository",
]
