"""Compatibility matching modules."""

from roommate_match.matching.normalizer import normalize_text
from roommate_match.matching.scorer import calculate_match_score, explain_match
from roommate_match.matching.survey_builder import build_survey_answers

__all__ = [
    "build_survey_answers",
    "calculate_match_score",
    "explain_match",
    "normalize_text",
]
