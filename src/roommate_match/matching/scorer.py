"""Compatibility score calculation between two survey answers."""

import math
from collections.abc import Mapping
from typing import Any

from roommate_match.matching.criteria import CORE_CRITERIA, Criterion
from roommate_match.matching.logistics import LOGISTICS_CRITERIA
from roommate_match.matching.survey_builder import coerce_answers
from roommate_match.models.pydantic_models import (
    CriterionScore,
    MatchBreakdown,
    ScoringConfig,
    SurveyAnswers,
)

DEFAULT_WEIGHTS: dict[str, int] = {c.name: c.weight for c in CORE_CRITERIA + LOGISTICS_CRITERIA}

AnswersLike = SurveyAnswers | Mapping[str, Any] | None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positive values."""
    return int(math.floor(value + 0.5))


def active_criteria(config: ScoringConfig | None = None) -> list[tuple[Criterion, int]]:
    """Criteria counted under a config, paired with their effective weights.

    Raises:
        ValueError: If the config names an unknown criterion.
    """
    config = config or ScoringConfig()
    unknown = set(config.weights) - set(DEFAULT_WEIGHTS)
    if unknown:
        raise ValueError(f"Unknown criteria in weights: {', '.join(sorted(unknown))}")

    criteria = list(CORE_CRITERIA)
    if config.include_logistics:
        criteria.extend(LOGISTICS_CRITERIA)
    return [(c, config.weights.get(c.name, c.weight)) for c in criteria]


def explain_match(
    my_answers: AnswersLike,
    their_answers: AnswersLike,
    config: ScoringConfig | None = None,
) -> MatchBreakdown:
    """Calculate the match score with a per-criterion breakdown.

    Algorithm:
        For each criterion, average its numeric score pieces. A criterion
        with no pieces is skipped. Otherwise:
            total_score += average * weight
            total_possible += weight
        score = round_half_up(total_score / total_possible * 100)
        or 0 when no criterion was counted.

    Args:
        my_answers: Answers of the viewing user (model or raw mapping).
        their_answers: Answers of the other user (model or raw mapping).
        config: Optional scoring config (weight overrides, logistics).

    Returns:
        MatchBreakdown with the integer score in [0, 100].
    """
    me = coerce_answers(my_answers)
    them = coerce_answers(their_answers)

    total_score = 0.0
    total_possible = 0
    breakdown: list[CriterionScore] = []

    for criterion, weight in active_criteria(config):
        pieces = [
            float(p)
            for p in criterion.evaluate(me, them)
            if isinstance(p, (int, float)) and not math.isnan(p)
        ]
        if not pieces:
            breakdown.append(CriterionScore(name=criterion.name, weight=weight))
            continue
        average = sum(pieces) / len(pieces)
        total_score += average * weight
        total_possible += weight
        breakdown.append(CriterionScore(name=criterion.name, weight=weight, pieces=pieces, score=average))

    if total_possible == 0:
        score = 0
    else:
        score = max(0, min(100, round_half_up(total_score / total_possible * 100)))

    return MatchBreakdown(
        score=score,
        total_score=total_score,
        total_possible=total_possible,
        criteria=breakdown,
    )


def calculate_match_score(
    my_answers: AnswersLike,
    their_answers: AnswersLike,
    config: ScoringConfig | None = None,
) -> int:
    """Calculate the compatibility percentage between two users.

    Never raises for malformed answers: unusable fields count as not
    provided. Two users with no usable answers at all score 0.

    Args:
        my_answers: Answers of the viewing user.
        their_answers: Answers of the other user.
        config: Optional scoring config.

    Returns:
        Integer score in [0, 100].
    """
    return explain_match(my_answers, their_answers, config).score
