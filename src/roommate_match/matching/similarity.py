"""Similarity primitives shared by the scoring criteria.

Every function returns a score piece in [0, 1]. Insufficient data yields the
neutral 0.5 so missing answers never disqualify a match.
"""

from collections.abc import Iterable
from enum import Enum

from roommate_match.models.pydantic_models import (
    DietTolerance,
    DietType,
    HomeVibe,
    Lifestyle,
    PartnerTolerance,
)

NEUTRAL = 0.5

# Noise level on a 1-5 scale
HOME_VIBE_NOISE: dict[HomeVibe, int] = {
    HomeVibe.QUIET_STUDIOUS: 1,
    HomeVibe.LIVELY_SOCIAL: 5,
}
LIFESTYLE_NOISE: dict[Lifestyle, int] = {
    Lifestyle.CALM: 2,
    Lifestyle.HOMEBODY: 2,
    Lifestyle.ACTIVE: 4,
    Lifestyle.SOCIAL: 4,
    Lifestyle.SPONTANEOUS: 4,
}

AGE_GRACE_YEARS = 2


def binary_tolerance_match(
    tolerance: PartnerTolerance | None,
    my_value: bool | None,
    their_value: bool | None,
) -> float:
    """Score how well their boolean trait fits my stated tolerance.

    ``prefer_not`` is a soft signal: a matching trait halves the score but
    never zeroes it.
    """
    if tolerance is None:
        if my_value is None or their_value is None:
            return NEUTRAL
        return 1.0
    if tolerance is PartnerTolerance.NO_PROBLEM:
        return 1.0
    return 1.0 if their_value is False else NEUTRAL


def shabbat_tolerance_match(tolerance: PartnerTolerance | None, target_is_shomer: bool | None) -> float:
    if tolerance is None or tolerance is PartnerTolerance.NO_PROBLEM:
        return 1.0
    if target_is_shomer is None:
        return NEUTRAL
    return NEUTRAL if target_is_shomer else 1.0


def diet_tolerance_match(
    tolerance: DietTolerance | None,
    keeps_kosher: bool | None,
    diet_type: DietType | None,
) -> float:
    """Score a diet tolerance against the other person's diet.

    ``kosher_only`` is the only hard constraint: an explicit non-kosher
    roommate scores 0.
    """
    if tolerance is None or tolerance is DietTolerance.NO_PROBLEM:
        return 1.0
    if tolerance is DietTolerance.KOSHER_ONLY:
        if keeps_kosher is True or diet_type is DietType.KOSHER:
            return 1.0
        if keeps_kosher is False:
            return 0.0
        return NEUTRAL
    # prefer_not_vegan
    return NEUTRAL if diet_type is DietType.VEGAN else 1.0


def category_match(
    my_value: Enum | str | None,
    their_value: Enum | str | None,
    neutral: frozenset = frozenset(),
    similar_groups: Iterable[frozenset] = (),
) -> float:
    """Categorical match with optional neutral values and similarity clusters.

    Returns 1 for identical values or when either side is neutral, 0.5 when
    both share a similarity cluster, 0 otherwise.
    """
    if my_value is None or their_value is None:
        return NEUTRAL
    if my_value == their_value:
        return 1.0
    if my_value in neutral or their_value in neutral:
        return 1.0
    for group in similar_groups:
        if my_value in group and their_value in group:
            return 0.5
    return 0.0


def range_match(my_value: float | None, their_value: float | None, max_diff: float = 5) -> float:
    """Linear similarity ``1 - |a - b| / max_diff`` clamped to [0, 1]."""
    if my_value is None or their_value is None:
        return NEUTRAL
    similarity = 1 - abs(my_value - their_value) / max_diff
    return max(0.0, min(1.0, similarity))


def noise_match(vibe: HomeVibe | None, lifestyle: Lifestyle | None) -> float:
    """Compare my expected home vibe against their lifestyle noise level."""
    return range_match(HOME_VIBE_NOISE.get(vibe), LIFESTYLE_NOISE.get(lifestyle), 5)  # type: ignore[arg-type]


def age_within_preferred(target_age: int | None, age_min: int | None, age_max: int | None) -> float:
    """Score a target age against a preferred range.

    Inside the range scores 1, within two years outside a bound 0.5, further
    out 0. A missing age, or no bound at all, scores 0.5.
    """
    if target_age is None or (age_min is None and age_max is None):
        return NEUTRAL
    if age_min is not None and target_age < age_min:
        return NEUTRAL if target_age + AGE_GRACE_YEARS >= age_min else 0.0
    if age_max is not None and target_age > age_max:
        return NEUTRAL if target_age - AGE_GRACE_YEARS <= age_max else 0.0
    return 1.0


def _clean_set(values: Iterable[str] | None) -> set[str]:
    return {v.strip() for v in (values or []) if v and v.strip()}


def jaccard_similarity(a: Iterable[str] | None, b: Iterable[str] | None) -> float:
    """Intersection over union of two string sets; 0.5 if either is empty."""
    set_a = _clean_set(a)
    set_b = _clean_set(b)
    if not set_a or not set_b:
        return NEUTRAL
    return len(set_a & set_b) / len(set_a | set_b)
