"""Core compatibility criteria.

Each criterion turns two SurveyAnswers into score pieces. A piece is None
when its direction has no usable input at all; the scorer skips a criterion
whose pieces are all None.
"""

from collections.abc import Callable
from dataclasses import dataclass

from roommate_match.matching.similarity import (
    age_within_preferred,
    binary_tolerance_match,
    category_match,
    diet_tolerance_match,
    jaccard_similarity,
    noise_match,
    range_match,
    shabbat_tolerance_match,
)
from roommate_match.models.pydantic_models import (
    CookingStyle,
    HostingPreference,
    Lifestyle,
    PartnerOverStance,
    PartnerTolerance,
    SurveyAnswers,
)

Piece = float | None
Evaluator = Callable[[SurveyAnswers, SurveyAnswers], list[Piece]]


@dataclass(frozen=True)
class Criterion:
    """A named compatibility axis with a default weight."""

    name: str
    weight: int
    evaluate: Evaluator


LIFESTYLE_GROUPS = (
    frozenset({Lifestyle.CALM, Lifestyle.HOMEBODY}),
    frozenset({Lifestyle.ACTIVE, Lifestyle.SOCIAL, Lifestyle.SPONTANEOUS}),
)
COOKING_GROUPS = (
    frozenset({CookingStyle.SEPARATE, CookingStyle.SOMETIMES_SHARE}),
    frozenset({CookingStyle.SOMETIMES_SHARE, CookingStyle.COOK_TOGETHER}),
)
HOSTING_GROUPS = (
    frozenset({HostingPreference.WEEKLY, HostingPreference.SOMETIMES}),
    frozenset({HostingPreference.SOMETIMES, HostingPreference.AS_OFTEN_AS_POSSIBLE}),
)


def has_input(*values: object) -> bool:
    """True if any value is set (empty lists count as not set)."""
    return any(v is not None and v != [] for v in values)


def _tolerance_piece(tolerance: PartnerTolerance | None, mine: bool | None, theirs: bool | None) -> Piece:
    if not has_input(tolerance, mine, theirs):
        return None
    return binary_tolerance_match(tolerance, mine, theirs)


def smoking(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    return [
        _tolerance_piece(me.partner_smoking_preference, me.is_smoker, them.is_smoker),
        _tolerance_piece(them.partner_smoking_preference, them.is_smoker, me.is_smoker),
    ]


def pets(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    return [
        _tolerance_piece(me.partner_pets_preference, me.has_pet, them.has_pet),
        _tolerance_piece(them.partner_pets_preference, them.has_pet, me.has_pet),
    ]


def shabbat(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    for holder, target in ((me, them), (them, me)):
        if has_input(holder.partner_shabbat_preference, target.is_shomer_shabbat):
            pieces.append(shabbat_tolerance_match(holder.partner_shabbat_preference, target.is_shomer_shabbat))
        else:
            pieces.append(None)
    return pieces


def kosher(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    for holder, target in ((me, them), (them, me)):
        if has_input(holder.partner_diet_preference, target.keeps_kosher, target.diet_type):
            pieces.append(
                diet_tolerance_match(holder.partner_diet_preference, target.keeps_kosher, target.diet_type)
            )
        else:
            pieces.append(None)
    return pieces


def partner_over(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    # No behavioral data backs this stance, so any reservation is neutral.
    pieces: list[Piece] = []
    for stance in (me.partner_over, them.partner_over):
        if stance is None:
            pieces.append(None)
        else:
            pieces.append(1.0 if stance is PartnerOverStance.NO_PROBLEM else 0.5)
    return pieces


def noise(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    for holder, target in ((me, them), (them, me)):
        if has_input(holder.home_vibe, target.lifestyle):
            pieces.append(noise_match(holder.home_vibe, target.lifestyle))
        else:
            pieces.append(None)
    return pieces


def lifestyle(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    if not has_input(me.lifestyle, them.lifestyle):
        return []
    return [category_match(me.lifestyle, them.lifestyle, similar_groups=LIFESTYLE_GROUPS)]


def cleanliness(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    if not has_input(me.cleanliness_importance, them.cleanliness_importance):
        return []
    return [range_match(me.cleanliness_importance, them.cleanliness_importance, 5)]


def cooking(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    if not has_input(me.cooking_style, them.cooking_style):
        return []
    return [category_match(me.cooking_style, them.cooking_style, similar_groups=COOKING_GROUPS)]


def social(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    if not has_input(me.hosting_preference, them.hosting_preference):
        return []
    return [category_match(me.hosting_preference, them.hosting_preference, similar_groups=HOSTING_GROUPS)]


def age_range(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    for holder, target in ((me, them), (them, me)):
        if has_input(holder.preferred_age_min, holder.preferred_age_max, target.age):
            pieces.append(age_within_preferred(target.age, holder.preferred_age_min, holder.preferred_age_max))
        else:
            pieces.append(None)
    return pieces


def hobbies(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    if not has_input(me.hobbies, them.hobbies):
        return []
    return [jaccard_similarity(me.hobbies, them.hobbies)]


def personality(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    if not has_input(me.personality, them.personality):
        return []
    return [jaccard_similarity(me.personality, them.personality)]


CORE_CRITERIA: tuple[Criterion, ...] = (
    Criterion("smoking", 5, smoking),
    Criterion("pets", 5, pets),
    Criterion("shabbat", 5, shabbat),
    Criterion("kosher", 5, kosher),
    Criterion("partner_over", 5, partner_over),
    Criterion("noise", 5, noise),
    Criterion("lifestyle", 3, lifestyle),
    Criterion("cleanliness", 3, cleanliness),
    Criterion("cooking", 3, cooking),
    Criterion("social", 3, social),
    Criterion("age_range", 3, age_range),
    Criterion("hobbies", 1, hobbies),
    Criterion("personality", 1, personality),
)
