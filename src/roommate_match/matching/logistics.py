"""Logistics criteria: apartment and living-arrangement expectations.

These only count when the scoring config enables the extended profile.
"""

import re

from roommate_match.matching.criteria import Criterion, Piece, has_input
from roommate_match.matching.normalizer import normalize_text
from roommate_match.matching.similarity import NEUTRAL, category_match, jaccard_similarity
from roommate_match.models.pydantic_models import GenderPreference, OccupationPreference, SurveyAnswers

NEUTRAL_TERMS = frozenset({"לא משנה", "לא משנה לי", "any", "הכל", "כל דבר"})

MONTHS = {
    "ינואר": 0,
    "פברואר": 1,
    "מרץ": 2,
    "אפריל": 3,
    "מאי": 4,
    "יוני": 5,
    "יולי": 6,
    "אוגוסט": 7,
    "ספטמבר": 8,
    "אוקטובר": 9,
    "נובמבר": 10,
    "דצמבר": 11,
    "january": 0,
    "february": 1,
    "march": 2,
    "april": 3,
    "may": 4,
    "june": 5,
    "july": 6,
    "august": 7,
    "september": 8,
    "october": 9,
    "november": 10,
    "december": 11,
}

MAX_MONTH_DIFF = 6
_ISO_MONTH_RE = re.compile(r"^(\d{4})[-/](\d{1,2})$")


def parse_year_month(value: str | None) -> int | None:
    """Parse 'YYYY-MM' or '<month name> YYYY' into a month index.

    Examples:
        >>> parse_year_month("2025-03")
        24302
        >>> parse_year_month("מרץ 2025")
        24302
        >>> parse_year_month("soon") is None
        True
    """
    if not value or not value.strip():
        return None
    trimmed = value.strip()
    iso = _ISO_MONTH_RE.match(trimmed)
    if iso:
        month = min(max(int(iso.group(2)) - 1, 0), 11)
        return int(iso.group(1)) * 12 + month
    parts = trimmed.split()
    if len(parts) >= 2 and parts[-1].isdigit():
        month = MONTHS.get(parts[0].lower())
        if month is not None:
            return int(parts[-1]) * 12 + month
    return None


def preference_match(preference: str | None, candidate: str | None) -> float:
    """Score a stated preference against the candidate's value."""
    pref = normalize_text(preference)
    value = normalize_text(candidate)
    if not pref or pref in NEUTRAL_TERMS:
        return 1.0
    if not value:
        return NEUTRAL
    return 1.0 if pref == value else 0.0


def city_match(a: str | None, b: str | None) -> float:
    norm_a = normalize_text(a)
    norm_b = normalize_text(b)
    if not norm_a or not norm_b:
        return NEUTRAL
    return 1.0 if norm_a == norm_b else 0.0


def budget_match(a: float | None, b: float | None) -> float:
    """Relative budget similarity ``1 - |a - b| / max(a, b)``."""
    if a is None or b is None or a <= 0 or b <= 0:
        return NEUTRAL
    return max(0.0, 1 - abs(a - b) / max(a, b, 1))


def roommate_count_match(a: int | None, b: int | None) -> float:
    if a is None or b is None:
        return NEUTRAL
    diff = abs(a - b)
    if diff == 0:
        return 1.0
    if diff == 1:
        return 0.7
    return max(0.0, 1 - diff / 3)


def month_distance_match(a: str | None, b: str | None) -> float:
    idx_a = parse_year_month(a)
    idx_b = parse_year_month(b)
    if idx_a is None or idx_b is None:
        return NEUTRAL
    return max(0.0, 1 - abs(idx_a - idx_b) / MAX_MONTH_DIFF)


def sublet_window_overlap(
    start_a: str | None,
    end_a: str | None,
    start_b: str | None,
    end_b: str | None,
) -> float:
    """Overlap of two sublet windows over their combined span, in months."""
    s_a, e_a = parse_year_month(start_a), parse_year_month(end_a)
    s_b, e_b = parse_year_month(start_b), parse_year_month(end_b)
    if s_a is None or e_a is None or s_b is None or e_b is None:
        return 0.4
    overlap_start = max(s_a, s_b)
    overlap_end = min(e_a, e_b)
    if overlap_end < overlap_start:
        return 0.0
    overlap = overlap_end - overlap_start + 1
    span = max(e_a, e_b) - min(s_a, s_b) + 1
    if span <= 0:
        return 0.0
    return max(0.0, min(1.0, overlap / span))


def move_in_match(me: SurveyAnswers, them: SurveyAnswers) -> float:
    """Move-in timing compatibility, accounting for sublets."""
    if me.is_sublet and them.is_sublet:
        return sublet_window_overlap(
            me.sublet_month_from, me.sublet_month_to, them.sublet_month_from, them.sublet_month_to
        )
    if me.is_sublet or them.is_sublet:
        sublet_user, regular_user = (me, them) if me.is_sublet else (them, me)
        start = parse_year_month(sublet_user.sublet_month_from or sublet_user.move_in_month)
        end = parse_year_month(sublet_user.sublet_month_to or sublet_user.sublet_month_from)
        regular = parse_year_month(regular_user.move_in_month)
        if start is not None and end is not None and regular is not None:
            if start <= regular <= end:
                return 0.6
            diff = min(abs(regular - start), abs(regular - end))
            return max(0.0, 0.6 - diff * 0.1)
        return 0.4
    return month_distance_match(me.move_in_month, them.move_in_month)


def balcony_match(a: bool | None, b: bool | None) -> float:
    if a is None or b is None:
        return NEUTRAL
    return 1.0 if a == b else 0.7


def floor_match(a: str | None, b: str | None) -> float:
    norm_a = normalize_text(a)
    norm_b = normalize_text(b)
    if not norm_a or norm_a in NEUTRAL_TERMS or not norm_b or norm_b in NEUTRAL_TERMS:
        return 1.0
    return 1.0 if norm_a == norm_b else 0.5


def pets_policy_match(pets_allowed: bool | None, partner_has_pet: bool | None) -> float:
    if not partner_has_pet:
        return 1.0
    if pets_allowed is None:
        return NEUTRAL
    return 1.0 if pets_allowed else 0.0


def gender_pref(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    for holder, target in ((me, them), (them, me)):
        if not has_input(holder.preferred_gender, target.gender):
            pieces.append(None)
            continue
        if holder.preferred_gender in (None, GenderPreference.ANY):
            pieces.append(1.0)
        else:
            pieces.append(
                preference_match(holder.preferred_gender.value, target.gender.value if target.gender else None)
            )
    return pieces


def occupation_pref(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    for holder, target in ((me, them), (them, me)):
        if not has_input(holder.preferred_occupation, target.occupation):
            pieces.append(None)
            continue
        if holder.preferred_occupation in (None, OccupationPreference.ANY):
            pieces.append(1.0)
        else:
            pieces.append(
                preference_match(
                    holder.preferred_occupation.value, target.occupation.value if target.occupation else None
                )
            )
    if has_input(me.occupation, them.occupation):
        pieces.append(category_match(me.occupation, them.occupation))
    return pieces


def location(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    for a, b in (
        (me.preferred_city, them.preferred_city),
        (me.preferred_city, them.city),
        (them.preferred_city, me.city),
    ):
        pieces.append(city_match(a, b) if has_input(a, b) else None)
    if me.preferred_neighborhoods or them.preferred_neighborhoods:
        pieces.append(jaccard_similarity(me.preferred_neighborhoods, them.preferred_neighborhoods))
    return pieces


def budget(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    if not has_input(me.price_range, them.price_range):
        return []
    return [budget_match(me.price_range, them.price_range)]


def move_in(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    fields = ("move_in_month", "is_sublet", "sublet_month_from", "sublet_month_to")
    if not has_input(*(getattr(user, f) for user in (me, them) for f in fields)):
        return []
    return [move_in_match(me, them)]


def roommates(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    if not has_input(me.preferred_roommates, them.preferred_roommates):
        return []
    return [roommate_count_match(me.preferred_roommates, them.preferred_roommates)]


def amenities(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    if has_input(me.has_balcony, them.has_balcony):
        pieces.append(balcony_match(me.has_balcony, them.has_balcony))
    if has_input(me.floor_preference, them.floor_preference):
        pieces.append(floor_match(me.floor_preference, them.floor_preference))
    return pieces


def pets_policy(me: SurveyAnswers, them: SurveyAnswers) -> list[Piece]:
    pieces: list[Piece] = []
    for holder, target in ((me, them), (them, me)):
        if has_input(holder.pets_allowed, target.has_pet):
            pieces.append(pets_policy_match(holder.pets_allowed, target.has_pet))
        else:
            pieces.append(None)
    return pieces


LOGISTICS_CRITERIA: tuple[Criterion, ...] = (
    Criterion("gender_pref", 4, gender_pref),
    Criterion("occupation_pref", 2, occupation_pref),
    Criterion("location", 4, location),
    Criterion("budget", 4, budget),
    Criterion("move_in", 3, move_in),
    Criterion("roommates", 2, roommates),
    Criterion("amenities", 2, amenities),
    Criterion("pets_policy", 3, pets_policy),
)
