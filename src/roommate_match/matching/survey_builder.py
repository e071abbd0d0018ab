"""Build canonical SurveyAnswers from raw survey rows."""

import json
import logging
import math
import re
from collections.abc import Mapping
from typing import Any

from roommate_match.matching.aliases import resolve_alias
from roommate_match.models.pydantic_models import (
    CleaningFrequency,
    CookingStyle,
    DietTolerance,
    DietType,
    Gender,
    GenderPreference,
    HomeVibe,
    HostingPreference,
    Lifestyle,
    Occupation,
    OccupationPreference,
    PartnerOverStance,
    PartnerTolerance,
    SurveyAnswers,
)

logger = logging.getLogger(__name__)

# Standalone numbers of at most three digits
_DIGITS_RE = re.compile(r"(?<!\d)\d{1,3}(?!\d)")

# Raw field name -> canonical enum
ENUM_FIELDS: dict[str, type] = {
    "diet_type": DietType,
    "lifestyle": Lifestyle,
    "home_vibe": HomeVibe,
    "cleaning_frequency": CleaningFrequency,
    "hosting_preference": HostingPreference,
    "cooking_style": CookingStyle,
    "partner_smoking_preference": PartnerTolerance,
    "partner_pets_preference": PartnerTolerance,
    "partner_shabbat_preference": PartnerTolerance,
    "partner_diet_preference": DietTolerance,
    "partner_over": PartnerOverStance,
    "gender": Gender,
    "occupation": Occupation,
    "preferred_gender": GenderPreference,
    "preferred_occupation": OccupationPreference,
}

BOOL_FIELDS = (
    "is_smoker",
    "has_pet",
    "is_shomer_shabbat",
    "keeps_kosher",
    "is_sublet",
    "has_balcony",
    "pets_allowed",
)

TEXT_FIELDS = (
    "city",
    "preferred_city",
    "move_in_month",
    "sublet_month_from",
    "sublet_month_to",
    "floor_preference",
)

LIST_FIELDS = ("hobbies", "personality", "preferred_neighborhoods")

# Fields read from the user profile before falling back to the survey row
PROFILE_FIELDS = ("age", "gender", "city")


def parse_age_range(value: Any) -> tuple[int | None, int | None]:
    """Parse a free-text preferred age range.

    Examples:
        >>> parse_age_range("25-30")
        (25, 30)
        >>> parse_age_range("30 עד 25")
        (25, 30)
        >>> parse_age_range("25+")
        (25, None)
        >>> parse_age_range("whatever")
        (None, None)
    """
    if value is None or value == "":
        return None, None
    if not isinstance(value, str):
        logger.warning("Dropping non-text preferred_age_range value: %r", value)
        return None, None
    numbers = [int(n) for n in _DIGITS_RE.findall(value)]
    if not numbers:
        return None, None
    if len(numbers) == 1:
        return numbers[0], None
    first, second = numbers[0], numbers[1]
    return min(first, second), max(first, second)


def _to_number(value: Any) -> float | None:
    """Coerce numbers and numeric strings; booleans and NaN are rejected."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _to_int(value: Any, field: str) -> int | None:
    number = _to_number(value)
    if number is None:
        if value not in (None, ""):
            logger.warning("Dropping non-numeric %s value: %r", field, value)
        return None
    return int(round(number))


def _to_string_list(value: Any, field: str) -> list[str] | None:
    """Accept a list, a JSON array string, or a comma separated string."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = value.strip("{}[]").split(",")
        value = parsed if isinstance(parsed, list) else [value]
    if not isinstance(value, (list, tuple, set)):
        logger.warning("Dropping non-list %s value: %r", field, value)
        return None
    items = [str(item).strip().strip('"') for item in value if item is not None]
    items = [item for item in items if item]
    return items or None


def build_survey_answers(
    profile: Mapping[str, Any] | None = None,
    survey: Mapping[str, Any] | None = None,
) -> SurveyAnswers:
    """Normalize a user profile and survey row into SurveyAnswers.

    Never raises on bad values: each unusable field is logged and left as
    "not provided".

    Args:
        profile: User profile record (age, gender, city).
        survey: Raw survey response row.

    Returns:
        Canonical SurveyAnswers.
    """
    profile = profile or {}
    survey = dict(survey or {})

    # Legacy column names
    if not survey.get("lifestyle") and survey.get("home_lifestyle"):
        survey["lifestyle"] = survey["home_lifestyle"]
    if not survey.get("partner_over") and survey.get("partnerOver"):
        survey["partner_over"] = survey["partnerOver"]

    def raw(field: str) -> Any:
        if field in PROFILE_FIELDS and profile.get(field) not in (None, ""):
            return profile.get(field)
        return survey.get(field)

    data: dict[str, Any] = {}

    for field in BOOL_FIELDS:
        value = raw(field)
        if isinstance(value, bool):
            data[field] = value
        elif value is not None:
            logger.warning("Dropping non-boolean %s value: %r", field, value)

    for field, enum_cls in ENUM_FIELDS.items():
        member = resolve_alias(raw(field), enum_cls, field)
        if member is not None:
            data[field] = member

    for field in TEXT_FIELDS:
        value = raw(field)
        if isinstance(value, str) and value.strip():
            data[field] = value.strip()

    for field in LIST_FIELDS:
        items = _to_string_list(raw(field), field)
        if items is not None:
            data[field] = items

    cleanliness = _to_int(raw("cleanliness_importance"), "cleanliness_importance")
    if cleanliness is not None:
        if 1 <= cleanliness <= 5:
            data["cleanliness_importance"] = cleanliness
        else:
            logger.warning("Dropping out-of-range cleanliness_importance: %r", cleanliness)

    age = _to_int(raw("age"), "age")
    if age is not None:
        if age >= 0:
            data["age"] = age
        else:
            logger.warning("Dropping negative age: %r", age)

    roommates = _to_int(raw("preferred_roommates"), "preferred_roommates")
    if roommates is not None:
        data["preferred_roommates"] = roommates

    price = _to_number(raw("price_range"))
    if price is not None:
        data["price_range"] = price

    age_min = _to_int(raw("preferred_age_min"), "preferred_age_min")
    age_max = _to_int(raw("preferred_age_max"), "preferred_age_max")
    if age_min is None and age_max is None:
        age_min, age_max = parse_age_range(raw("preferred_age_range"))
    if age_min is not None:
        data["preferred_age_min"] = age_min
    if age_max is not None:
        data["preferred_age_max"] = age_max

    return SurveyAnswers(**data)


def coerce_answers(value: SurveyAnswers | Mapping[str, Any] | None) -> SurveyAnswers:
    """Return SurveyAnswers for either a model instance or a raw mapping."""
    if isinstance(value, SurveyAnswers):
        return value
    if value is None:
        return SurveyAnswers()
    return build_survey_answers(None, value)
