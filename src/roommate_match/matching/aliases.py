"""Alias tables mapping raw survey strings to canonical enum tokens."""

import logging
from enum import Enum
from typing import TypeVar

from roommate_match.matching.normalizer import normalize_text
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
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_NO_PROBLEM = ["אין בעיה", "no problem", "allow", "ok", "fine"]
_PREFER_NOT = ["מעדיפ/ה שלא", "מעדיף שלא", "מעדיפה שלא", "prefer not", "preferNo", "rather not"]
_ANY = ["any", "לא משנה", "לא משנה לי", "הכל", "כל דבר", "no preference"]

ALIASES: dict[type[Enum], dict[Enum, list[str]]] = {
    DietType: {
        DietType.UNRESTRICTED: ["ללא הגבלה", "no restrictions", "none", "regular"],
        DietType.VEGETARIAN: ["צמחוני", "צמחונית"],
        DietType.VEGAN: ["טבעוני", "טבעונית"],
        DietType.KOSHER: ["כשר", "כשרה"],
    },
    Lifestyle: {
        Lifestyle.CALM: ["רגוע", "רגועה", "רגוע ולימודי"],
        Lifestyle.ACTIVE: ["פעיל", "פעילה"],
        Lifestyle.SPONTANEOUS: ["ספונטני", "ספונטנית", "זורם וספונטני"],
        Lifestyle.HOMEBODY: ["ביתי", "ביתית", "שקט וביתי", "home body"],
        Lifestyle.SOCIAL: ["חברתי", "חברתית", "חברתי ופעיל"],
        Lifestyle.BALANCED: ["מאוזן", "מאוזנת"],
    },
    HomeVibe: {
        HomeVibe.QUIET_STUDIOUS: ["שקטה ולימודית", "quiet", "quiet and studious"],
        HomeVibe.LIVELY_SOCIAL: ["זורמת וחברתית", "lively", "social"],
        HomeVibe.NO_PREFERENCE: ["לא משנה לי", "לא משנה", "any"],
    },
    CleaningFrequency: {
        CleaningFrequency.WEEKLY: ["פעם בשבוע", "once a week"],
        CleaningFrequency.TWICE_WEEKLY: ["פעמיים בשבוע", "twice a week"],
        CleaningFrequency.BIWEEKLY: ["פעם בשבועיים", "every two weeks"],
        CleaningFrequency.AS_NEEDED: ["כאשר צריך", "when needed"],
    },
    HostingPreference: {
        HostingPreference.WEEKLY: ["פעם בשבוע", "once a week"],
        HostingPreference.SOMETIMES: ["לפעמים"],
        HostingPreference.AS_OFTEN_AS_POSSIBLE: ["כמה שיותר", "often", "as much as possible"],
    },
    CookingStyle: {
        CookingStyle.SEPARATE: ["כל אחד לעצמו", "each to their own"],
        CookingStyle.SOMETIMES_SHARE: ["לפעמים מתחלקים"],
        CookingStyle.COOK_TOGETHER: ["מבשלים יחד", "together"],
        CookingStyle.SHARED_GROCERIES: ["קניות משותפות"],
        CookingStyle.NO_PREFERENCE: ["לא משנה לי", "לא משנה"],
    },
    PartnerTolerance: {
        PartnerTolerance.NO_PROBLEM: _NO_PROBLEM,
        PartnerTolerance.PREFER_NOT: _PREFER_NOT,
    },
    DietTolerance: {
        DietTolerance.NO_PROBLEM: _NO_PROBLEM,
        DietTolerance.PREFER_NOT_VEGAN: ["מעדיפ/ה שלא טבעוני", "prefer not vegan"],
        DietTolerance.KOSHER_ONLY: ["כשר בלבד", "kosher"],
    },
    PartnerOverStance: {
        PartnerOverStance.NO_PROBLEM: _NO_PROBLEM,
        PartnerOverStance.PREFER_NOT: _PREFER_NOT,
        PartnerOverStance.FORBID: ["אסור", "forbidden"],
    },
    Gender: {
        Gender.MALE: ["men", "גבר", "זכר", "בנים"],
        Gender.FEMALE: ["women", "נקבה", "אישה", "נשים", "בנות"],
    },
    GenderPreference: {
        GenderPreference.MALE: ["men", "גבר", "זכר", "בנים"],
        GenderPreference.FEMALE: ["women", "נקבה", "אישה", "נשים", "בנות"],
        GenderPreference.ANY: _ANY,
    },
    Occupation: {
        Occupation.STUDENT: ["סטודנט", "סטודנטית"],
        Occupation.WORKER: ["עובד", "עובדת", "עובד - מהבית"],
    },
    OccupationPreference: {
        OccupationPreference.STUDENT: ["סטודנט", "סטודנטית"],
        OccupationPreference.WORKER: ["עובד", "עובדת"],
        OccupationPreference.ANY: _ANY,
    },
}

# Substring fallbacks for occupation free text ("סטודנטית לתואר שני")
_OCCUPATION_HINTS = {
    "סטודנט": "student",
    "student": "student",
    "עובד": "worker",
    "worker": "worker",
}


def _build_lookup(enum_cls: type[E]) -> dict[str, E]:
    """Build normalized alias -> enum member map for an enum class."""
    lookup: dict[str, E] = {}
    for member in enum_cls:
        lookup[normalize_text(member.value)] = member
        lookup[normalize_text(member.name)] = member
    for member, aliases in ALIASES.get(enum_cls, {}).items():
        for alias in aliases:
            lookup[normalize_text(alias)] = member  # type: ignore[assignment]
    return lookup


_LOOKUPS: dict[type[Enum], dict[str, Enum]] = {cls: _build_lookup(cls) for cls in ALIASES}


def resolve_alias(value: object, enum_cls: type[E], field: str = "") -> E | None:
    """Resolve a raw survey value to a canonical enum member.

    Args:
        value: Raw value (string or already an enum member).
        enum_cls: Target enum class.
        field: Field name, used only for the log message.

    Returns:
        Enum member, or None when the value is empty or unrecognized.
        Unrecognized values are logged and dropped.
    """
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        logger.warning("Dropping non-text value for %s: %r", field or enum_cls.__name__, value)
        return None

    member = _LOOKUPS[enum_cls].get(normalize_text(value))
    if member is None and enum_cls in (Occupation, OccupationPreference):
        lowered = value.lower()
        for hint, token in _OCCUPATION_HINTS.items():
            if hint in lowered:
                member = enum_cls(token)
                break

    if member is None:
        logger.warning("Dropping unrecognized %s value: %r", field or enum_cls.__name__, value)
        return None
    return member  # type: ignore[return-value]
