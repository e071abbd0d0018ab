"""Pydantic models for data validation."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class DietType(str, Enum):
    """Self-reported diet."""

    UNRESTRICTED = "unrestricted"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    KOSHER = "kosher"


class Lifestyle(str, Enum):
    """Day-to-day character."""

    CALM = "calm"
    ACTIVE = "active"
    SPONTANEOUS = "spontaneous"
    HOMEBODY = "homebody"
    SOCIAL = "social"
    BALANCED = "balanced"


class HomeVibe(str, Enum):
    """Expected atmosphere at home."""

    QUIET_STUDIOUS = "quiet_studious"
    LIVELY_SOCIAL = "lively_social"
    NO_PREFERENCE = "no_preference"


class CleaningFrequency(str, Enum):
    """How often the person cleans."""

    WEEKLY = "weekly"
    TWICE_WEEKLY = "twice_weekly"
    BIWEEKLY = "biweekly"
    AS_NEEDED = "as_needed"


class HostingPreference(str, Enum):
    """How often the person likes to host guests."""

    WEEKLY = "weekly"
    SOMETIMES = "sometimes"
    AS_OFTEN_AS_POSSIBLE = "as_often_as_possible"


class CookingStyle(str, Enum):
    """How food and cooking are shared."""

    SEPARATE = "separate"
    SOMETIMES_SHARE = "sometimes_share"
    COOK_TOGETHER = "cook_together"
    SHARED_GROCERIES = "shared_groceries"
    NO_PREFERENCE = "no_preference"


class PartnerTolerance(str, Enum):
    """Tolerance towards a roommate trait (smoking, pets, sabbath)."""

    NO_PROBLEM = "no_problem"
    PREFER_NOT = "prefer_not"


class DietTolerance(str, Enum):
    """Tolerance towards a roommate's diet."""

    NO_PROBLEM = "no_problem"
    PREFER_NOT_VEGAN = "prefer_not_vegan"
    KOSHER_ONLY = "kosher_only"


class PartnerOverStance(str, Enum):
    """Stance on a roommate's partner staying over."""

    NO_PROBLEM = "no_problem"
    PREFER_NOT = "prefer_not"
    FORBID = "forbid"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class GenderPreference(str, Enum):
    MALE = "male"
    FEMALE = "female"
    ANY = "any"


class Occupation(str, Enum):
    STUDENT = "student"
    WORKER = "worker"


class OccupationPreference(str, Enum):
    STUDENT = "student"
    WORKER = "worker"
    ANY = "any"


class SurveyAnswers(BaseModel):
    """Canonical survey answers for one user.

    Every field is optional. ``None`` means "not provided", which is scored
    differently from an explicit ``False`` or ``0``.
    """

    # Self attributes
    is_smoker: bool | None = None
    has_pet: bool | None = None
    is_shomer_shabbat: bool | None = None
    keeps_kosher: bool | None = None
    diet_type: DietType | None = None
    lifestyle: Lifestyle | None = None
    cleanliness_importance: int | None = Field(None, ge=1, le=5)
    cleaning_frequency: CleaningFrequency | None = None
    hosting_preference: HostingPreference | None = None
    cooking_style: CookingStyle | None = None
    home_vibe: HomeVibe | None = None
    age: int | None = Field(None, ge=0)
    hobbies: list[str] | None = None
    personality: list[str] | None = None

    # Partner preferences
    partner_smoking_preference: PartnerTolerance | None = None
    partner_pets_preference: PartnerTolerance | None = None
    partner_shabbat_preference: PartnerTolerance | None = None
    partner_diet_preference: DietTolerance | None = None
    partner_over: PartnerOverStance | None = Field(None, alias="partnerOver")
    preferred_age_min: int | None = None
    preferred_age_max: int | None = None

    # Logistics (extended profile only)
    gender: Gender | None = None
    occupation: Occupation | None = None
    preferred_gender: GenderPreference | None = None
    preferred_occupation: OccupationPreference | None = None
    city: str | None = None
    preferred_city: str | None = None
    preferred_neighborhoods: list[str] | None = None
    price_range: float | None = None
    move_in_month: str | None = Field(None, description="YYYY-MM or '<month name> <year>'")
    is_sublet: bool | None = None
    sublet_month_from: str | None = None
    sublet_month_to: str | None = None
    preferred_roommates: int | None = None
    has_balcony: bool | None = None
    floor_preference: str | None = None
    pets_allowed: bool | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CriterionScore(BaseModel):
    """Contribution of one criterion to a match score."""

    name: str
    weight: int
    pieces: list[float] = Field(default_factory=list)
    score: float | None = Field(None, description="Average of pieces, None when skipped")

    @property
    def counted(self) -> bool:
        """Whether the criterion entered the weighted average."""
        return self.score is not None

    model_config = ConfigDict(frozen=True)


class MatchBreakdown(BaseModel):
    """Match score with per-criterion detail."""

    score: int = Field(..., ge=0, le=100)
    total_score: float = 0.0
    total_possible: int = 0
    criteria: list[CriterionScore] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ScoringConfig(BaseModel):
    """Scoring configuration.

    ``weights`` overrides the default weight of named criteria. Logistics
    criteria only count when ``include_logistics`` is set.
    """

    weights: dict[str, int] = Field(default_factory=dict)
    include_logistics: bool = False

    @field_validator("weights")
    @classmethod
    def _positive_weights(cls, value: dict[str, int]) -> dict[str, int]:
        for name, weight in value.items():
            if weight <= 0:
                raise ValueError(f"Weight for '{name}' must be positive, got {weight}")
        return value

    model_config = ConfigDict(frozen=True)


class CandidateMatch(BaseModel):
    """Score of a stored user against another stored user."""

    user_id: str
    display_name: str | None = None
    score: int = Field(..., ge=0, le=100)
    cached: bool = False
    computed_at: datetime = Field(default_factory=utc_now)


class SurveyRead(BaseModel):
    """Stored survey response as read from the database."""

    user_id: str
    display_name: str | None = None
    profile: dict = Field(default_factory=dict)
    answers: dict = Field(default_factory=dict)
    version: int = 1
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
