"""Unit tests for similarity primitives."""

import pytest

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
    DietTolerance,
    DietType,
    HomeVibe,
    Lifestyle,
    PartnerTolerance,
)


class TestBinaryToleranceMatch:
    """Tests for binary_tolerance_match."""

    def test_no_problem_always_full(self) -> None:
        """Should score 1 for no-problem whatever the other value."""
        assert binary_tolerance_match(PartnerTolerance.NO_PROBLEM, False, True) == 1.0
        assert binary_tolerance_match(PartnerTolerance.NO_PROBLEM, None, None) == 1.0

    def test_prefer_not_with_trait(self) -> None:
        """Should halve the score when the other person has the trait."""
        assert binary_tolerance_match(PartnerTolerance.PREFER_NOT, False, True) == 0.5

    def test_prefer_not_without_trait(self) -> None:
        """Should score 1 when the other person explicitly lacks the trait."""
        assert binary_tolerance_match(PartnerTolerance.PREFER_NOT, False, False) == 1.0

    def test_prefer_not_unknown_trait(self) -> None:
        """Should stay neutral when the other value is unknown."""
        assert binary_tolerance_match(PartnerTolerance.PREFER_NOT, False, None) == 0.5

    def test_no_tolerance_both_known(self) -> None:
        """Should default to allow when both values are known."""
        assert binary_tolerance_match(None, True, False) == 1.0

    def test_no_tolerance_missing_value(self) -> None:
        """Should be neutral without a tolerance and a missing value."""
        assert binary_tolerance_match(None, None, True) == 0.5
        assert binary_tolerance_match(None, True, None) == 0.5


class TestShabbatToleranceMatch:
    """Tests for shabbat_tolerance_match."""

    def test_prefer_not_shomer(self) -> None:
        """Should halve the score for a Shabbat-observant partner."""
        assert shabbat_tolerance_match(PartnerTolerance.PREFER_NOT, True) == 0.5
        assert shabbat_tolerance_match(PartnerTolerance.PREFER_NOT, False) == 1.0

    def test_no_problem(self) -> None:
        """Should score 1 without reservations."""
        assert shabbat_tolerance_match(PartnerTolerance.NO_PROBLEM, True) == 1.0
        assert shabbat_tolerance_match(None, True) == 1.0


class TestDietToleranceMatch:
    """Tests for diet_tolerance_match."""

    def test_kosher_only_non_kosher(self) -> None:
        """Should score 0 for an explicitly non-kosher partner."""
        assert diet_tolerance_match(DietTolerance.KOSHER_ONLY, False, DietType.VEGAN) == 0.0

    def test_kosher_only_kosher(self) -> None:
        """Should score 1 for a kosher partner by flag or diet."""
        assert diet_tolerance_match(DietTolerance.KOSHER_ONLY, True, None) == 1.0
        assert diet_tolerance_match(DietTolerance.KOSHER_ONLY, None, DietType.KOSHER) == 1.0

    def test_kosher_only_unknown(self) -> None:
        """Should be neutral when observance is unknown."""
        assert diet_tolerance_match(DietTolerance.KOSHER_ONLY, None, None) == 0.5

    def test_prefer_not_vegan(self) -> None:
        """Should halve the score for a vegan partner only."""
        assert diet_tolerance_match(DietTolerance.PREFER_NOT_VEGAN, None, DietType.VEGAN) == 0.5
        assert diet_tolerance_match(DietTolerance.PREFER_NOT_VEGAN, None, DietType.VEGETARIAN) == 1.0

    def test_no_tolerance(self) -> None:
        """Should score 1 without a stated tolerance."""
        assert diet_tolerance_match(None, False, DietType.VEGAN) == 1.0


class TestCategoryMatch:
    """Tests for category_match."""

    def test_identical(self) -> None:
        """Should score 1 for identical values."""
        assert category_match(Lifestyle.CALM, Lifestyle.CALM) == 1.0

    def test_similar_group(self) -> None:
        """Should score 0.5 for values in the same cluster."""
        groups = (frozenset({Lifestyle.CALM, Lifestyle.HOMEBODY}),)
        assert category_match(Lifestyle.CALM, Lifestyle.HOMEBODY, similar_groups=groups) == 0.5

    def test_different(self) -> None:
        """Should score 0 for unrelated values."""
        assert category_match(Lifestyle.CALM, Lifestyle.ACTIVE) == 0.0

    def test_neutral_value(self) -> None:
        """Should score 1 when either side is a neutral value."""
        assert category_match("a", "b", neutral=frozenset({"b"})) == 1.0

    def test_missing(self) -> None:
        """Should be neutral when either side is missing."""
        assert category_match(None, Lifestyle.CALM) == 0.5


class TestRangeMatch:
    """Tests for range_match."""

    @pytest.mark.parametrize(
        "a,b,expected",
        [(5, 5, 1.0), (5, 3, 0.6), (1, 5, 0.2), (1, 10, 0.0)],
    )
    def test_linear_similarity(self, a: int, b: int, expected: float) -> None:
        """Should compute clamped linear similarity."""
        assert range_match(a, b, 5) == pytest.approx(expected)

    def test_missing(self) -> None:
        """Should be neutral when a value is missing."""
        assert range_match(None, 3) == 0.5


class TestNoiseMatch:
    """Tests for noise_match."""

    def test_quiet_vs_calm(self) -> None:
        """Should score quiet home against a calm lifestyle."""
        assert noise_match(HomeVibe.QUIET_STUDIOUS, Lifestyle.CALM) == pytest.approx(0.8)

    def test_quiet_vs_social(self) -> None:
        """Should score quiet home against a social lifestyle."""
        assert noise_match(HomeVibe.QUIET_STUDIOUS, Lifestyle.SOCIAL) == pytest.approx(0.4)

    def test_lively_vs_social(self) -> None:
        """Should score lively home against a social lifestyle."""
        assert noise_match(HomeVibe.LIVELY_SOCIAL, Lifestyle.SOCIAL) == pytest.approx(0.8)

    def test_no_noise_level(self) -> None:
        """Should be neutral for values without a noise level."""
        assert noise_match(HomeVibe.NO_PREFERENCE, Lifestyle.CALM) == 0.5
        assert noise_match(HomeVibe.QUIET_STUDIOUS, Lifestyle.BALANCED) == 0.5


class TestAgeWithinPreferred:
    """Tests for age_within_preferred."""

    def test_inside_range(self) -> None:
        """Should score 1 inside the range, bounds included."""
        assert age_within_preferred(25, 25, 30) == 1.0
        assert age_within_preferred(30, 25, 30) == 1.0

    def test_within_grace(self) -> None:
        """Should score 0.5 within two years outside a bound."""
        assert age_within_preferred(23, 25, 30) == 0.5
        assert age_within_preferred(32, 25, 30) == 0.5

    def test_far_outside(self) -> None:
        """Should score 0 further outside the range."""
        assert age_within_preferred(22, 25, 30) == 0.0
        assert age_within_preferred(33, 25, 30) == 0.0

    def test_single_bound(self) -> None:
        """Should evaluate a single bound on its own."""
        assert age_within_preferred(40, 25, None) == 1.0
        assert age_within_preferred(20, None, 30) == 1.0
        assert age_within_preferred(40, None, 30) == 0.0

    def test_unknown(self) -> None:
        """Should be neutral for an unknown age or no bounds."""
        assert age_within_preferred(None, 25, 30) == 0.5
        assert age_within_preferred(27, None, None) == 0.5


class TestJaccardSimilarity:
    """Tests for jaccard_similarity."""

    def test_identical_sets(self) -> None:
        """Should score 1 for identical sets."""
        assert jaccard_similarity(["music", "hiking"], ["hiking", "music"]) == 1.0

    def test_disjoint_sets(self) -> None:
        """Should score 0 for disjoint sets."""
        assert jaccard_similarity(["music"], ["hiking"]) == 0.0

    def test_partial_overlap(self) -> None:
        """Should score intersection over union."""
        assert jaccard_similarity(["a", "b", "c"], ["b", "c", "d"]) == pytest.approx(0.5)

    def test_empty_set(self) -> None:
        """Should be neutral when either set is empty."""
        assert jaccard_similarity([], ["music"]) == 0.5
        assert jaccard_similarity(None, None) == 0.5
        assert jaccard_similarity(["  "], ["music"]) == 0.5
