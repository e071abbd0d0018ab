"""Unit tests for MatchService."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from roommate_match.config import load_scoring_config
from roommate_match.database.repository import SurveyRepository
from roommate_match.matching.scorer import DEFAULT_WEIGHTS
from roommate_match.models.db_models import Base, MatchScore
from roommate_match.models.pydantic_models import ScoringConfig
from roommate_match.services.match_service import MatchService, SurveyNotFoundError


@pytest.fixture
def db_session():
    """Create an in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session_factory = sessionmaker(bind=engine)
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def service(db_session: Session) -> MatchService:
    """Create a MatchService with default scoring."""
    return MatchService(db_session)


@pytest.fixture
def populated_service(service: MatchService) -> MatchService:
    """Service with a viewer and three candidates."""
    service.submit_survey("me", {"cleanliness_importance": 5}, display_name="Me")
    service.submit_survey("twin", {"cleanliness_importance": 5}, display_name="Twin")
    service.submit_survey("close", {"cleanliness_importance": 4}, display_name="Close")
    service.submit_survey("far", {"cleanliness_importance": 1}, display_name="Far")
    return service


class TestSubmitSurvey:
    """Tests for storing surveys through the service."""

    def test_submit_returns_normalized_answers(self, service: MatchService) -> None:
        """Should normalize raw values on submit."""
        answers = service.submit_survey(
            "u1",
            {"partner_smoking_preference": "אין בעיה", "lifestyle": "רגוע"},
            profile={"age": 24},
        )

        assert answers.partner_smoking_preference is not None
        assert answers.partner_smoking_preference.value == "no_problem"
        assert answers.lifestyle is not None
        assert answers.lifestyle.value == "calm"
        assert answers.age == 24

    def test_get_survey(self, service: MatchService) -> None:
        """Should return the stored raw survey."""
        service.submit_survey("u1", {"has_pet": True}, display_name="Noa")

        stored = service.get_survey("u1")

        assert stored.user_id == "u1"
        assert stored.display_name == "Noa"
        assert stored.answers == {"has_pet": True}
        assert stored.version == 1

    def test_missing_survey(self, service: MatchService) -> None:
        """Should raise SurveyNotFoundError for unknown users."""
        with pytest.raises(SurveyNotFoundError, match="ghost"):
            service.get_answers("ghost")


class TestScoreUsers:
    """Tests for scoring stored users."""

    def test_score_users(self, populated_service: MatchService) -> None:
        """Should score two stored users."""
        result = populated_service.score_users("me", "close")

        assert result.user_id == "close"
        assert result.display_name == "Close"
        assert result.score == 80
        assert result.cached is False

    def test_second_call_uses_cache(self, populated_service: MatchService) -> None:
        """Should serve a repeated pair from the cache."""
        populated_service.score_users("me", "close")
        result = populated_service.score_users("me", "close")

        assert result.cached is True
        assert result.score == 80

    def test_no_cache_recomputes(self, populated_service: MatchService) -> None:
        """Should recompute when the cache is bypassed."""
        populated_service.score_users("me", "close")
        result = populated_service.score_users("me", "close", use_cache=False)

        assert result.cached is False

    def test_update_invalidates_cache(self, populated_service: MatchService) -> None:
        """Should re-score after either survey changes."""
        populated_service.score_users("me", "close")
        populated_service.submit_survey("close", {"cleanliness_importance": 2})

        result = populated_service.score_users("me", "close")

        assert result.cached is False
        assert result.score == 40

    def test_recreated_survey_invalidates_cache(self, service: MatchService, db_session: Session) -> None:
        """Should not serve a score cached before a survey was deleted and re-created."""
        service.submit_survey("a", {"cleanliness_importance": 5})
        service.submit_survey("b", {"cleanliness_importance": 5})
        assert service.score_users("a", "b").score == 100

        SurveyRepository(db_session).delete_survey("b")
        service.submit_survey("b", {"cleanliness_importance": 1})
        result = service.score_users("a", "b")

        assert service.get_survey("b").version == 1
        assert result.cached is False
        assert result.score == 20

    def test_delete_survey_drops_cached_scores(self, populated_service: MatchService, db_session: Session) -> None:
        """Should remove cached scores involving a deleted user."""
        populated_service.score_users("me", "close")
        populated_service.score_users("close", "far")

        populated_service.delete_survey("close")

        assert db_session.query(MatchScore).count() == 0
        with pytest.raises(SurveyNotFoundError, match="close"):
            populated_service.get_survey("close")

    def test_delete_missing_survey(self, service: MatchService) -> None:
        """Should raise when deleting an unknown user."""
        with pytest.raises(SurveyNotFoundError, match="ghost"):
            service.delete_survey("ghost")

    def test_explicit_default_weights_use_cache(self, db_session: Session) -> None:
        """Should cache when a config spells out the default weights."""
        service = MatchService(db_session, ScoringConfig(weights=dict(DEFAULT_WEIGHTS)))
        service.submit_survey("a", {"cleanliness_importance": 5})
        service.submit_survey("b", {"cleanliness_importance": 3})

        service.score_users("a", "b")
        result = service.score_users("a", "b")

        assert result.cached is True
        assert result.score == 60

    def test_shipped_config_uses_cache(self, db_session: Session) -> None:
        """Should cache under the default scoring.yaml."""
        service = MatchService(db_session, load_scoring_config())
        service.submit_survey("a", {"cleanliness_importance": 5})
        service.submit_survey("b", {"cleanliness_importance": 5})

        service.score_users("a", "b")

        assert service.score_users("a", "b").cached is True

    def test_custom_config_skips_cache(self, db_session: Session) -> None:
        """Should neither read nor write the cache under custom weights."""
        default = MatchService(db_session)
        default.submit_survey("a", {"cleanliness_importance": 5, "hobbies": ["x"]})
        default.submit_survey("b", {"cleanliness_importance": 5, "hobbies": ["y"]})
        default.score_users("a", "b")

        custom = MatchService(db_session, ScoringConfig(weights={"hobbies": 3}))
        result = custom.score_users("a", "b")

        assert result.cached is False
        assert result.score == 50
        assert default.score_users("a", "b").score == 75

    def test_missing_other_user(self, populated_service: MatchService) -> None:
        """Should raise for an unknown candidate."""
        with pytest.raises(SurveyNotFoundError):
            populated_service.score_users("me", "ghost")

    def test_explain(self, populated_service: MatchService) -> None:
        """Should return a breakdown for two stored users."""
        breakdown = populated_service.explain("me", "far")

        assert breakdown.score == 20
        assert breakdown.total_possible == 3


class TestRankCandidates:
    """Tests for ranking candidates."""

    def test_rank_order(self, populated_service: MatchService) -> None:
        """Should sort candidates by score descending, excluding the viewer."""
        matches = populated_service.rank_candidates("me")

        assert [m.user_id for m in matches] == ["twin", "close", "far"]
        assert [m.score for m in matches] == [100, 80, 20]

    def test_rank_ties_by_user_id(self, service: MatchService) -> None:
        """Should break score ties by user id."""
        service.submit_survey("me", {"hobbies": ["x"]})
        service.submit_survey("zed", {"hobbies": ["x"]})
        service.submit_survey("amy", {"hobbies": ["x"]})

        matches = service.rank_candidates("me")

        assert [m.user_id for m in matches] == ["amy", "zed"]

    def test_rank_limit(self, populated_service: MatchService) -> None:
        """Should cap the number of candidates."""
        matches = populated_service.rank_candidates("me", limit=2)

        assert [m.user_id for m in matches] == ["twin", "close"]

    def test_rank_min_score(self, populated_service: MatchService) -> None:
        """Should drop candidates below the minimum score."""
        matches = populated_service.rank_candidates("me", min_score=50)

        assert [m.user_id for m in matches] == ["twin", "close"]

    def test_rank_unknown_viewer(self, populated_service: MatchService) -> None:
        """Should raise for a viewer without a survey."""
        with pytest.raises(SurveyNotFoundError):
            populated_service.rank_candidates("ghost")

    def test_rank_empty(self, service: MatchService) -> None:
        """Should return no candidates when the viewer is alone."""
        service.submit_survey("me", {})

        assert service.rank_candidates("me") == []
