"""Tests for database retry logic."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from roommate_match.database.repository import (
    DB_RETRY_MAX_ATTEMPTS,
    with_db_retry,
)


class TestWithDbRetry:
    """Tests for the with_db_retry decorator."""

    def test_retry_on_operational_error(self) -> None:
        """Should retry on OperationalError and succeed after a transient failure."""
        mock_func = MagicMock()
        mock_func.side_effect = [
            OperationalError("database is locked", None, None),
            "success",
        ]

        @with_db_retry
        def decorated_func() -> str:
            return mock_func()

        with patch("roommate_match.database.repository.wait_exponential", return_value=0):
            result = decorated_func()

        assert result == "success"
        assert mock_func.call_count == 2

    def test_no_retry_on_other_exceptions(self) -> None:
        """Should raise non-retryable errors immediately."""
        mock_func = MagicMock()
        mock_func.side_effect = ValueError("some other error")

        @with_db_retry
        def decorated_func() -> str:
            return mock_func()

        with pytest.raises(ValueError, match="some other error"):
            decorated_func()

        assert mock_func.call_count == 1

    def test_gives_up_after_max_attempts(self) -> None:
        """Should re-raise once the attempts are exhausted."""
        mock_func = MagicMock()
        mock_func.side_effect = OperationalError("database is locked", None, None)

        @with_db_retry
        def decorated_func() -> str:
            return mock_func()

        with patch("roommate_match.database.repository.wait_exponential", return_value=0):
            with pytest.raises(OperationalError):
                decorated_func()

        assert mock_func.call_count == DB_RETRY_MAX_ATTEMPTS
