"""Tests for user-facing error messages."""

import pytest

from ghlink.error_handling import (
    AuthenticationError, ConflictError, DuplicateSlugError, GhLinkError,
    GitHubAPIError, InvalidFileError, InvalidURLError, MissingCredentialsError,
    NotFoundError, RepositoryNotFoundError, RetryConfig, SlugNotFoundError,
    backoff_delay, error_status_code, retry, user_message
)
from ghlink.error_handling.error_handler import (
    AUTH_FAILED_MESSAGE, CONFLICT_MESSAGE, REPO_NOT_FOUND_MESSAGE
)


class TestUserMessage:
    """Errors are translated into text for the end user."""

    @pytest.mark.parametrize("error,expected", [
        (AuthenticationError("bad", status_code=401), AUTH_FAILED_MESSAGE),
        (RepositoryNotFoundError("gone", status_code=404), REPO_NOT_FOUND_MESSAGE),
        (NotFoundError("Not Found", status_code=404), "Not Found"),
        (ConflictError("stale", status_code=409), CONFLICT_MESSAGE),
        (GitHubAPIError("boom", status_code=500, response_data={"message": "Server Error"}),
         "GitHub API Error: 500 Server Error"),
        (GitHubAPIError("Request to GitHub failed: timed out"),
         "Network error: Request to GitHub failed: timed out"),
        (DuplicateSlugError("abc"), '"abc" is already in use. Please choose a different ID.'),
        (SlugNotFoundError("abc"), '"abc" does not exist.'),
        (InvalidURLError("empty", value=""), "Please enter a URL."),
        (InvalidURLError("bad", value="example.com"), "Please enter a valid URL."),
        (InvalidFileError("Only PDF files can be uploaded."), "Only PDF files can be uploaded."),
        (ValueError("plain"), "plain"),
    ])
    def test_messages(self, error: Exception, expected: str) -> None:
        assert user_message(error) == expected

    def test_missing_credentials(self) -> None:
        assert "token" in user_message(MissingCredentialsError())

    def test_status_code(self) -> None:
        assert error_status_code(ConflictError("stale", status_code=422)) == 422
        assert error_status_code(DuplicateSlugError("abc")) is None


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_to_dict(self) -> None:
        cause = OSError("disk")
        error = GhLinkError("failed", error_code="x", context={"slug": "abc"}, cause=cause)

        assert error.to_dict() == {
            "error_type": "GhLinkError",
            "message": "failed",
            "error_code": "x",
            "context": {"slug": "abc"},
            "cause": "disk",
        }
        assert str(error) == "failed | Code: x | Caused by: disk"

    def test_registry_context(self) -> None:
        error = DuplicateSlugError("abc")

        assert error.context == {"slug": "abc"}
        assert error.error_code == "duplicate_slug"

    def test_api_message(self) -> None:
        assert GitHubAPIError("x", response_data={"message": "Bad credentials"}).api_message == "Bad credentials"
        assert GitHubAPIError("x").api_message is None


class TestRetry:
    """Tests for the retry decorator."""

    @pytest.fixture(autouse=True)
    def no_sleep(self, monkeypatch: pytest.MonkeyPatch) -> list:
        delays = []
        monkeypatch.setattr("ghlink.error_handling.retry_decorator.time.sleep", delays.append)
        return delays

    def test_backoff_delay(self) -> None:
        assert backoff_delay(0, 1.0, 30.0) == 1.0
        assert backoff_delay(3, 1.0, 30.0) == 8.0
        assert backoff_delay(10, 1.0, 30.0) == 30.0
        assert 0.5 <= backoff_delay(0, 1.0, 30.0, jitter=True) <= 1.0

    def test_retries_until_success(self, no_sleep: list) -> None:
        calls = []

        @retry(max_attempts=3, exceptions=[ConflictError])
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConflictError("stale", status_code=409)
            return "ok"

        assert flaky() == "ok"
        assert len(calls) == 3
        assert len(no_sleep) == 2

    def test_other_exceptions_are_not_retried(self) -> None:
        calls = []

        @retry(max_attempts=3, exceptions=[ConflictError])
        def duplicate():
            calls.append(1)
            raise DuplicateSlugError("abc")

        with pytest.raises(DuplicateSlugError):
            duplicate()
        assert len(calls) == 1

    def test_last_exception_is_raised(self, no_sleep: list) -> None:
        wrapped = RetryConfig(max_attempts=2, jitter=False).decorate(self._always_conflict)

        with pytest.raises(ConflictError):
            wrapped()
        assert no_sleep == [0.5]

    @staticmethod
    def _always_conflict():
        raise ConflictError("stale", status_code=409)
