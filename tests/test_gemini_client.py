"""Tests for the Gemini summary client: quota cooldown and retry delay parsing."""

from datetime import datetime, timezone, timedelta
from unittest.mock import MagicMock, patch

import pytest
from google.genai import errors as genai_errors

from app.services import gemini_client


QUOTA_EXCEEDED_BODY = {"error": {"code": 429, "status": "RESOURCE_EXHAUSTED", "message": "quota exceeded"}}


@pytest.fixture(autouse=True)
def reset_cooldown():
    gemini_client._quota_cooldown_until = None
    yield
    gemini_client._quota_cooldown_until = None


def _patched_client(generate_content):
    mock_client = MagicMock()
    mock_client.models.generate_content = generate_content
    return patch.object(gemini_client, "_get_client", return_value=mock_client)


def test_quota_error_starts_cooldown():
    def raise_429(*args, **kwargs):
        raise genai_errors.ClientError(429, QUOTA_EXCEEDED_BODY)

    with _patched_client(raise_429):
        result = gemini_client.generate_text_with_system("summarize this shop", "system")

    assert result is None
    assert gemini_client._quota_cooldown_until is not None
    assert gemini_client._quota_cooldown_until > datetime.now(timezone.utc)


def test_calls_are_skipped_during_cooldown():
    gemini_client._quota_cooldown_until = datetime.now(timezone.utc) + timedelta(seconds=60)

    with patch.object(gemini_client, "_get_client") as mock_get_client:
        result = gemini_client.generate_text_with_system("summarize this shop", "system")

    assert result is None
    mock_get_client.assert_not_called()


def test_expired_cooldown_is_cleared():
    gemini_client._quota_cooldown_until = datetime.now(timezone.utc) - timedelta(seconds=1)

    response = MagicMock()
    response.text = "A cozy café."
    with _patched_client(MagicMock(return_value=response)):
        result = gemini_client.generate_text_with_system("summarize this shop", "system")

    assert result == "A cozy café."
    assert gemini_client._quota_cooldown_until is None


def test_empty_reply_returns_none():
    response = MagicMock()
    response.text = ""
    with _patched_client(MagicMock(return_value=response)):
        assert gemini_client.generate_text_with_system("summarize this shop", "system") is None


def test_missing_api_key_raises():
    with patch.object(gemini_client.settings, "gemini_api_key", None):
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            gemini_client.generate_text_with_system("summarize this shop", "system")


def test_retry_delay_is_read_from_retry_info():
    exc = MagicMock()
    exc.details = {"error": {"details": [
        {"@type": "type.googleapis.com/google.rpc.Help"},
        {"@type": gemini_client.RETRY_INFO_TYPE, "retryDelay": "34.5s"},
    ]}}

    assert gemini_client._retry_delay_seconds(exc) == 34


def test_retry_delay_missing():
    exc = MagicMock()
    exc.details = {"error": {"code": 429}}

    assert gemini_client._retry_delay_seconds(exc) is None
