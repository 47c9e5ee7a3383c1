"""Tests for Sentry integration."""

from unittest.mock import MagicMock, patch

from src.core.sentry import capture_background_failure, init_sentry


def test_init_sentry_skips_without_dsn() -> None:
    """No DSN, no Sentry."""
    with (
        patch("src.core.sentry.settings") as mock_settings,
        patch("src.core.sentry.sentry_sdk") as mock_sdk,
    ):
        mock_settings.sentry_dsn = None
        assert init_sentry() is False
    mock_sdk.init.assert_not_called()


def test_init_sentry_never_sends_pii() -> None:
    """Sentry is initialized with PII disabled."""
    with (
        patch("src.core.sentry.settings") as mock_settings,
        patch("src.core.sentry.sentry_sdk") as mock_sdk,
    ):
        mock_settings.sentry_dsn = "https://key@sentry.example.com/1"
        mock_settings.environment = "production"
        assert init_sentry() is True

    kwargs = mock_sdk.init.call_args.kwargs
    assert kwargs["send_default_pii"] is False
    assert kwargs["environment"] == "production"
    assert kwargs["traces_sample_rate"] == 0.1


def test_capture_background_failure_tags_event() -> None:
    """Background failures are captured with string tags."""
    scope = MagicMock()
    error = RuntimeError("sweep failed")
    with patch("src.core.sentry.sentry_sdk") as mock_sdk:
        mock_sdk.new_scope.return_value.__enter__.return_value = scope
        capture_background_failure(error, icon_id=42, company_id="acme")

    scope.set_tag.assert_any_call("icon_id", "42")
    scope.set_tag.assert_any_call("company_id", "acme")
    mock_sdk.capture_exception.assert_called_once_with(error)
