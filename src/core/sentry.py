"""Sentry error tracking integration."""

from typing import Any

import sentry_sdk

from src.core.config import settings


def init_sentry() -> bool:
    """Initialize Sentry error tracking if DSN is configured.

    Samples 10% of traces. PII is never sent to protect client data
    (tax identifiers, contact details).

    Returns:
        True when Sentry was initialized, False when no DSN is configured.
    """
    if not settings.sentry_dsn:
        return False  # Skip gracefully if no DSN

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    return True


def capture_background_failure(exc: BaseException, **tags: Any) -> None:
    """Report a failure from detached background work.

    Background sweeps have no caller to propagate to, so their fatal errors
    go to Sentry with identifying tags (icon, tenant). A no-op when Sentry
    is not initialized.

    Args:
        exc: The exception to report.
        **tags: Tag values attached to the Sentry event.
    """
    with sentry_sdk.new_scope() as scope:
        for key, value in tags.items():
            scope.set_tag(key, str(value))
        sentry_sdk.capture_exception(exc)
