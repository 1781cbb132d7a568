"""Sentry error tracking utilities."""

import logging
import os

from app.utils.environment import is_deployed, get_environment

logger = logging.getLogger(__name__)

_sentry_initialized = False


def configure_sentry(dsn_env_var: str = "SENTRY_DSN") -> bool:
    """Initialize Sentry for error tracking.

    Only initializes in staging or production, and only when the DSN variable is set.

    Args:
        dsn_env_var: Environment variable name containing the Sentry DSN

    Returns:
        True if Sentry was initialized, False otherwise
    """
    global _sentry_initialized

    if _sentry_initialized:
        return True

    if not is_deployed():
        return False

    dsn = os.getenv(dsn_env_var)
    if not dsn:
        return False

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=get_environment(),
            traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2")),
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                SqlalchemyIntegration(),
            ],
            # Race entries and emails stay out of Sentry
            send_default_pii=False,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False

    _sentry_initialized = True
    return True


def capture_exception(exception: Exception) -> None:
    """Send an exception to Sentry when it is configured."""
    if not _sentry_initialized:
        return

    import sentry_sdk
    sentry_sdk.capture_exception(exception)


def set_user_context(user_id: int | str) -> None:
    """Attach the caller's id to subsequent Sentry events."""
    if not _sentry_initialized:
        return

    import sentry_sdk
    sentry_sdk.set_user({"id": str(user_id)})
