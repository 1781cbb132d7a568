"""Environment detection.

ENV selects the .env file main.py loads and how loud the app is: 'local'
enables docs and debug logging, 'test' is used by the pytest suite, and
'staging'/'production' report to Sentry.
"""

import os

ENVIRONMENTS = ("local", "test", "staging", "production")


def get_environment() -> str:
    """Current environment name; unknown values fall back to 'local'."""
    env = os.getenv("ENV", "local").strip().lower()
    return env if env in ENVIRONMENTS else "local"


def is_production() -> bool:
    return get_environment() == "production"


def is_staging() -> bool:
    return get_environment() == "staging"


def is_testing() -> bool:
    return get_environment() == "test"


def is_debug() -> bool:
    """True only for local development."""
    return get_environment() == "local"


def is_deployed() -> bool:
    """Staging or production; the environments Sentry reports from."""
    return is_production() or is_staging()
