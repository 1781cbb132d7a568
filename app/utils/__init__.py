"""Utility modules for the race-results backend."""

from app.utils.logger import logger, setup_logger
from app.utils.environment import (
    is_production,
    is_staging,
    is_testing,
    is_debug,
    is_deployed,
    get_environment,
)
from app.utils.sentry_utils import configure_sentry
from app.utils.response_utils import error_response
from app.utils.constants import API_VERSION, API_PREFIX

__all__ = [
    # Logger
    "logger",
    "setup_logger",
    # Environment
    "is_production",
    "is_staging",
    "is_testing",
    "is_debug",
    "is_deployed",
    "get_environment",
    # Sentry
    "configure_sentry",
    # Response
    "error_response",
    # Constants
    "API_VERSION",
    "API_PREFIX",
]
