"""
Utility modules for Juno Outreach.

This package provides logging, retry and pacing helpers.
"""

from .logger import (
    setup_logging,
    get_logger,
    get_progress_logger,
    JunoLogger,
    ProgressLogger
)

from .rate_limiter import (
    RateLimitConfig,
    backoff_delay,
    is_rate_limit_error,
    retry_with_backoff,
    pace
)

__all__ = [
    # Logging
    'setup_logging',
    'get_logger',
    'get_progress_logger',
    'JunoLogger',
    'ProgressLogger',

    # Retry and pacing
    'RateLimitConfig',
    'backoff_delay',
    'is_rate_limit_error',
    'retry_with_backoff',
    'pace'
]
