# backend/tracker/utils/__init__.py
"""
Utility modules for the Portfolio Time Machine.

This package contains cross-cutting utilities used throughout the application:
- logging: Logging configuration and setup with correlation ID support
- context: Request context management for correlation IDs
- date_utils: Calendar helpers (daily/stepped ranges, clamping)

Usage:
    from tracker.utils import setup_logging
    from tracker.utils import get_correlation_id, set_correlation_id
    from tracker.utils.date_utils import calendar_days
"""

from tracker.utils.context import (
    correlation_scope,
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from tracker.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "correlation_scope",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
