"""
Error classification for trade and plan input handling.

The analytics core never raises for expected edge cases (no trades, missing
plan, all-null risk fields); these exceptions belong to the parsing boundary
and configuration loading.
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
    TemporalDataError,
)
from .system_failures import (
    SystemFailureError,
    ConfigurationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    "TemporalDataError",
    # System Failures
    "SystemFailureError",
    "ConfigurationError",
]
