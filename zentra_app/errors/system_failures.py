"""
System failure error classifications.

These represent problems with the process setup rather than with the trade
data being analyzed.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ConfigurationError(SystemFailureError):
    """Settings file or override dictionary failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None,
                 source: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
        self.source = source
