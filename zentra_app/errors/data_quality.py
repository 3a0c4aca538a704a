"""
Data quality error classifications for trade and plan records.

These exceptions are raised when a raw record reaching the parsing boundary
is missing a structurally required field or carries a value of the wrong
shape.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for rejected trade or plan input."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MissingDataError(DataQualityError):
    """A required (non-nullable) field is absent."""

    def __init__(self, message: str, field: Optional[str] = None,
                 record_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.record_type = record_type


class MalformedDataError(DataQualityError):
    """Field exists but has the wrong type, enum value or range."""

    def __init__(self, message: str, field: Optional[str] = None,
                 raw_value: Optional[Any] = None, expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.raw_value = raw_value
        self.expected_format = expected_format


class TemporalDataError(DataQualityError):
    """Timestamps are inconsistent, e.g. exit before entry."""

    def __init__(self, message: str, entry_time: Optional[Any] = None,
                 exit_time: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.entry_time = entry_time
        self.exit_time = exit_time
