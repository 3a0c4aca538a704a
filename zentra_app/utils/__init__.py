"""
Utility functions module.

Common helpers for time handling and small numeric reductions shared by
the analytics components.

Time Semantics:
- Trade timestamps are authoritative and treated as UTC
- Naive datetimes are interpreted as UTC
- Wall-clock time is only a fallback when the caller supplies no reference time
"""
