"""
Logging configuration and utilities for the Zentra analytics engine.
"""
from .config import configure_logging, get_logger, get_scoring_logger, log_score_result

__all__ = ["configure_logging", "get_logger", "get_scoring_logger", "log_score_result"]
