"""Priority-ordered pattern matchers: improvement detection and breathwork triggers"""

from .breathwork import should_suggest_breathwork
from .improvement import IMPROVEMENTS, get_performance_window

__all__ = ["IMPROVEMENTS", "get_performance_window", "should_suggest_breathwork"]
