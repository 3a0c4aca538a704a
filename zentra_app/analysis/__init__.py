"""Session forecasts, period insights and dashboard statistics"""

from .dashboard import calculate_dashboard_stats
from .forecast import analyze_session_forecast
from .insights import analyze_performance_insights

__all__ = [
    "analyze_performance_insights",
    "analyze_session_forecast",
    "calculate_dashboard_stats",
]
