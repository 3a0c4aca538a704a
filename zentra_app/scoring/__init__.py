"""Behavioral scoring suite: battery, plan control, radar, heatmap and consistency"""

from .consistency import build_stability_snapshot, calculate_consistency_trend, calculate_daily_score
from .heatmap import TIME_WINDOWS, build_heatmap_snapshot, calculate_behavior_heatmap_with_insight
from .mental_battery import calculate_mental_battery
from .plan_control import calculate_plan_control, calculate_plan_control_with_attribution
from .radar import calculate_psychological_radar

__all__ = [
    "TIME_WINDOWS",
    "build_heatmap_snapshot",
    "build_stability_snapshot",
    "calculate_behavior_heatmap_with_insight",
    "calculate_consistency_trend",
    "calculate_daily_score",
    "calculate_mental_battery",
    "calculate_plan_control",
    "calculate_plan_control_with_attribution",
    "calculate_psychological_radar",
]
