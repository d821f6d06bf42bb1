"""
Analysis module for strength training history.

Provides the ten-week exercise analyzer, its cache, the plateau
sufficiency gate and the body-weight trend.
"""

from .body_weight import (
    BodyWeightTrend,
    WeightTrendDirection,
    calculate_body_weight_trend,
)
from .cache import AnalysisCache
from .outliers import filter_outliers, median
from .performance import (
    PerformanceAnalyzer,
    SessionRecord,
    analyze_exercise,
    build_analysis_context,
    collect_session_records,
    detect_plateau_signals,
    determine_progress_status,
    estimate_one_rep_max,
    round_half_up,
)
from .sufficiency import has_enough_history_for_plateau_detection, week_bucket

__all__ = [
    "AnalysisCache",
    "BodyWeightTrend",
    "PerformanceAnalyzer",
    "SessionRecord",
    "WeightTrendDirection",
    "analyze_exercise",
    "build_analysis_context",
    "calculate_body_weight_trend",
    "collect_session_records",
    "detect_plateau_signals",
    "determine_progress_status",
    "estimate_one_rep_max",
    "filter_outliers",
    "has_enough_history_for_plateau_detection",
    "median",
    "round_half_up",
    "week_bucket",
]
