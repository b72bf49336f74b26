from .issue import Issue
from .density import (
    SegmentMetrics, TextMetrics, DensityPoint, SegmentAnalysis, DensityAnalysis,
    TargetPoint, TargetCurve, ComparisonResult, BalanceResult
)
from .scene_plan import (
    SceneSection, PlotBeat, SceneTemplate, EmotionArc, SceneContext, ScenePlan,
    ValidationResult
)
from .chapter_context import ChapterContext
from .error_info import ErrorInfo, RecoverySuggestion, RetryPolicy
from .quality_report import QualityReport
from .scene_generation_state import SceneGenerationState

__all__ = [
    "Issue",
    "SegmentMetrics",
    "TextMetrics",
    "DensityPoint",
    "SegmentAnalysis",
    "DensityAnalysis",
    "TargetPoint",
    "TargetCurve",
    "ComparisonResult",
    "BalanceResult",
    "SceneSection",
    "PlotBeat",
    "SceneTemplate",
    "EmotionArc",
    "SceneContext",
    "ScenePlan",
    "ValidationResult",
    "ChapterContext",
    "ErrorInfo",
    "RecoverySuggestion",
    "RetryPolicy",
    "QualityReport",
    "SceneGenerationState",
]
