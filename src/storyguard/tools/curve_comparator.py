"""Compare an actual density curve with a target curve."""
import logging
from typing import Any, List, Optional, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from storyguard.models.density import (
    ComparisonResult, DensityAnalysis, DensityPoint, TargetCurve
)
from storyguard.models.issue import Issue

logger = logging.getLogger("StoryGuard")

DENSITY_ORDINALS = {"low": 0, "medium": 1, "high": 2}
MATCH_SCORE_THRESHOLD = 70
DIFF_PENALTY = 30

_POINTS = TypeAdapter(List[DensityPoint])

CurveInput = Union[DensityAnalysis, Sequence[DensityPoint], dict, None]
TargetInput = Union[TargetCurve, dict, Sequence[Any], None]


def as_curve(actual: CurveInput) -> List[DensityPoint]:
    """Accept an analysis, a {"curve": [...]} dict or a list of points (models or dicts).

    Unreadable input yields an empty curve, which compares as a trivial match
    and checks as balanced.
    """
    if actual is None:
        return []
    if isinstance(actual, DensityAnalysis):
        return list(actual.curve)
    points = actual.get("curve") if isinstance(actual, dict) else actual
    try:
        return _POINTS.validate_python(list(points or []))
    except (ValidationError, TypeError) as e:
        logger.warning(f"[DENSITY] Ignoring unreadable density curve: {e}")
        return []


def as_target_curve(target: TargetInput) -> Optional[TargetCurve]:
    """Accept a TargetCurve, a {"variations": [...]} dict or a bare list of control points."""
    if target is None or isinstance(target, TargetCurve):
        return target
    try:
        if isinstance(target, dict):
            return TargetCurve.model_validate(target)
        return TargetCurve(variations=list(target))
    except (ValidationError, TypeError) as e:
        logger.warning(f"[DENSITY] Ignoring unreadable target curve: {e}")
        return None


class CurveComparator:
    """Scores how closely an actual curve follows the target control points."""

    def compare(
        self,
        actual: CurveInput,
        target: TargetInput,
    ) -> ComparisonResult:
        """与目标密度曲线对比

        对每个目标控制点，找到位置最近的实际点并比较密度等级：
        - 差值为 0 计为匹配
        - 差值 >= 2（low 与 high 互换）记为高严重度问题
        匹配分数 = max(0, 100 - 平均差值 * 30)，>= 70 视为匹配。
        """
        target = as_target_curve(target)
        if target is None or not target.variations:
            return ComparisonResult(match=True, score=100, issues=[])

        curve = as_curve(actual)
        issues: List[Issue] = []
        total_diff = 0
        match_count = 0

        for target_point in target.variations:
            actual_point = self.find_nearest_point(curve, target_point.position)
            if actual_point is None:
                continue

            target_value = DENSITY_ORDINALS.get(target_point.density, 1)
            actual_value = DENSITY_ORDINALS.get(actual_point.density, 1)
            diff = abs(target_value - actual_value)
            total_diff += diff

            if diff == 0:
                match_count += 1
            elif diff >= 2:
                issues.append(Issue(
                    severity="high",
                    message=f"密度不匹配：目标 {target_point.density}，实际 {actual_point.density}",
                    suggestion=self._suggest(target_point.density),
                    position=round(target_point.position, 2),
                    target=target_point.density,
                    actual=actual_point.density,
                ))

        point_count = len(target.variations)
        avg_diff = total_diff / point_count
        score = max(0.0, 100 - avg_diff * DIFF_PENALTY)

        logger.debug(
            f"[DENSITY] Curve comparison: score={score:.1f}, "
            f"matched {match_count}/{point_count}, {len(issues)} issues"
        )
        return ComparisonResult(
            match=score >= MATCH_SCORE_THRESHOLD,
            score=score,
            issues=issues,
            match_rate=match_count / point_count,
        )

    @staticmethod
    def find_nearest_point(
        curve: Sequence[DensityPoint], position: float
    ) -> Optional[DensityPoint]:
        """查找最近的点（距离相同时保留最先遇到的点）"""
        if not curve:
            return None

        nearest = curve[0]
        min_diff = abs(nearest.position - position)
        for point in curve:
            diff = abs(point.position - position)
            if diff < min_diff:
                min_diff = diff
                nearest = point
        return nearest

    @staticmethod
    def _suggest(target_density: str) -> str:
        if target_density == "high":
            return "增加事件与新信息，减少静态描写"
        if target_density == "low":
            return "放缓节奏，加入描写或情绪缓冲"
        return "调整事件密度以贴近目标曲线"
