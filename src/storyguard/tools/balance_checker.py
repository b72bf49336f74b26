"""Flag density curves stuck at an extreme."""
from storyguard.models.density import BalanceResult
from storyguard.models.issue import Issue
from storyguard.tools.curve_comparator import CurveInput, as_curve

EXTREME_RATIO = 0.7


class BalanceChecker:

    def check_balance(self, actual: CurveInput) -> BalanceResult:
        """检查密度平衡：高或低密度占比超过 70% 时给出提示"""
        curve = as_curve(actual)
        if not curve:
            return BalanceResult(balanced=True, issues=[])

        high_ratio = sum(1 for p in curve if p.density == "high") / len(curve)
        low_ratio = sum(1 for p in curve if p.density == "low") / len(curve)

        issues = []
        if high_ratio > EXTREME_RATIO:
            issues.append(Issue(
                severity="medium",
                message="密度长时间保持高水平，可能缺乏缓冲",
                suggestion="添加低密度段落作为缓冲",
            ))
        if low_ratio > EXTREME_RATIO:
            issues.append(Issue(
                severity="medium",
                message="密度长时间保持低水平，可能缺乏推进",
                suggestion="增加事件密度，推进情节",
            ))

        return BalanceResult(balanced=not issues, issues=issues)
