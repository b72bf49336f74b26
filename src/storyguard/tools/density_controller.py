"""Density Controller - 密度控制器

Facade over the analyzer, comparator and balance checker.
"""
from typing import Optional

from storyguard.models.density import (
    BalanceResult, ComparisonResult, DensityAnalysis
)
from storyguard.tools.balance_checker import BalanceChecker
from storyguard.tools.curve_comparator import CurveComparator, CurveInput, TargetInput
from storyguard.tools.keywords import KeywordConfig
from storyguard.tools.text_metrics import TextMetricsAnalyzer


class DensityController:

    def __init__(self, keywords: Optional[KeywordConfig] = None):
        self.analyzer = TextMetricsAnalyzer(keywords=keywords)
        self.comparator = CurveComparator()
        self.balance_checker = BalanceChecker()

    def analyze_density(self, text: str, segment_count: int = 10) -> DensityAnalysis:
        return self.analyzer.analyze(text, segment_count)

    def compare_with_target(
        self, actual: CurveInput, target: TargetInput = None
    ) -> ComparisonResult:
        return self.comparator.compare(actual, target)

    def check_balance(self, actual: CurveInput) -> BalanceResult:
        return self.balance_checker.check_balance(actual)
