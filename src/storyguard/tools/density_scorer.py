"""Density scoring: metrics -> bounded score -> low/medium/high."""
from typing import List

from storyguard.models.density import DensityLevel, DensityPoint, SegmentMetrics

HIGH_THRESHOLD = 0.7
MEDIUM_THRESHOLD = 0.4


class DensityScorer:
    """Additive weighted score over segment metrics, clamped to [0, 1]."""

    def score(self, metrics: SegmentMetrics) -> float:
        """计算密度分数（0-1）

        - 事件密度高 → 高密度
        - 信息密度高 → 高密度
        - 描写比例低 → 高密度（更多事件，更少描写）
        - 对话比例适中 → 平衡
        """
        score = 0.0

        if metrics.event_density > 3:
            score += 0.4
        elif metrics.event_density > 1:
            score += 0.2
        else:
            score += 0.1

        if metrics.info_density > 5:
            score += 0.3
        elif metrics.info_density > 2:
            score += 0.15
        else:
            score += 0.05

        if metrics.description_ratio < 0.3:
            score += 0.2
        elif metrics.description_ratio < 0.6:
            score += 0.1
        else:
            score += 0.05

        if 0.2 < metrics.dialogue_ratio < 0.4:
            score += 0.1
        else:
            score += 0.05

        # Float sums like 0.1 + 0.05 + 0.2 + 0.05 land a hair off the
        # class boundaries; round before classifying.
        return max(0.0, min(1.0, round(score, 10)))

    @staticmethod
    def classify(score: float) -> DensityLevel:
        """分数转换为密度类型（边界值归入更高一级）"""
        if score >= HIGH_THRESHOLD:
            return "high"
        if score >= MEDIUM_THRESHOLD:
            return "medium"
        return "low"

    @staticmethod
    def positions(count: int) -> List[float]:
        """Evenly spaced curve positions: i / (count - 1); a single point sits at 0."""
        if count <= 1:
            return [0.0] * max(count, 0)
        return [i / (count - 1) for i in range(count)]

    def build_curve(self, scores: List[float]) -> List[DensityPoint]:
        return [
            DensityPoint(position=position, density=self.classify(score), score=score)
            for position, score in zip(self.positions(len(scores)), scores)
        ]

    def default_curve(self, count: int) -> List[DensityPoint]:
        """Flat medium curve used when there is nothing to analyze."""
        return [
            DensityPoint(position=position, density="medium", score=0.5)
            for position in self.positions(count)
        ]
