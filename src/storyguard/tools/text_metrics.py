"""Text metrics for density analysis.

Counts are keyword/pattern based surface statistics; no semantic analysis.
Lengths are measured in characters, which for Chinese prose is the word count.
"""
import logging
import math
import re
from typing import List, Optional

from storyguard.models.density import (
    DensityAnalysis, SegmentAnalysis, SegmentMetrics, TextMetrics
)
from storyguard.tools.density_scorer import DensityScorer
from storyguard.tools.keywords import KeywordConfig, load_default_keywords

logger = logging.getLogger("StoryGuard")

PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
SENTENCE_SPLIT = re.compile(r"[。！？.!?]")


class TextMetricsAnalyzer:
    """Computes segment-level and whole-text metrics and the density curve."""

    def __init__(
        self,
        keywords: Optional[KeywordConfig] = None,
        scorer: Optional[DensityScorer] = None,
    ):
        self.keywords = keywords or load_default_keywords()
        self.scorer = scorer or DensityScorer()
        self._new_info_regex = self.keywords.new_info_regex()

    def analyze(self, text: str, segment_count: int = 10) -> DensityAnalysis:
        """分析文本密度

        Args:
            text: 文本内容
            segment_count: 分段数量（小于 1 时按 1 处理）

        Returns:
            DensityAnalysis: 空文本返回 medium / 0.5 / 平直曲线
        """
        segment_count = max(1, int(segment_count or 1))

        if not text or not text.strip():
            return DensityAnalysis(
                overall="medium",
                score=0.5,
                curve=self.scorer.default_curve(segment_count),
            )

        segment_analyses = [
            self.analyze_segment(segment)
            for segment in self.segment_text(text, segment_count)
        ]
        scores = [analysis.score for analysis in segment_analyses]
        overall_score = round(math.fsum(scores) / len(scores), 10)

        analysis = DensityAnalysis(
            overall=self.scorer.classify(overall_score),
            score=overall_score,
            curve=self.scorer.build_curve(scores),
            metrics=self.text_metrics(text),
            segment_analyses=segment_analyses,
        )
        logger.debug(
            f"[DENSITY] {len(text)} chars, {segment_count} segments, "
            f"overall={analysis.overall} ({overall_score:.3f})"
        )
        return analysis

    @staticmethod
    def segment_text(text: str, segment_count: int) -> List[str]:
        """Split into equal contiguous slices; the last one absorbs the remainder."""
        total_length = len(text)
        segment_length = total_length // segment_count
        segments = []
        for i in range(segment_count):
            start = i * segment_length
            end = total_length if i == segment_count - 1 else (i + 1) * segment_length
            segments.append(text[start:end])
        return segments

    def analyze_segment(self, segment: str) -> SegmentAnalysis:
        metrics = self.segment_metrics(segment)
        score = self.scorer.score(metrics)
        return SegmentAnalysis(
            density=self.scorer.classify(score),
            score=score,
            metrics=metrics,
        )

    def segment_metrics(self, segment: str) -> SegmentMetrics:
        word_count = len(segment)
        event_count = self.count_events(segment)
        new_info_count = self.count_new_info(segment)

        return SegmentMetrics(
            word_count=word_count,
            event_count=event_count,
            event_density=event_count / (word_count / 100) if word_count else 0.0,
            new_info_count=new_info_count,
            info_density=new_info_count / (word_count / 100) if word_count else 0.0,
            description_ratio=self.description_ratio(segment),
            dialogue_ratio=self.dialogue_ratio(segment),
        )

    def text_metrics(self, text: str) -> TextMetrics:
        """整体指标：段落/句子统计，事件与信息密度按每千字计"""
        word_count = len(text)
        paragraph_count = len([p for p in PARAGRAPH_SPLIT.split(text) if p.strip()])
        sentence_count = len([s for s in SENTENCE_SPLIT.split(text) if s.strip()])
        event_count = self.count_events(text)
        new_info_count = self.count_new_info(text)

        return TextMetrics(
            word_count=word_count,
            paragraph_count=paragraph_count,
            sentence_count=sentence_count,
            event_count=event_count,
            event_density=event_count / (word_count / 1000) if word_count else 0.0,
            new_info_count=new_info_count,
            info_density=new_info_count / (word_count / 1000) if word_count else 0.0,
            description_ratio=self.description_ratio(text),
            dialogue_ratio=self.dialogue_ratio(text),
            avg_words_per_paragraph=word_count / paragraph_count if paragraph_count else 0.0,
            avg_words_per_sentence=word_count / sentence_count if sentence_count else 0.0,
        )

    def count_events(self, text: str) -> int:
        return sum(text.count(keyword) for keyword in self.keywords.event_keywords)

    def count_new_info(self, text: str) -> int:
        """专有名词（大写开头的拉丁词）与书名号、引号标记的数量"""
        proper_nouns = len(self._new_info_regex.findall(text))
        markers = sum(1 for char in text if char in self.keywords.new_info_markers)
        return proper_nouns + markers

    def description_ratio(self, text: str) -> float:
        """加权描写关键词命中数 / 每百字"""
        if not text:
            return 0.0
        hits = sum(
            weight * text.count(keyword)
            for keyword, weight in self.keywords.description_keywords.items()
        )
        return hits / (len(text) / 100)

    def dialogue_ratio(self, text: str) -> float:
        if not text:
            return 0.0
        markers = sum(1 for char in text if char in self.keywords.dialogue_markers)
        return markers / len(text)
