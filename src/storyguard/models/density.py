"""Density analysis models."""
from typing import List, Optional, Literal
from pydantic import BaseModel, Field

from storyguard.models.issue import Issue

DensityLevel = Literal["low", "medium", "high"]


class SegmentMetrics(BaseModel):
    """Surface statistics of one text segment."""
    word_count: int = 0
    event_count: int = 0
    event_density: float = 0.0  # events per 100 chars
    new_info_count: int = 0
    info_density: float = 0.0  # new-info markers per 100 chars
    description_ratio: float = 0.0  # weighted description hits per 100 chars
    dialogue_ratio: float = 0.0  # dialogue quote chars / chars


class TextMetrics(SegmentMetrics):
    """Whole-text statistics.

    event_density / info_density are per 1000 chars at this level.
    """
    paragraph_count: int = 0
    sentence_count: int = 0
    avg_words_per_paragraph: float = 0.0
    avg_words_per_sentence: float = 0.0


class DensityPoint(BaseModel):
    """One point of a density curve."""
    position: float = Field(ge=0.0, le=1.0)
    density: DensityLevel = "medium"
    score: float = Field(default=0.5, ge=0.0, le=1.0)


class SegmentAnalysis(BaseModel):
    density: DensityLevel
    score: float
    metrics: SegmentMetrics


class DensityAnalysis(BaseModel):
    """Result of analyzing a text: overall class plus per-segment curve."""
    overall: DensityLevel = "medium"
    score: float = 0.5
    curve: List[DensityPoint] = Field(default_factory=list)
    metrics: TextMetrics = Field(default_factory=TextMetrics)
    segment_analyses: List[SegmentAnalysis] = Field(default_factory=list)


class TargetPoint(BaseModel):
    """Control point of a target density curve."""
    position: float
    density: str = "medium"


class TargetCurve(BaseModel):
    """Externally supplied density curve the draft should approximate."""
    variations: List[TargetPoint] = Field(default_factory=list)

    def slice(self, start: float, end: float) -> "TargetCurve":
        """Return the control points inside [start, end] rescaled to 0..1.

        Used to compare a single scene against its share of a chapter curve.
        """
        if end <= start:
            return TargetCurve()
        span = end - start
        points = [
            TargetPoint(position=(p.position - start) / span, density=p.density)
            for p in self.variations
            if start <= p.position <= end
        ]
        return TargetCurve(variations=points)


class ComparisonResult(BaseModel):
    match: bool = True
    score: float = 100.0
    issues: List[Issue] = Field(default_factory=list)
    match_rate: Optional[float] = None


class BalanceResult(BaseModel):
    balanced: bool = True
    issues: List[Issue] = Field(default_factory=list)
