"""Scene structure models for planning."""
from typing import Dict, List, Optional, Literal, Tuple
from pydantic import BaseModel, ConfigDict, Field

from storyguard.models.issue import Issue

Pacing = Literal["slow", "medium", "fast"]
Emotion = Literal["neutral", "tension", "excitement", "relief", "calm"]


class SceneSection(BaseModel):
    """One section of a scene (opening, development, climax, resolution)."""
    model_config = ConfigDict(frozen=True)

    purpose: str
    word_count: int
    pacing: Pacing = "medium"
    emotion: Emotion = "neutral"


class PlotBeat(BaseModel):
    """Named structural marker at a normalized position inside a scene."""
    model_config = ConfigDict(frozen=True)

    beat: str
    position: float = Field(ge=0.0, le=1.0)
    description: str = ""


class SceneTemplate(BaseModel):
    """Scene archetype. Shared read-only by every planning call."""
    model_config = ConfigDict(frozen=True)

    structure: Dict[str, SceneSection]
    plot_beats: Tuple[PlotBeat, ...] = ()


class EmotionArc(BaseModel):
    start: float = 0.5
    peak: float = 0.5
    end: float = 0.5


class SceneContext(BaseModel):
    """Contextual targets applied on top of a template."""
    target_emotion: Optional[float] = None
    target_pacing: Optional[Pacing] = None
    target_word_count: Optional[int] = None


class ScenePlan(BaseModel):
    """A context-adjusted copy of a scene template."""
    id: Optional[str] = None
    type: str
    structure: Dict[str, SceneSection] = Field(default_factory=dict)
    plot_beats: List[PlotBeat] = Field(default_factory=list)
    total_word_count: int = 0
    pacing: str = "medium"
    emotion: EmotionArc = Field(default_factory=EmotionArc)

    # Chapter timeline interval, set only when planned as part of a sequence
    position: Optional[float] = None
    position_end: Optional[float] = None


class ValidationResult(BaseModel):
    valid: bool = True
    issues: List[Issue] = Field(default_factory=list)
