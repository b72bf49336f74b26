"""Chapter-level planning context consumed by the scene planner."""
import logging
from typing import Any, List, Optional
from pydantic import BaseModel, Field, ValidationError, ValidatorFunctionWrapHandler, field_validator

from storyguard.models.density import TargetCurve
from storyguard.models.scene_plan import Pacing
from storyguard.utils.json_parser import repair_json

logger = logging.getLogger("StoryGuard")


def _none_if_invalid(value: Any, handler: ValidatorFunctionWrapHandler, field: str) -> Any:
    """Drop a single unreadable entry instead of rejecting the whole context."""
    try:
        return handler(value)
    except ValidationError:
        logger.warning(f"[CONTEXT] Ignoring invalid {field}: {value!r}")
        return None


class PacingVariation(BaseModel):
    position: Optional[float] = None
    pacing: Optional[Pacing] = None

    @field_validator("position", "pacing", mode="wrap")
    @classmethod
    def _tolerant(cls, value, handler, info):
        return _none_if_invalid(value, handler, info.field_name)


class PacingCurve(BaseModel):
    variations: List[PacingVariation] = Field(default_factory=list)


class EmotionPoint(BaseModel):
    position: Optional[float] = None
    emotion: Optional[float] = None

    @field_validator("position", "emotion", mode="wrap")
    @classmethod
    def _tolerant(cls, value, handler, info):
        return _none_if_invalid(value, handler, info.field_name)


class EmotionCurve(BaseModel):
    points: List[EmotionPoint] = Field(default_factory=list)


class SceneSlot(BaseModel):
    word_count: Optional[int] = None

    @field_validator("word_count", mode="wrap")
    @classmethod
    def _tolerant(cls, value, handler, info):
        return _none_if_invalid(value, handler, info.field_name)


class ChapterStructure(BaseModel):
    scenes: List[SceneSlot] = Field(default_factory=list)


class ChapterContext(BaseModel):
    """章节上下文

    各曲线按场景下标对齐：第 i 个场景读取 pacing_curve.variations[i]、
    emotion_curve.points[i]、chapter_structure.scenes[i]。
    缺失的条目忽略；无法解析的单个字段按缺失处理，不影响其余内容。
    """
    target_word_count: Optional[int] = None
    pacing_curve: Optional[PacingCurve] = None
    emotion_curve: Optional[EmotionCurve] = None
    chapter_structure: Optional[ChapterStructure] = None
    density_curve: Optional[TargetCurve] = None

    @field_validator(
        "target_word_count", "pacing_curve", "emotion_curve", "chapter_structure", "density_curve",
        mode="wrap",
    )
    @classmethod
    def _tolerant(cls, value, handler, info):
        return _none_if_invalid(value, handler, info.field_name)

    def pacing_at(self, index: int) -> Optional[str]:
        if self.pacing_curve and index < len(self.pacing_curve.variations):
            return self.pacing_curve.variations[index].pacing
        return None

    def emotion_at(self, index: int) -> Optional[float]:
        if self.emotion_curve and index < len(self.emotion_curve.points):
            return self.emotion_curve.points[index].emotion
        return None

    def word_count_at(self, index: int) -> Optional[int]:
        if self.chapter_structure and index < len(self.chapter_structure.scenes):
            return self.chapter_structure.scenes[index].word_count
        return None

    @classmethod
    def from_llm_output(cls, raw: str) -> "ChapterContext":
        """Parse a chapter plan emitted by an LLM, repairing common JSON mistakes."""
        return cls.model_validate_json(repair_json(raw))
