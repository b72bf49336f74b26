"""Scene Structure Planner - 场景结构规划器

规划单个场景的结构、节奏、情绪，以及章节内多个场景的时间线。
"""
import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from storyguard.models.chapter_context import ChapterContext
from storyguard.models.issue import Issue
from storyguard.models.scene_plan import (
    EmotionArc, SceneContext, ScenePlan, SceneSection, ValidationResult
)
from storyguard.planning.scene_templates import SceneTemplateLibrary, load_default_library

logger = logging.getLogger("StoryGuard")

EMOTION_VALUES = {
    "neutral": 0.5,
    "tension": 0.6,
    "excitement": 0.8,
    "relief": 0.4,
    "calm": 0.3,
}
PACING_WORD_SCALE = {"fast": 0.8, "slow": 1.2}
DEFAULT_CHAPTER_WORDS = 2000
MIN_SCENE_WORDS = 200
MAX_SCENE_WORDS = 1500


def emotion_value(emotion: Optional[str]) -> float:
    return EMOTION_VALUES.get(emotion or "neutral", 0.5)


def emotion_for_intensity(intensity: float) -> str:
    if intensity > 0.7:
        return "excitement"
    if intensity > 0.5:
        return "tension"
    return "neutral"


def _coerce(model, value):
    """Validate a dict into model; invalid input degrades to an empty model."""
    if value is None:
        return model()
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        logger.warning(f"[PLANNER] Ignoring invalid {model.__name__}: {e.error_count()} errors")
        return model()


class SceneStructurePlanner:

    def __init__(self, library: Optional[SceneTemplateLibrary] = None):
        self.library = library or load_default_library()

    def plan_scene(
        self,
        scene_type: str,
        context: Optional[Union[SceneContext, Dict[str, Any]]] = None,
    ) -> ScenePlan:
        """规划场景结构

        依次应用：情绪覆盖 → 节奏覆盖（快节奏字数 ×0.8，慢节奏 ×1.2）→ 总字数缩放。
        字数均向下取整。

        Args:
            scene_type: 场景类型（setup/conflict/climax/resolution，未知类型按 conflict）
            context: 目标情绪、节奏、字数
        """
        context = _coerce(SceneContext, context)
        template = self.library.get(scene_type)

        structure: Dict[str, SceneSection] = {
            name: section.model_copy() for name, section in template.structure.items()
        }
        plot_beats = [beat.model_copy() for beat in template.plot_beats]

        if context.target_emotion is not None:
            emotion = emotion_for_intensity(context.target_emotion)
            structure = {
                name: section.model_copy(update={"emotion": emotion})
                for name, section in structure.items()
            }

        if context.target_pacing in PACING_WORD_SCALE:
            scale = PACING_WORD_SCALE[context.target_pacing]
            structure = {
                name: section.model_copy(update={
                    "pacing": context.target_pacing,
                    "word_count": math.floor(section.word_count * scale),
                })
                for name, section in structure.items()
            }

        current_total = sum(section.word_count for section in structure.values())
        if context.target_word_count and context.target_word_count > 0 and current_total > 0:
            ratio = context.target_word_count / current_total
            structure = {
                name: section.model_copy(update={
                    "word_count": math.floor(section.word_count * ratio)
                })
                for name, section in structure.items()
            }

        development = structure.get("development")
        peak_section = development or structure.get("climax")
        opening = structure.get("opening")
        resolution = structure.get("resolution")

        return ScenePlan(
            type=scene_type,
            structure=structure,
            plot_beats=plot_beats,
            total_word_count=sum(section.word_count for section in structure.values()),
            pacing=context.target_pacing or (development.pacing if development else "medium"),
            emotion=EmotionArc(
                start=emotion_value(opening.emotion if opening else None),
                peak=emotion_value(peak_section.emotion if peak_section else None),
                end=emotion_value(resolution.emotion if resolution else None),
            ),
        )

    def plan_scenes(
        self,
        scene_types: Sequence[str],
        chapter_context: Optional[Union[ChapterContext, Dict[str, Any]]] = None,
    ) -> List[ScenePlan]:
        """规划多个场景（用于章节）

        第 i 个场景从章节上下文读取节奏、情绪和字数覆盖，并在 0..1 的章节时间线上
        占据 [position, position_end)，长度 = total_word_count / 章节目标字数（默认 2000）。
        相邻场景首尾相接。
        """
        chapter_context = _coerce(ChapterContext, chapter_context)
        chapter_words = chapter_context.target_word_count or DEFAULT_CHAPTER_WORDS

        scenes: List[ScenePlan] = []
        current_position = 0.0

        for i, scene_type in enumerate(scene_types):
            scene_context = SceneContext(
                target_pacing=chapter_context.pacing_at(i),
                target_emotion=chapter_context.emotion_at(i),
                target_word_count=chapter_context.word_count_at(i),
            )
            plan = self.plan_scene(scene_type, scene_context)
            plan.id = f"scene_{i + 1}"
            plan.position = current_position
            plan.position_end = current_position + plan.total_word_count / chapter_words
            current_position = plan.position_end
            scenes.append(plan)

        logger.info(
            f"[PLANNER] Planned {len(scenes)} scenes, "
            f"{sum(s.total_word_count for s in scenes)} words, timeline end={current_position:.3f}"
        )
        return scenes

    @staticmethod
    def validate_scene_structure(scene_plan: ScenePlan) -> ValidationResult:
        """验证场景结构"""
        issues = []

        if not scene_plan.structure:
            issues.append(Issue(
                severity="high",
                message="场景结构不完整",
                suggestion="确保场景包含 opening、development、resolution 等部分",
            ))

        total_words = sum(section.word_count for section in scene_plan.structure.values())
        if total_words < MIN_SCENE_WORDS:
            issues.append(Issue(
                severity="low",
                message="场景字数过少，可能缺乏细节",
                suggestion="增加场景描写和细节",
            ))
        if total_words > MAX_SCENE_WORDS:
            issues.append(Issue(
                severity="low",
                message="场景字数过多，可能过于冗长",
                suggestion="考虑拆分场景或精简内容",
            ))

        if not scene_plan.plot_beats:
            issues.append(Issue(
                severity="medium",
                message="场景缺少情节节点",
                suggestion="添加关键情节节点",
            ))

        return ValidationResult(valid=not issues, issues=issues)
