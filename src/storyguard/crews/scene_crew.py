"""Scene generation crew with density quality gates."""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from crewai import Crew, Process

from storyguard.crew import RuntimeSettings, Storyguard, load_runtime_settings
from storyguard.models import (
    ChapterContext, Issue, QualityReport, RetryPolicy, SceneGenerationState,
    ScenePlan, TargetCurve
)
from storyguard.planning import SceneStructurePlanner
from storyguard.tools import DensityController, count_chinese_words, word_count_deviation
from storyguard.utils.error_handler import ErrorHandler, LLMError

logger = logging.getLogger("StoryGuard")


class SceneCrew:
    """Plans a chapter, writes each scene and rewrites drafts that miss their targets.

    Flow per chapter:
    1. plan_scenes → scene scaffold on the chapter timeline
    2. write each scene through the LLM crew (timeout + retry with backoff)
    3. density analysis / target comparison / balance / length check
    4. failed drafts are rewritten with revision instructions, up to max_rewrites
    """

    def __init__(
        self,
        base_crew: Optional[Storyguard] = None,
        planner: Optional[SceneStructurePlanner] = None,
        density_controller: Optional[DensityController] = None,
        settings: Optional[RuntimeSettings] = None,
    ):
        self.base_crew = base_crew or Storyguard()
        self.planner = planner or SceneStructurePlanner()
        self.density_controller = density_controller or DensityController()
        self.settings = settings or load_runtime_settings()

    # ==================== GENERATION ====================
    @staticmethod
    def should_retry(error: BaseException) -> bool:
        """Retry transient failures only (LLM, network, timeouts)."""
        if isinstance(error, TimeoutError):
            return True
        info = ErrorHandler.handle_error(error)
        return bool(info.recoverable) or ErrorHandler.is_recoverable(error)

    def _retry_policy(self, scene_id: Optional[str]) -> RetryPolicy:
        def on_retry(attempt: int, error: BaseException) -> None:
            logger.warning(f"[SCENE {scene_id}] Generation retry #{attempt}: {error}")

        return RetryPolicy(
            max_retries=self.settings.max_retries,
            base_delay_ms=self.settings.retry_delay_ms,
            on_retry=on_retry,
            should_retry=self.should_retry,
        )

    def _target_for(
        self, plan: ScenePlan, chapter_context: ChapterContext
    ) -> Optional[TargetCurve]:
        """The slice of the chapter density curve covered by this scene."""
        curve = chapter_context.density_curve
        if curve is None or plan.position is None or plan.position_end is None:
            return None
        return curve.slice(plan.position, plan.position_end)

    def _build_inputs(
        self,
        plan: ScenePlan,
        chapter_context: ChapterContext,
        state: SceneGenerationState,
    ) -> Dict[str, Any]:
        structure = "\n".join(
            f"- {name}：{section.purpose}，约{section.word_count}字，"
            f"节奏 {section.pacing}，情绪 {section.emotion}"
            for name, section in plan.structure.items()
        )
        plot_beats = "\n".join(
            f"- {beat.beat} @ {beat.position:.1f}：{beat.description}"
            for beat in plan.plot_beats
        )
        target = self._target_for(plan, chapter_context)
        target_density = json.dumps(
            [p.model_dump() for p in target.variations] if target else [],
            ensure_ascii=False,
        )

        return {
            "scene_type": plan.type,
            "pacing": plan.pacing,
            "emotion_start": plan.emotion.start,
            "emotion_peak": plan.emotion.peak,
            "emotion_end": plan.emotion.end,
            "target_word_count": plan.total_word_count,
            "structure": structure,
            "plot_beats": plot_beats or "（无）",
            "target_density": target_density,
            **state.revision_inputs(),
        }

    async def _kickoff(self, inputs: Dict[str, Any]) -> str:
        """Run the single-task writing crew once, on agent and task objects of its own."""
        scene_writer = self.base_crew.build_scene_writer()
        write_task = self.base_crew.build_write_scene_task(scene_writer)

        scene_crew = Crew(
            agents=[scene_writer],
            tasks=[write_task],
            process=Process.sequential,
            verbose=True
        )
        result = await scene_crew.kickoff_async(inputs=inputs)

        text = str(result.raw) if hasattr(result, 'raw') else str(result)
        if not text.strip():
            raise LLMError("LLM 返回空内容，场景生成失败")
        return text

    async def generate_scene(
        self,
        plan: ScenePlan,
        chapter_context: Optional[ChapterContext] = None,
        state: Optional[SceneGenerationState] = None,
    ) -> str:
        """Produce draft text for a scene plan, with timeout and retry."""
        chapter_context = chapter_context or ChapterContext()
        state = state or SceneGenerationState(scene_id=plan.id)
        inputs = self._build_inputs(plan, chapter_context, state)

        return await ErrorHandler.with_retry(
            lambda: ErrorHandler.with_timeout(
                lambda: self._kickoff(inputs),
                self.settings.scene_timeout_ms,
                f"场景 {plan.id or plan.type} 生成超时",
            ),
            self._retry_policy(plan.id),
        )

    # ==================== QUALITY GATE ====================
    def review_scene(
        self,
        text: str,
        plan: ScenePlan,
        chapter_context: Optional[ChapterContext] = None,
    ) -> QualityReport:
        """Density analysis, target comparison, balance and length check for one draft."""
        chapter_context = chapter_context or ChapterContext()
        density = self.density_controller.analyze_density(text, self.settings.segment_count)
        comparison = self.density_controller.compare_with_target(
            density, self._target_for(plan, chapter_context)
        )
        balance = self.density_controller.check_balance(density)

        word_count = count_chinese_words(text)
        extra_issues = []
        target_words = plan.total_word_count
        if target_words > 0:
            deviation = word_count_deviation(text, target_words)
            if abs(deviation) > self.settings.word_count_tolerance:
                extra_issues.append(Issue(
                    severity="low",
                    message=f"场景字数偏离规划：实际 {word_count}，目标 {target_words}",
                    suggestion="精简内容" if deviation > 0 else "补充细节和描写",
                ))

        return QualityReport(
            scene_id=plan.id,
            word_count=word_count,
            target_word_count=target_words,
            density=density,
            comparison=comparison,
            balance=balance,
            extra_issues=extra_issues,
        )

    async def write_scene(
        self,
        plan: ScenePlan,
        chapter_context: Optional[ChapterContext] = None,
    ) -> Dict[str, Any]:
        """Write one scene, rewriting until it passes or max_rewrites is reached.

        Returns:
            Dictionary containing:
                - plan: the ScenePlan
                - text: final draft (last one, even if it did not pass)
                - report: QualityReport of the final draft
                - attempts: number of drafts produced
        """
        chapter_context = chapter_context or ChapterContext()
        state = SceneGenerationState(scene_id=plan.id)

        while True:
            state.draft_text = await self.generate_scene(plan, chapter_context, state)
            report = self.review_scene(state.draft_text, plan, chapter_context)
            state.reports.append(report)

            logger.info(
                f"[SCENE {plan.id}] Attempt {state.current_attempt + 1}: "
                f"passed={report.passed}, density={report.density.overall}, "
                f"match_score={report.comparison.score:.1f}, issues={len(report.issues)}"
            )

            if report.passed:
                break
            if state.current_attempt >= self.settings.max_rewrites:
                logger.warning(
                    f"[SCENE {plan.id}] Still failing after {state.current_attempt + 1} drafts, keeping last draft"
                )
                break

            logger.info(f"[SCENE {plan.id}] Requesting rewrite: {report.revision_instructions()}")
            state.current_attempt += 1

        return {
            "plan": plan,
            "text": state.draft_text,
            "report": state.last_report,
            "attempts": state.current_attempt + 1,
        }

    async def write_chapter(
        self,
        scene_types: Sequence[str],
        chapter_context: Optional[Union[ChapterContext, Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Plan and write a chapter scene by scene.

        Returns:
            Dictionary containing:
                - scenes: per-scene results (see write_scene)
                - chapter_text: scenes joined by blank lines
                - passed: whether every scene passed its quality gate
        """
        if not isinstance(chapter_context, ChapterContext):
            chapter_context = ChapterContext.model_validate(chapter_context or {})

        plans = self.planner.plan_scenes(scene_types, chapter_context)
        for plan in plans:
            validation = self.planner.validate_scene_structure(plan)
            for issue in validation.issues:
                logger.warning(f"[SCENE {plan.id}] Plan issue ({issue.severity}): {issue.message}")

        scenes: List[Dict[str, Any]] = []
        for plan in plans:
            scenes.append(await self.write_scene(plan, chapter_context))

        return {
            "scenes": scenes,
            "chapter_text": "\n\n".join(scene["text"] for scene in scenes),
            "passed": all(scene["report"].passed for scene in scenes),
        }
