"""Base crew configuration for StoryGuard."""
import os
import logging
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel
from crewai import Agent, Crew, Process, Task, LLM
from crewai.project import CrewBase, agent, crew, task
from crewai.agents.agent_builder.base_agent import BaseAgent

logger = logging.getLogger("StoryGuard")

# Load environment variables
load_dotenv()


class RuntimeSettings(BaseModel):
    """Quality-loop settings read from the environment."""
    max_retries: int = 2
    retry_delay_ms: float = 1000
    scene_timeout_ms: float = 600_000
    max_rewrites: int = 2
    segment_count: int = 10
    word_count_tolerance: float = 0.3


def load_runtime_settings() -> RuntimeSettings:
    """Read STORYGUARD_* variables, falling back to defaults."""
    defaults = RuntimeSettings()
    return RuntimeSettings(
        max_retries=int(os.getenv("STORYGUARD_MAX_RETRIES", defaults.max_retries)),
        retry_delay_ms=float(os.getenv("STORYGUARD_RETRY_DELAY_MS", defaults.retry_delay_ms)),
        scene_timeout_ms=float(os.getenv("STORYGUARD_SCENE_TIMEOUT_MS", defaults.scene_timeout_ms)),
        max_rewrites=int(os.getenv("STORYGUARD_MAX_REWRITES", defaults.max_rewrites)),
        segment_count=int(os.getenv("STORYGUARD_SEGMENT_COUNT", defaults.segment_count)),
        word_count_tolerance=float(
            os.getenv("STORYGUARD_WORD_COUNT_TOLERANCE", defaults.word_count_tolerance)
        ),
    )


_llm = None


def get_llm():
    """Get or create LLM instance from environment variables."""
    global _llm
    if _llm is None:
        api_key = os.getenv("OPENAI_API_KEY")
        base_url = os.getenv("OPENAI_BASE_URL")
        model_name = os.getenv("OPENAI_MODEL_NAME", "gpt-4o-mini")

        # LiteLLM requires provider prefix for OpenAI-compatible APIs
        llm_model = f"openai/{model_name}"
        logger.info(f"Creating LLM with model: {llm_model}, base URL: {base_url}")

        _llm = LLM(
            model=llm_model,
            api_key=api_key,
            base_url=base_url,
            temperature=0.7,
            # Scene-level timeouts are enforced by ErrorHandler.with_timeout
            timeout=1800,
        )
    return _llm


@CrewBase
class Storyguard():
    """Base StoryGuard configuration - provides access to agents and tasks."""

    agents: List[BaseAgent]
    tasks: List[Task]

    # ==================== AGENTS ====================
    @agent
    def scene_writer(self) -> Agent:
        return self.build_scene_writer()

    # ==================== TASKS ====================
    @task
    def write_scene(self) -> Task:
        # Plain text output, no pydantic validation for prose
        return Task(
            config=self.tasks_config['write_scene']
        )

    # ==================== PER-ATTEMPT BUILDERS ====================
    # @agent/@task results are memoized by CrewBase. An attempt abandoned by a
    # timeout keeps running on its own objects, so each attempt builds fresh ones.
    def build_scene_writer(self) -> Agent:
        return Agent(
            config=self.agents_config['scene_writer'],
            llm=get_llm(),
            verbose=True
        )

    def build_write_scene_task(self, scene_writer: Agent) -> Task:
        config = {
            key: value for key, value in self.tasks_config['write_scene'].items()
            if key != 'agent'
        }
        return Task(config=config, agent=scene_writer)

    @crew
    def crew(self) -> Crew:
        return Crew(
            agents=self.agents,
            tasks=self.tasks,
            process=Process.sequential,
            verbose=True,
        )
