"""StoryGuard crews."""
from .scene_crew import SceneCrew

__all__ = ["SceneCrew"]
