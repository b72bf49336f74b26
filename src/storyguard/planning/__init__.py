from .scene_templates import SceneTemplateLibrary, load_default_library
from .scene_planner import SceneStructurePlanner

__all__ = ["SceneTemplateLibrary", "load_default_library", "SceneStructurePlanner"]
