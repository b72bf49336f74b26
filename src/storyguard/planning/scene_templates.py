"""Scene template library.

Templates are loaded once from config/scene_templates.yaml into frozen models
held in a read-only mapping. Planning calls copy what they need and never
touch the stored objects.
"""
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import yaml

from storyguard.models.scene_plan import SceneTemplate

logger = logging.getLogger("StoryGuard")

TEMPLATES_PATH = Path(__file__).parent.parent / "config" / "scene_templates.yaml"
DEFAULT_SCENE_TYPE = "conflict"


class SceneTemplateLibrary:
    """Immutable table of scene archetypes."""

    def __init__(self, templates: Mapping[str, SceneTemplate]):
        self._templates = MappingProxyType(dict(templates))

    @classmethod
    def from_yaml(cls, path: Path = TEMPLATES_PATH) -> "SceneTemplateLibrary":
        with open(path, 'r', encoding='utf-8') as f:
            data: Dict[str, dict] = yaml.safe_load(f) or {}
        templates = {
            name: SceneTemplate.model_validate(template)
            for name, template in data.items()
        }
        logger.debug(f"[TEMPLATES] Loaded {len(templates)} scene templates from {path}")
        return cls(templates)

    @property
    def templates(self) -> Mapping[str, SceneTemplate]:
        return self._templates

    @property
    def scene_types(self) -> Tuple[str, ...]:
        return tuple(self._templates)

    def get(self, scene_type: Optional[str]) -> SceneTemplate:
        """Template for scene_type; unknown types fall back to "conflict"."""
        template = self._templates.get(scene_type) if scene_type else None
        if template is None:
            logger.debug(f"[TEMPLATES] Unknown scene type {scene_type!r}, using {DEFAULT_SCENE_TYPE}")
            template = self._templates[DEFAULT_SCENE_TYPE]
        return template

    def __contains__(self, scene_type: str) -> bool:
        return scene_type in self._templates


@lru_cache(maxsize=1)
def load_default_library() -> SceneTemplateLibrary:
    """The bundled template library, loaded once per process."""
    return SceneTemplateLibrary.from_yaml()
