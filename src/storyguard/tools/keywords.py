"""Keyword vocabularies for density analysis.

The vocabularies are configuration, loaded from config/keywords.yaml. Tests and
callers can pass their own KeywordConfig to score text independently of the
default Chinese word lists.
"""
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger("StoryGuard")

KEYWORDS_PATH = Path(__file__).parent.parent / "config" / "keywords.yaml"


class KeywordConfig(BaseModel):
    """Event / description vocabularies and marker character sets."""
    model_config = ConfigDict(frozen=True)

    event_keywords: Tuple[str, ...] = ()
    description_keywords: Dict[str, float] = Field(default_factory=dict)
    dialogue_markers: str = "“”‘’\"「」『』"
    new_info_pattern: str = r"[A-Z][a-z]+|[A-Z]+"
    new_info_markers: str = "《》「」『』"

    @field_validator("event_keywords", mode="before")
    @classmethod
    def _dedupe(cls, value):
        # Event keywords form a set; a repeated entry must not double-count.
        seen = []
        for keyword in value or ():
            if keyword and keyword not in seen:
                seen.append(keyword)
        return tuple(seen)

    @field_validator("description_keywords", mode="before")
    @classmethod
    def _weights(cls, value):
        # Allow a plain list of keywords (weight 1.0 each).
        if isinstance(value, (list, tuple)):
            return {keyword: 1.0 for keyword in value}
        return value or {}

    def new_info_regex(self) -> "re.Pattern[str]":
        return re.compile(self.new_info_pattern)

    @classmethod
    def from_yaml(cls, path: Path) -> "KeywordConfig":
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        config = cls(**data)
        logger.debug(
            f"[KEYWORDS] Loaded {len(config.event_keywords)} event keywords, "
            f"{len(config.description_keywords)} description keywords from {path}"
        )
        return config


@lru_cache(maxsize=None)
def load_default_keywords(path: Optional[str] = None) -> KeywordConfig:
    """Load (once) the bundled keyword configuration."""
    return KeywordConfig.from_yaml(Path(path) if path else KEYWORDS_PATH)
