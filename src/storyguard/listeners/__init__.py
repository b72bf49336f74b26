"""CrewAI Event Listeners for StoryGuard.

Importing this package registers the listeners with the CrewAI event bus:

    import storyguard.listeners
"""

from .llm_logging_listener import llm_logging_listener

__all__ = ["llm_logging_listener"]
