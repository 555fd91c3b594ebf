"""Action system: canonical actions to hero intents."""

from delve.actions.translator import ActionTranslator

__all__ = ["ActionTranslator"]
