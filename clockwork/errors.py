"""
Error taxonomy for the Clockwork engine.

Authoring errors point at broken content (a script or id that doesn't exist)
and must surface immediately. Expected-empty outcomes (duplicate cards,
clamped stat changes) are not errors and never raise.
"""


class ClockworkError(Exception):
    """Base class for all engine errors."""


class AuthoringError(ClockworkError):
    """Content references something that was never registered."""


class ScriptNotFoundError(AuthoringError):
    """An instruction names a script that isn't in the registry."""

    def __init__(self, name: str, context: str = "Script"):
        self.name = name
        super().__init__(f"{context} not found: {name}")


class DefinitionNotFoundError(AuthoringError):
    """A stat, item, location, NPC, card or reputation id is unknown."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} definition not found: {key}")


class DuplicateDefinitionError(AuthoringError):
    """A registry already holds an entry under this name."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"Duplicate {kind} name: {key}")


class InvalidParameterError(ClockworkError, ValueError):
    """A required instruction parameter is missing or malformed."""
