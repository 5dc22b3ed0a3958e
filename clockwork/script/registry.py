"""
Instruction registry and dispatch.

Every instruction is plain data, `[name, params]`. Behaviour is looked up
by name in a single process-wide table populated at import time. Running
an unregistered name is an authoring bug and raises immediately.

Usage:
    @script("addStat")
    def add_stat(game, params):
        ...

    SCRIPTS.run(game, "addStat", {"stat": "Charm", "change": 5})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from ..errors import DuplicateDefinitionError, ScriptNotFoundError

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

ScriptFn = Callable[["Game", dict], Any]


class ScriptRegistry:
    """Name -> handler table for instructions."""

    def __init__(self):
        self._scripts: dict[str, ScriptFn] = {}

    def register(self, name: str, fn: ScriptFn) -> ScriptFn:
        if name in self._scripts:
            raise DuplicateDefinitionError("script", name)
        self._scripts[name] = fn
        return fn

    def unregister(self, name: str) -> None:
        """Remove a script. Test utility."""
        self._scripts.pop(name, None)

    def get(self, name: str) -> ScriptFn:
        fn = self._scripts.get(name)
        if fn is None:
            raise ScriptNotFoundError(name)
        return fn

    def __contains__(self, name: object) -> bool:
        return name in self._scripts

    def run(self, game: Game, name: str, params: dict | None = None) -> Any:
        fn = self.get(name)
        logger.debug(f"Running {name} {params or {}}")
        return fn(game, params if params is not None else {})


SCRIPTS = ScriptRegistry()


def script(name: str) -> Callable[[ScriptFn], ScriptFn]:
    """Decorator that registers a handler under an instruction name."""

    def decorator(fn: ScriptFn) -> ScriptFn:
        return SCRIPTS.register(name, fn)

    return decorator


def make_scripts(scripts: dict[str, ScriptFn]) -> None:
    """Register several handlers at once."""
    for name, fn in scripts.items():
        SCRIPTS.register(name, fn)


def is_instruction(value: Any) -> bool:
    """True for `[name, params]` (or a tuple of the same shape)."""
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and isinstance(value[0], str)
        and isinstance(value[1], dict)
    )


def is_page(value: Any) -> bool:
    """True for a list of instructions (an empty list counts)."""
    return isinstance(value, list) and all(is_instruction(v) for v in value)
