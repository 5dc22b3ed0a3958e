"""
Clockwork: a narrative life-simulation engine.

Importing the package registers the core scripts and the bundled story,
so a Game is ready to run `init` straight away.
"""

# State first: schema and the clock import each other's modules
from . import state  # noqa: F401
from . import script  # noqa: F401
from .game import Game
from . import story  # noqa: F401

__version__ = "0.4.0"

__all__ = ["Game", "__version__"]
