"""
The bundled demo story.

Importing registers its content: effects, dates, the YAML world, the
tour guide and the `init` script.
"""

from . import effects  # noqa: F401
from . import dating  # noqa: F401
from . import world  # noqa: F401
from . import tour_guide  # noqa: F401
