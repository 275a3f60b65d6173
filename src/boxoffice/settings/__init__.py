"""Settings for the BoxOffice backend.

Each concern lives in its own module; everything is driven by environment variables via python-decouple.
"""

from .base import *  # noqa: F401,F403
from .logging import *  # noqa: F401,F403
from .ninja import *  # noqa: F401,F403
from .ticketing import *  # noqa: F401,F403
