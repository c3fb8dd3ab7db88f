"""Domain models for the chat service layer.

Re-exports every public symbol so imports like
``from riley.core.service.models import BadRequest`` keep working.
"""

from .constants import *  # noqa: F401, F403
from .errors import *  # noqa: F401, F403
