"""Top-level utils package.

Common infra helpers (logger factory, error handling) shared by the backend
and the frontend. Re-exported here so callers can simply ``from utils import
get_logger``.
"""

from .logging import *  # noqa: F401,F403
from .error_handler import *  # noqa: F401,F403
