"""Cricket Stats - personal career statistics and analytics."""

from .config import settings
from .database import get_database_engine, get_session

__version__ = "0.1.0"

__all__ = ["settings", "get_database_engine", "get_session", "__version__"]
