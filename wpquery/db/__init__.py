"""
Database access: schema models, cache, batch loading and query building.
"""

from .cache import RecordCache
from .loader import BackgroundTasks, BatchLoader, dedupe, fan_in
from .models import Base
from .session import create_engine, create_redis, create_session_factory

__all__ = [
    "BackgroundTasks",
    "Base",
    "BatchLoader",
    "RecordCache",
    "create_engine",
    "create_redis",
    "create_session_factory",
    "dedupe",
    "fan_in",
]
