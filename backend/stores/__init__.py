import logging
from dataclasses import dataclass

from config import STORE_BACKEND, SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY
from stores.base import (
    RoutineLogStore,
    AchievementStore,
    ProfileStore,
    StoreError,
    StoreUnavailableError,
    DuplicateRecordError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    routine_logs: RoutineLogStore
    achievements: AchievementStore
    profiles: ProfileStore


def is_supabase_configured() -> bool:
    return bool(SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY)


def uses_supabase(backend: str = STORE_BACKEND) -> bool:
    return backend == "supabase" or (backend == "auto" and is_supabase_configured())


def get_stores(backend: str = STORE_BACKEND) -> Stores:
    """Pick the store backend: hosted Supabase when configured, else SQLAlchemy."""
    if uses_supabase(backend):
        from stores.supabase_store import (
            SupabaseRoutineLogStore, SupabaseAchievementStore, SupabaseProfileStore,
        )
        logger.info("Using Supabase stores")
        return Stores(SupabaseRoutineLogStore(), SupabaseAchievementStore(), SupabaseProfileStore())

    from stores.sql_store import SqlRoutineLogStore, SqlAchievementStore, SqlProfileStore
    logger.info("Using SQL stores")
    return Stores(SqlRoutineLogStore(), SqlAchievementStore(), SqlProfileStore())


__all__ = [
    "Stores",
    "get_stores",
    "is_supabase_configured",
    "uses_supabase",
    "RoutineLogStore",
    "AchievementStore",
    "ProfileStore",
    "StoreError",
    "StoreUnavailableError",
    "DuplicateRecordError",
    "RecordNotFoundError",
]
