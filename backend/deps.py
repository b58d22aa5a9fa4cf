# deps.py — service singletons for FastAPI dependencies

from stores import Stores, get_stores
from services.routine_service import RoutineService
from services.profile_service import ProfileService

# Global instances, created on first use
_stores: Stores = None
_routine_service: RoutineService = None
_profile_service: ProfileService = None


def get_store_set() -> Stores:
    global _stores

    if _stores is None:
        _stores = get_stores()

    return _stores


def get_routine_service() -> RoutineService:
    """
    Shared RoutineService. One instance per process so the last good
    snapshot per user survives between requests.
    """
    global _routine_service

    if _routine_service is None:
        stores = get_store_set()
        _routine_service = RoutineService(stores.routine_logs, stores.achievements)

    return _routine_service


def get_profile_service() -> ProfileService:
    global _profile_service

    if _profile_service is None:
        _profile_service = ProfileService(get_store_set().profiles)

    return _profile_service
