# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.routine_log import RoutineLog
from models.achievement import Achievement
from models.profile import Profile

__all__ = [
    "RoutineLog",
    "Achievement",
    "Profile",
]
