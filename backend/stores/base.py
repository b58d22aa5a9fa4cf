from abc import ABC, abstractmethod
from datetime import date

from schemas import RoutineLog, Achievement, Profile


class StoreError(Exception):
    """A store call failed; the message is safe to show in logs."""


class StoreUnavailableError(StoreError):
    """The backing store could not be reached or failed internally."""


class DuplicateRecordError(StoreError):
    """A uniqueness constraint rejected the write."""


class RecordNotFoundError(StoreError):
    """The record addressed by an update does not exist."""


class RoutineLogStore(ABC):
    """Per-user, per-date routine completion records."""

    @abstractmethod
    async def list(self, user_id: str) -> list[RoutineLog]:
        """All logs for a user, newest date first."""
        ...

    @abstractmethod
    async def get(self, user_id: str, day: date) -> RoutineLog | None:
        ...

    @abstractmethod
    async def insert(self, user_id: str, day: date, flags: dict) -> RoutineLog:
        """
        Create the (user, date) record.

        Raises DuplicateRecordError when the record already exists.
        """
        ...

    @abstractmethod
    async def update(self, log_id: str, flags: dict) -> RoutineLog:
        """Apply a partial update of morning_completed / evening_completed."""
        ...


class AchievementStore(ABC):
    @abstractmethod
    async def list(self, user_id: str) -> list[Achievement]:
        """All achievements for a user, newest first."""
        ...

    @abstractmethod
    async def insert(self, user_id: str, name: str, description: str, icon: str) -> Achievement:
        ...


class ProfileStore(ABC):
    @abstractmethod
    async def get(self, user_id: str) -> Profile | None:
        ...

    @abstractmethod
    async def insert(self, user_id: str) -> Profile:
        ...

    @abstractmethod
    async def update(self, user_id: str, fields: dict) -> Profile:
        ...
