import os

# Must be set before config.py is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORE_BACKEND"] = "sql"
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-secret"
os.environ["ROUTINE_EDIT_POLICY"] = "any"

import itertools
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import init_db
from schemas import RoutineLog, Achievement
from stores.base import (
    RoutineLogStore,
    AchievementStore,
    StoreUnavailableError,
    DuplicateRecordError,
    RecordNotFoundError,
)

TODAY = date(2026, 10, 17)
USER = "7f1c2a9e-user"


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


def make_log(day: date, morning: bool = False, evening: bool = False, user_id: str = USER, log_id: str = None) -> RoutineLog:
    return RoutineLog(
        id=log_id or day.isoformat(),
        user_id=user_id,
        date=day,
        morning_completed=morning,
        evening_completed=evening,
    )


class FakeRoutineLogStore(RoutineLogStore):
    """In-memory log store with switchable failures."""

    def __init__(self):
        self.rows: dict[tuple[str, date], RoutineLog] = {}
        self.fail_reads = False
        self.fail_writes = False
        self._ids = itertools.count(1)

    def seed(self, day: date, morning: bool, evening: bool, user_id: str = USER) -> RoutineLog:
        log = make_log(day, morning, evening, user_id, str(next(self._ids)))
        self.rows[(user_id, day)] = log
        return log

    async def list(self, user_id):
        if self.fail_reads:
            raise StoreUnavailableError("routine_logs: ConnectError")
        logs = [r for (u, _), r in self.rows.items() if u == user_id]
        return sorted(logs, key=lambda r: r.date, reverse=True)

    async def get(self, user_id, day):
        if self.fail_reads:
            raise StoreUnavailableError("routine_logs: ConnectError")
        return self.rows.get((user_id, day))

    async def insert(self, user_id, day, flags):
        if self.fail_writes:
            raise StoreUnavailableError("routine_logs: ConnectError")
        if (user_id, day) in self.rows:
            raise DuplicateRecordError("routine_logs: duplicate record")
        return self.seed(day, flags.get("morning_completed", False), flags.get("evening_completed", False), user_id)

    async def update(self, log_id, flags):
        if self.fail_writes:
            raise StoreUnavailableError("routine_logs: ConnectError")
        for key, row in self.rows.items():
            if row.id == log_id:
                self.rows[key] = row.model_copy(update=flags)
                return self.rows[key]
        raise RecordNotFoundError(log_id)


class FakeAchievementStore(AchievementStore):
    def __init__(self):
        self.rows: list[Achievement] = []
        self.fail_reads = False
        self.fail_names: set[str] = set()
        self._ids = itertools.count(1)

    async def list(self, user_id):
        if self.fail_reads:
            raise StoreUnavailableError("achievements: ReadTimeout")
        return [a for a in reversed(self.rows) if a.user_id == user_id]

    async def insert(self, user_id, name, description, icon):
        if name in self.fail_names:
            raise StoreUnavailableError("achievements: server error 503")
        if any(a.user_id == user_id and a.name == name for a in self.rows):
            raise DuplicateRecordError("achievements: duplicate record")
        achievement = Achievement(
            id=str(next(self._ids)),
            user_id=user_id,
            name=name,
            description=description,
            icon=icon,
            created_at=datetime.now(timezone.utc),
        )
        self.rows.append(achievement)
        return achievement


@pytest.fixture
def log_store():
    return FakeRoutineLogStore()


@pytest.fixture
def achievement_store():
    return FakeAchievementStore()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
