"""
sql_store.py — Stores backed by SQLAlchemy (local SQLite or a direct Postgres URL).
Each call opens its own session; IntegrityError maps to DuplicateRecordError.
"""

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from database import SessionLocal
from models.routine_log import RoutineLog as RoutineLogRow
from models.achievement import Achievement as AchievementRow
from models.profile import Profile as ProfileRow
from schemas import RoutineLog, Achievement, Profile
from stores.base import (
    RoutineLogStore,
    AchievementStore,
    ProfileStore,
    StoreUnavailableError,
    DuplicateRecordError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)


class _SqlStore:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def _run(self, fn):
        """Run fn(db) in a fresh session, translating SQLAlchemy errors."""
        db: Session = self.session_factory()
        try:
            return fn(db)
        except IntegrityError as e:
            db.rollback()
            raise DuplicateRecordError(str(e.orig)) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error: {e}")
            raise StoreUnavailableError(e.__class__.__name__) from e
        finally:
            db.close()


class SqlRoutineLogStore(_SqlStore, RoutineLogStore):
    async def list(self, user_id: str) -> list[RoutineLog]:
        def q(db):
            rows = db.query(RoutineLogRow).filter_by(user_id=user_id)\
                     .order_by(RoutineLogRow.date.desc()).all()
            return [RoutineLog.model_validate(r) for r in rows]
        return self._run(q)

    async def get(self, user_id: str, day: date) -> RoutineLog | None:
        def q(db):
            row = db.query(RoutineLogRow).filter_by(user_id=user_id, date=day).first()
            return RoutineLog.model_validate(row) if row else None
        return self._run(q)

    async def insert(self, user_id: str, day: date, flags: dict) -> RoutineLog:
        def q(db):
            row = RoutineLogRow(
                user_id=user_id,
                date=day,
                morning_completed=bool(flags.get("morning_completed", False)),
                evening_completed=bool(flags.get("evening_completed", False)),
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return RoutineLog.model_validate(row)
        return self._run(q)

    async def update(self, log_id: str, flags: dict) -> RoutineLog:
        def q(db):
            row = db.get(RoutineLogRow, int(log_id))
            if not row:
                raise RecordNotFoundError(f"routine_logs: no log with id {log_id}")
            for k in ("morning_completed", "evening_completed"):
                if k in flags:
                    setattr(row, k, bool(flags[k]))
            db.commit()
            db.refresh(row)
            return RoutineLog.model_validate(row)
        return self._run(q)


class SqlAchievementStore(_SqlStore, AchievementStore):
    async def list(self, user_id: str) -> list[Achievement]:
        def q(db):
            rows = db.query(AchievementRow).filter_by(user_id=user_id)\
                     .order_by(AchievementRow.created_at.desc(), AchievementRow.id.desc()).all()
            return [Achievement.model_validate(r) for r in rows]
        return self._run(q)

    async def insert(self, user_id: str, name: str, description: str, icon: str) -> Achievement:
        def q(db):
            row = AchievementRow(user_id=user_id, name=name, description=description, icon=icon)
            db.add(row)
            db.commit()
            db.refresh(row)
            return Achievement.model_validate(row)
        return self._run(q)


class SqlProfileStore(_SqlStore, ProfileStore):
    async def get(self, user_id: str) -> Profile | None:
        def q(db):
            row = db.get(ProfileRow, user_id)
            return Profile.model_validate(row) if row else None
        return self._run(q)

    async def insert(self, user_id: str) -> Profile:
        def q(db):
            row = ProfileRow(id=user_id)
            db.add(row)
            db.commit()
            db.refresh(row)
            return Profile.model_validate(row)
        return self._run(q)

    async def update(self, user_id: str, fields: dict) -> Profile:
        def q(db):
            row = db.get(ProfileRow, user_id)
            if not row:
                raise RecordNotFoundError(f"profiles: no profile for {user_id}")
            for k, v in fields.items():
                if hasattr(row, k):
                    setattr(row, k, v)
            db.commit()
            db.refresh(row)
            return Profile.model_validate(row)
        return self._run(q)
