"""
supabase_store.py — Stores backed by the hosted Supabase project (PostgREST over httpx).
HTTP failures are translated into the StoreError hierarchy so services never see httpx types.
"""

from datetime import date

import httpx
from fastapi.encoders import jsonable_encoder

from schemas import RoutineLog, Achievement, Profile
from stores.base import (
    RoutineLogStore,
    AchievementStore,
    ProfileStore,
    StoreError,
    StoreUnavailableError,
    DuplicateRecordError,
    RecordNotFoundError,
)
from supabase_rest import sb_select, sb_insert, sb_update

# Postgres unique_violation
_UNIQUE_VIOLATION = "23505"


def _pg_code(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    return body.get("code") if isinstance(body, dict) else None


async def _call(table: str, coro):
    try:
        return await coro
    except httpx.HTTPStatusError as e:
        resp = e.response
        if resp.status_code == 409 or _pg_code(resp) == _UNIQUE_VIOLATION:
            raise DuplicateRecordError(f"{table}: duplicate record") from e
        if resp.status_code >= 500:
            raise StoreUnavailableError(f"{table}: server error {resp.status_code}") from e
        raise StoreError(f"{table}: request rejected ({resp.status_code})") from e
    except httpx.TransportError as e:
        # Timeouts and connection failures
        raise StoreUnavailableError(f"{table}: {e.__class__.__name__}") from e


class SupabaseRoutineLogStore(RoutineLogStore):
    table = "routine_logs"

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client

    async def list(self, user_id: str) -> list[RoutineLog]:
        rows = await _call(self.table, sb_select(
            self.table, filters={"user_id": user_id}, order="date.desc", client=self.client
        ))
        return [RoutineLog.model_validate(r) for r in rows]

    async def get(self, user_id: str, day: date) -> RoutineLog | None:
        rows = await _call(self.table, sb_select(
            self.table, filters={"user_id": user_id, "date": day.isoformat()}, client=self.client
        ))
        return RoutineLog.model_validate(rows[0]) if rows else None

    async def insert(self, user_id: str, day: date, flags: dict) -> RoutineLog:
        data = {
            "user_id": user_id,
            "date": day.isoformat(),
            "morning_completed": bool(flags.get("morning_completed", False)),
            "evening_completed": bool(flags.get("evening_completed", False)),
        }
        row = await _call(self.table, sb_insert(self.table, data, client=self.client))
        if not row:
            raise StoreError(f"{self.table}: insert returned no row")
        return RoutineLog.model_validate(row)

    async def update(self, log_id: str, flags: dict) -> RoutineLog:
        row = await _call(self.table, sb_update(self.table, {"id": log_id}, flags, client=self.client))
        if not row:
            raise RecordNotFoundError(f"{self.table}: no log with id {log_id}")
        return RoutineLog.model_validate(row)


class SupabaseAchievementStore(AchievementStore):
    table = "achievements"

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client

    async def list(self, user_id: str) -> list[Achievement]:
        rows = await _call(self.table, sb_select(
            self.table, filters={"user_id": user_id}, order="created_at.desc", client=self.client
        ))
        return [Achievement.model_validate(r) for r in rows]

    async def insert(self, user_id: str, name: str, description: str, icon: str) -> Achievement:
        data = {"user_id": user_id, "name": name, "description": description, "icon": icon}
        row = await _call(self.table, sb_insert(self.table, data, client=self.client))
        if not row:
            raise StoreError(f"{self.table}: insert returned no row")
        return Achievement.model_validate(row)


class SupabaseProfileStore(ProfileStore):
    table = "profiles"

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client

    async def get(self, user_id: str) -> Profile | None:
        rows = await _call(self.table, sb_select(self.table, filters={"id": user_id}, client=self.client))
        return Profile.model_validate(rows[0]) if rows else None

    async def insert(self, user_id: str) -> Profile:
        row = await _call(self.table, sb_insert(self.table, {"id": user_id}, client=self.client))
        if not row:
            raise StoreError(f"{self.table}: insert returned no row")
        return Profile.model_validate(row)

    async def update(self, user_id: str, fields: dict) -> Profile:
        row = await _call(self.table, sb_update(
            self.table, {"id": user_id}, jsonable_encoder(fields), client=self.client
        ))
        if not row:
            raise RecordNotFoundError(f"{self.table}: no profile for {user_id}")
        return Profile.model_validate(row)
