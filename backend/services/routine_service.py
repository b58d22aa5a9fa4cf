"""
routine_service.py — Morning / evening routine tracking
Toggles a day's routine flags and runs the single refetch-and-recompute pass
(logs + achievements → statuses, streaks, milestone unlocks) that every view reads.
"""

import asyncio
import logging
import time
from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

from config import (
    APP_TIMEZONE,
    ROUTINE_EDIT_POLICY,
    STREAK_LOOKBACK_DAYS,
    SNAPSHOT_TTL_SECONDS,
    SNAPSHOT_CACHE_SIZE,
)
from schemas import RoutineLog, RoutineType, RoutineSnapshot, ToggleResult, Notice
from services import streak_engine
from services.achievement_service import AchievementEvaluator
from stores.base import RoutineLogStore, AchievementStore, StoreError, DuplicateRecordError

logger = logging.getLogger(__name__)

EDIT_POLICIES = ("any", "today")


class RoutineEditRejected(Exception):
    """The requested date may not be edited under the current policy."""

    def __init__(self, notice: Notice):
        super().__init__(notice.description)
        self.notice = notice


def _local_today() -> date:
    return datetime.now(ZoneInfo(APP_TIMEZONE)).date()


class RoutineService:
    def __init__(
        self,
        log_store: RoutineLogStore,
        achievement_store: AchievementStore,
        evaluator: AchievementEvaluator | None = None,
        edit_policy: str = ROUTINE_EDIT_POLICY,
        lookback_days: int = STREAK_LOOKBACK_DAYS,
        clock: Callable[[], date] = _local_today,
        snapshot_ttl: float = SNAPSHOT_TTL_SECONDS,
        max_snapshots: int = SNAPSHOT_CACHE_SIZE,
        timer: Callable[[], float] = time.time,
    ):
        if edit_policy not in EDIT_POLICIES:
            raise ValueError(f"Unknown routine edit policy: {edit_policy!r}")
        self.log_store = log_store
        self.achievement_store = achievement_store
        self.evaluator = evaluator or AchievementEvaluator(achievement_store)
        self.edit_policy = edit_policy
        self.lookback_days = lookback_days
        self.clock = clock
        self.snapshot_ttl = snapshot_ttl
        self.max_snapshots = max_snapshots
        self.timer = timer
        # user_id → {snapshot, timestamp}; last good state, served when the store is unreachable.
        # Oldest entries first, so the front of the dict is evicted when full.
        self._snapshots: dict[str, dict] = {}

    def today(self) -> date:
        return self.clock()

    def last_snapshot(self, user_id: str) -> RoutineSnapshot:
        """Copy of the last good snapshot, without its one-off unlocks and notices."""
        entry = self._snapshots.get(user_id)
        if entry is not None and self.timer() - entry["timestamp"] > self.snapshot_ttl:
            del self._snapshots[user_id]
            entry = None
        if entry is None:
            return RoutineSnapshot(user_id=user_id, today=self.today())
        return entry["snapshot"].model_copy(update={"new_achievements": [], "notices": []}, deep=True)

    def _remember(self, user_id: str, snapshot: RoutineSnapshot):
        self._snapshots.pop(user_id, None)
        self._snapshots[user_id] = {"snapshot": snapshot, "timestamp": self.timer()}
        while len(self._snapshots) > self.max_snapshots:
            del self._snapshots[next(iter(self._snapshots))]

    # ------------------------------------------------------------------
    async def refresh(self, user_id: str) -> RoutineSnapshot:
        """Reload logs and achievements, recompute streaks and unlock milestones."""
        today = self.today()
        logs_res, achievements_res = await asyncio.gather(
            self.log_store.list(user_id),
            self.achievement_store.list(user_id),
            return_exceptions=True,
        )

        if isinstance(logs_res, BaseException):
            if not isinstance(logs_res, StoreError):
                raise logs_res
            logger.error(f"Error fetching routine logs for {user_id}: {logs_res}")
            prior = self.last_snapshot(user_id)
            prior.notices = [Notice(title="Error", description="Failed to load routine data", variant="destructive")]
            return prior

        summary = streak_engine.evaluate(logs_res, today, self.lookback_days)
        snapshot = RoutineSnapshot(
            user_id=user_id,
            today=today,
            logs=logs_res,
            **summary.model_dump(),
        )

        if isinstance(achievements_res, BaseException):
            if not isinstance(achievements_res, StoreError):
                raise achievements_res
            # Without the unlocked set a milestone could be created twice; skip this pass.
            logger.error(f"Error fetching achievements for {user_id}: {achievements_res}")
            snapshot.achievements = self.last_snapshot(user_id).achievements
        else:
            snapshot.achievements = achievements_res
            result = await self.evaluator.evaluate(
                user_id, snapshot.current_streak, (a.name for a in achievements_res)
            )
            if result.unlocked:
                snapshot.new_achievements = result.unlocked
                snapshot.achievements = list(reversed(result.unlocked)) + achievements_res
                for a in result.unlocked:
                    snapshot.notices.append(Notice(title="Achievement Unlocked!", description=a.name))
            if result.failures:
                snapshot.notices.append(Notice(
                    title="Error",
                    description="Failed to save achievement: " + ", ".join(result.failures),
                    variant="destructive",
                ))

        self._remember(user_id, snapshot)
        return snapshot

    # ------------------------------------------------------------------
    def check_editable(self, target: date):
        today = self.today()
        if target > today:
            raise RoutineEditRejected(Notice(
                title="Cannot update future days",
                description="Routines can only be marked once the day has started",
                variant="destructive",
            ))
        if self.edit_policy == "today" and target != today:
            raise RoutineEditRejected(Notice(
                title="Cannot update past days",
                description="You can only mark routines for today",
                variant="destructive",
            ))

    async def _flip(self, user_id: str, target: date, routine: RoutineType) -> RoutineLog:
        """Create-or-flip. Read-modify-write without locking: concurrent toggles are last-write-wins."""
        column = routine.column
        existing = await self.log_store.get(user_id, target)
        if existing is None:
            try:
                return await self.log_store.insert(user_id, target, {
                    "morning_completed": routine is RoutineType.MORNING,
                    "evening_completed": routine is RoutineType.EVENING,
                })
            except DuplicateRecordError:
                logger.warning(f"Routine log for {user_id} on {target} created concurrently; retrying as update")
                existing = await self.log_store.get(user_id, target)
                if existing is None:
                    raise
        return await self.log_store.update(existing.id, {column: not getattr(existing, column)})

    async def toggle(self, user_id: str, target: date | None, routine: RoutineType) -> ToggleResult:
        """
        Flip one routine flag for one day.

        Raises RoutineEditRejected when the date is outside the edit policy.
        Store failures leave state untouched and come back as success=False.
        """
        target = target or self.today()
        self.check_editable(target)

        try:
            log = await self._flip(user_id, target, routine)
        except StoreError as e:
            logger.error(f"Error updating {routine.value} routine for {user_id} on {target}: {e}")
            return ToggleResult(
                success=False,
                snapshot=self.last_snapshot(user_id),
                notice=Notice(title="Error", description="Failed to update routine", variant="destructive"),
            )

        snapshot = await self.refresh(user_id)
        done = log.is_completed(routine)
        return ToggleResult(
            success=True,
            log=log,
            snapshot=snapshot,
            notice=Notice(
                title="Routine updated",
                description=f"Your {routine.value} routine has been marked as {'completed' if done else 'not completed'}!",
            ),
        )
