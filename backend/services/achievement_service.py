"""
achievement_service.py — Streak milestones
Unlocks one-time achievements when the current streak crosses a milestone.
Each milestone is persisted on its own so one failed insert never blocks the rest.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable

from schemas import Achievement, AchievementIcon
from stores.base import AchievementStore, StoreError, DuplicateRecordError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Milestone:
    days: int
    name: str
    description: str
    icon: AchievementIcon


STREAK_MILESTONES = [
    Milestone(3, "Getting Started", "Completed routines for 3 days in a row", AchievementIcon.CHECK),
    Milestone(7, "One Week Wonder", "Completed routines for a full week", AchievementIcon.STAR),
    Milestone(14, "Consistency Champion", "Two weeks of dedicated skincare", AchievementIcon.AWARD),
    Milestone(30, "Skincare Master", "A full month of perfect routines", AchievementIcon.TROPHY),
]

UnlockListener = Callable[[Achievement], Awaitable[None] | None]


@dataclass
class EvaluationResult:
    unlocked: list[Achievement] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)  # milestone names that could not be saved


class AchievementEvaluator:
    """Decide which milestone achievements are newly earned and persist them."""

    def __init__(self, store: AchievementStore, milestones: list[Milestone] | None = None):
        self.store = store
        self.milestones = sorted(STREAK_MILESTONES if milestones is None else milestones, key=lambda m: m.days)
        self._listeners: list[UnlockListener] = []

    def add_listener(self, listener: UnlockListener):
        self._listeners.append(listener)

    async def _emit(self, achievement: Achievement):
        for listener in self._listeners:
            try:
                result = listener(achievement)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Unlock listener failed for {achievement.name!r}")

    async def evaluate(self, user_id: str, current_streak: int, unlocked_names: Iterable[str]) -> EvaluationResult:
        result = EvaluationResult()
        have = set(unlocked_names)

        for milestone in self.milestones:
            if current_streak < milestone.days or milestone.name in have:
                continue
            try:
                achievement = await self.store.insert(
                    user_id, milestone.name, milestone.description, milestone.icon.value
                )
            except DuplicateRecordError:
                # Another request unlocked it first
                have.add(milestone.name)
                continue
            except StoreError as e:
                logger.error(f"Error creating achievement {milestone.name!r} for {user_id}: {e}")
                result.failures.append(milestone.name)
                continue

            have.add(milestone.name)
            result.unlocked.append(achievement)
            logger.info(f"Achievement unlocked for {user_id}: {milestone.name} ({current_streak} day streak)")
            await self._emit(achievement)

        return result

    def progress(self, current_streak: int, unlocked_names: Iterable[str]) -> list[dict]:
        """Milestone table with unlock state, for display."""
        have = set(unlocked_names)
        return [
            {
                "days": m.days,
                "name": m.name,
                "description": m.description,
                "icon": m.icon.value,
                "unlocked": m.name in have,
                "remaining_days": max(0, m.days - current_streak),
            }
            for m in self.milestones
        ]
