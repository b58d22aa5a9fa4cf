"""
schemas.py — Plain records passed between stores, services and routes.
Stores return these regardless of backend so the streak engine never sees ORM rows or raw JSON.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DateStatus(str, Enum):
    NONE = "none"
    MORNING = "morning"
    EVENING = "evening"
    BOTH = "both"


class RoutineType(str, Enum):
    MORNING = "morning"
    EVENING = "evening"

    @property
    def column(self) -> str:
        return f"{self.value}_completed"


class AchievementIcon(str, Enum):
    CHECK = "check"
    STAR = "star"
    AWARD = "award"
    TROPHY = "trophy"


class SkinType(str, Enum):
    NORMAL = "normal"
    DRY = "dry"
    OILY = "oily"
    COMBINATION = "combination"
    SENSITIVE = "sensitive"


class SkinTone(str, Enum):
    VERY_FAIR = "very_fair"
    FAIR = "fair"
    MEDIUM = "medium"
    OLIVE = "olive"
    TAN = "tan"
    DEEP = "deep"
    VERY_DEEP = "very_deep"


class RoutineLog(BaseModel):
    model_config = ConfigDict(from_attributes=True, coerce_numbers_to_str=True)

    id: str
    user_id: str = Field(min_length=1)
    date: date
    morning_completed: bool = False
    evening_completed: bool = False
    created_at: Optional[datetime] = None

    def is_completed(self, routine: RoutineType) -> bool:
        return getattr(self, routine.column)


class Achievement(BaseModel):
    model_config = ConfigDict(from_attributes=True, coerce_numbers_to_str=True)

    id: str
    user_id: str
    name: str
    description: str
    icon: AchievementIcon
    created_at: Optional[datetime] = None


class Profile(BaseModel):
    model_config = ConfigDict(from_attributes=True, coerce_numbers_to_str=True)

    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    skin_type: Optional[SkinType] = None
    skin_tone: Optional[SkinTone] = None
    morning_reminder: Optional[str] = None
    evening_reminder: Optional[str] = None
    physician_name: Optional[str] = None
    physician_phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Notice(BaseModel):
    """A non-blocking message for the UI (rendered as a toast)."""

    title: str
    description: str
    variant: str = "default"  # default / destructive


class StreakSummary(BaseModel):
    status_by_date: dict[str, DateStatus] = Field(default_factory=dict)
    current_streak: int = 0
    longest_streak: int = 0


class CompletionSummary(BaseModel):
    morning: int = 0
    evening: int = 0
    both: int = 0
    active_days: int = 0


class RoutineSnapshot(StreakSummary):
    user_id: str
    today: date
    logs: list[RoutineLog] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)
    new_achievements: list[Achievement] = Field(default_factory=list)
    notices: list[Notice] = Field(default_factory=list)


class ToggleResult(BaseModel):
    success: bool
    log: Optional[RoutineLog] = None
    snapshot: RoutineSnapshot
    notice: Notice
