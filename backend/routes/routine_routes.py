from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from auth import get_current_user
from deps import get_routine_service
from schemas import RoutineType, DateStatus
from services import streak_engine
from services.routine_service import RoutineService, RoutineEditRejected

router = APIRouter(prefix="/api/v1/routines", tags=["Routines"])


class RoutineToggle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    routine: RoutineType
    day: Optional[date] = Field(None, alias="date")  # defaults to today


@router.get("")
async def get_routines(
    user_id: str = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return await service.refresh(user_id)


@router.get("/calendar")
async def get_calendar(
    year: Optional[int] = Query(None, ge=1970, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    selected: Optional[date] = None,
    user_id: str = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    snapshot = await service.refresh(user_id)
    today = snapshot.today
    year = year or today.year
    month = month or today.month
    selected = selected or today

    index = streak_engine.StatusIndex(snapshot.logs)
    status = index.status_for(selected)
    return {
        "year": year,
        "month": month,
        "today": today,
        "days": streak_engine.month_statuses(index, year, month),
        "selected": {
            "date": selected,
            "status": status,
            "morning_completed": status in (DateStatus.MORNING, DateStatus.BOTH),
            "evening_completed": status in (DateStatus.EVENING, DateStatus.BOTH),
        },
        "current_streak": snapshot.current_streak,
        "longest_streak": snapshot.longest_streak,
        "notices": snapshot.notices,
    }


@router.post("/toggle")
async def toggle_routine(
    body: RoutineToggle,
    user_id: str = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    try:
        result = await service.toggle(user_id, body.day, body.routine)
    except RoutineEditRejected as e:
        raise HTTPException(status_code=400, detail=e.notice.model_dump())

    if not result.success:
        raise HTTPException(status_code=503, detail=result.notice.model_dump())
    return result


@router.get("/stats")
async def routine_stats(
    start: Optional[date] = None,
    end: Optional[date] = None,
    user_id: str = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    if start and end and start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    snapshot = await service.refresh(user_id)
    return {
        "summary": streak_engine.completion_summary(snapshot.logs, start, end),
        "current_streak": snapshot.current_streak,
        "longest_streak": snapshot.longest_streak,
    }


@router.get("/achievements")
async def list_achievements(
    user_id: str = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    snapshot = await service.refresh(user_id)
    names = [a.name for a in snapshot.achievements]
    return {
        "achievements": snapshot.achievements,
        "new_achievements": snapshot.new_achievements,
        "milestones": service.evaluator.progress(snapshot.current_streak, names),
        "current_streak": snapshot.current_streak,
    }
