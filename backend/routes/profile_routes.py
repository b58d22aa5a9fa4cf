from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional

from auth import get_current_user
from deps import get_profile_service
from services.profile_service import ProfileService
from stores.base import StoreError

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    skin_type: Optional[str] = None
    skin_tone: Optional[str] = None
    morning_reminder: Optional[str] = None
    evening_reminder: Optional[str] = None
    physician_name: Optional[str] = None
    physician_phone: Optional[str] = None

@router.get("")
async def get_profile(
    user_id: str = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    try:
        return await service.get(user_id)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

@router.put("")
async def update_profile(
    profile_data: ProfileUpdate,
    user_id: str = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
):
    try:
        profile = await service.update(user_id, profile_data.model_dump(exclude_unset=True))
        return {"status": "success", "data": profile}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
