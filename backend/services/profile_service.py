"""
profile_service.py — Skin profile & reminder settings
Profiles are created empty the first time they are read.
"""

import logging
import re
from datetime import datetime, timezone

from schemas import Profile, SkinType, SkinTone
from stores.base import ProfileStore, DuplicateRecordError, RecordNotFoundError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "full_name",
    "avatar_url",
    "skin_type",
    "skin_tone",
    "morning_reminder",
    "evening_reminder",
    "physician_name",
    "physician_phone",
)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ProfileService:
    def __init__(self, store: ProfileStore):
        self.store = store

    async def get(self, user_id: str) -> Profile:
        profile = await self.store.get(user_id)
        if profile is not None:
            return profile
        try:
            logger.info(f"Creating profile for {user_id}")
            return await self.store.insert(user_id)
        except DuplicateRecordError:
            # Created by a parallel request
            profile = await self.store.get(user_id)
            if profile is None:
                raise RecordNotFoundError(f"profiles: no profile for {user_id}")
            return profile

    @staticmethod
    def clean(data: dict) -> dict:
        """Keep editable fields, normalise enums and validate reminder times (ValueError on bad input)."""
        fields = {}
        for k, v in data.items():
            if k not in EDITABLE_FIELDS:
                continue
            if v in ("", None):
                fields[k] = None
            elif k == "skin_type":
                fields[k] = SkinType(v).value
            elif k == "skin_tone":
                fields[k] = SkinTone(v).value
            elif k.endswith("_reminder"):
                if not _TIME_RE.match(str(v)):
                    raise ValueError(f"{k} must be HH:MM, got {v!r}")
                fields[k] = str(v)
            else:
                fields[k] = v
        return fields

    async def update(self, user_id: str, data: dict) -> Profile:
        fields = self.clean(data)
        await self.get(user_id)
        fields["updated_at"] = datetime.now(timezone.utc)
        return await self.store.update(user_id, fields)
