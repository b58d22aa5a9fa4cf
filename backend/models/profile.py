from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)  # same as the auth user id
    full_name = Column(String(200), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    skin_type = Column(String(20), nullable=True)  # normal/dry/oily/combination/sensitive
    skin_tone = Column(String(20), nullable=True)  # very_fair ... very_deep
    morning_reminder = Column(String(5), nullable=True)  # e.g., "07:30"
    evening_reminder = Column(String(5), nullable=True)
    physician_name = Column(String(200), nullable=True)
    physician_phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=True)
