from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, UniqueConstraint
from database import Base


class RoutineLog(Base):
    __tablename__ = "routine_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)  # Supabase auth uid
    date = Column(Date, nullable=False)
    morning_completed = Column(Boolean, nullable=False, default=False)
    evening_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_routine_user_date"),
    )
