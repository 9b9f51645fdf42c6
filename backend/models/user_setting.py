from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from database import Base


class UserSetting(Base):
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), unique=True, nullable=False)
    theme = Column(String(10), nullable=False, default="light")  # light/dark
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
