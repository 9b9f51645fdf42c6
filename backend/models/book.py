import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Date, DateTime
from database import Base


class Book(Base):
    __tablename__ = "books"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    title = Column(String(300), nullable=False)
    author = Column(String(200), nullable=False, default="")
    status = Column(String(20), nullable=False, default="To-Read")  # To-Read/Currently Reading/Finished/Did Not Finish
    notes = Column(Text, nullable=False, default="")
    start_date = Column(Date, nullable=True)
    finish_date = Column(Date, nullable=True)
    rating = Column(Integer, nullable=True)  # 1-5
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
