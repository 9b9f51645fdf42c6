# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.book import Book
from models.user_setting import UserSetting

__all__ = [
    "User",
    "Book",
    "UserSetting",
]
