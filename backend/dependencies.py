# dependencies.py — Process-wide service instances, exposed as FastAPI dependencies

from config import BOOKS_BACKEND, DEFAULT_THEME, SESSION_TTL_SECONDS, SUPABASE_JWT_SECRET

# Global instances, built on first use
_tables: dict = {}
_identity = None
_sessions = None
_preferences = None


def get_table(name: str):
    """The `books`, `users` or `user_settings` table for the configured backend."""
    if name not in _tables:
        from services.table_service import SqlTable, SupabaseTable

        if BOOKS_BACKEND == "supabase":
            _tables[name] = SupabaseTable(name)
        else:
            from database import SessionLocal
            from models import Book, User, UserSetting

            model = {"books": Book, "users": User, "user_settings": UserSetting}[name]
            _tables[name] = SqlTable(model, SessionLocal)
    return _tables[name]


def get_identity():
    global _identity

    if _identity is None:
        from services.identity_service import LocalIdentity, SupabaseIdentity

        if BOOKS_BACKEND == "supabase":
            _identity = SupabaseIdentity(jwt_secret=SUPABASE_JWT_SECRET)
        else:
            _identity = LocalIdentity(get_table("users"))
    return _identity


def get_sessions():
    global _sessions

    if _sessions is None:
        from services.collection_service import SessionRegistry

        _sessions = SessionRegistry(get_table("books"), ttl_seconds=SESSION_TTL_SECONDS)
    return _sessions


def get_preferences():
    global _preferences

    if _preferences is None:
        from services.preference_service import PreferenceService

        _preferences = PreferenceService(get_table("user_settings"), default_theme=DEFAULT_THEME)
    return _preferences
