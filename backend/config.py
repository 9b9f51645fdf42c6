import os
from dotenv import load_dotenv

load_dotenv()

# --- Application ---
APP_NAME = os.getenv("APP_NAME", "Reading List")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Storage backend ---
# "sql" keeps books/users in DATABASE_URL, "supabase" talks to PostgREST + Supabase Auth
BOOKS_BACKEND = os.getenv("BOOKS_BACKEND", "sql").strip().lower()

# --- JWT Configuration (local identity provider) ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "168"))  # 7 days

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/reading_list.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Supabase Configuration ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))

# --- Presentation preferences ---
DEFAULT_THEME = os.getenv("DEFAULT_THEME", "light")

# --- Reading-list sessions ---
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "1800"))  # idle sessions dropped after 30 min
