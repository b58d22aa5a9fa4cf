import os
from dotenv import load_dotenv

load_dotenv()

# --- Supabase Configuration ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "").rstrip("/")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

# --- JWT Configuration (tokens are issued by Supabase Auth) ---
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")

# --- Database ---
# Local SQLite when no hosted project is configured
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/skincare.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# auto / supabase / sql
STORE_BACKEND = os.getenv("STORE_BACKEND", "auto").lower()

# --- Routines ---
# "any": any date up to today may be toggled, "today": only today
ROUTINE_EDIT_POLICY = os.getenv("ROUTINE_EDIT_POLICY", "any").lower()
STREAK_LOOKBACK_DAYS = int(os.getenv("STREAK_LOOKBACK_DAYS", "30"))
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")
# Last good snapshot per user, served on read failures
SNAPSHOT_TTL_SECONDS = float(os.getenv("SNAPSHOT_TTL_SECONDS", "3600"))
SNAPSHOT_CACHE_SIZE = int(os.getenv("SNAPSHOT_CACHE_SIZE", "1000"))

# --- Misc ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
