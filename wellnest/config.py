import os
from dotenv import load_dotenv

load_dotenv()

# --- AI API Keys (comma-separated for rotation) ---
GEMINI_API_KEYS = [k.strip() for k in os.getenv("GEMINI_API_KEYS", "").split(",") if k.strip()]
GROQ_API_KEYS = [k.strip() for k in os.getenv("GROQ_API_KEYS", "").split(",") if k.strip()]
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))

# --- Identity provider (tokens are issued externally, we only verify them) ---
IDENTITY_JWT_SECRET = os.getenv("IDENTITY_JWT_SECRET", "change-this-secret-key")
IDENTITY_JWT_ALGORITHM = os.getenv("IDENTITY_JWT_ALGORITHM", "HS256")
IDENTITY_JWT_AUDIENCE = os.getenv("IDENTITY_JWT_AUDIENCE") or None

# --- Database ---
# Default to local SQLite, but prefer environment variable
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/wellnest.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- HTTP ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# --- Ledger limits ---
SEARCH_LIMIT_MAX = int(os.getenv("SEARCH_LIMIT_MAX", "200"))
RECENT_DAYS_MAX = int(os.getenv("RECENT_DAYS_MAX", "60"))
SESSION_MINUTES_MAX = int(os.getenv("SESSION_MINUTES_MAX", str(24 * 60)))
