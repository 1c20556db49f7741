import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gym.db")

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")

# ✅ Subscription accounting
EXPIRING_SOON_DAYS = int(os.getenv("EXPIRING_SOON_DAYS", "7"))
RECONCILE_INTERVAL_SEC = int(os.getenv("RECONCILE_INTERVAL_SEC", "0"))  # 0 disables the in-process loop

# ✅ Public registration
REGISTRATION_RATE_LIMIT = int(os.getenv("REGISTRATION_RATE_LIMIT", "10"))
REGISTRATION_RATE_WINDOW_SEC = int(os.getenv("REGISTRATION_RATE_WINDOW_SEC", "60"))

# ✅ Dashboard
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))

# ✅ CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]
