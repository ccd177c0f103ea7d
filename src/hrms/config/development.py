import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrms_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", str(7 * 24 * 60 * 60)))

# Side effects (notifications, audit) run inline unless NOTIFY_ASYNC=1
NOTIFY_ASYNC = bool(int(os.getenv("NOTIFY_ASYNC", "0")))
NOTIFY_WORKERS = int(os.getenv("NOTIFY_WORKERS", "4"))

LEAVE_LOCK_TIMEOUT_SECONDS = int(os.getenv("LEAVE_LOCK_TIMEOUT_SECONDS", "10"))

COMPANY_NAME = os.getenv("COMPANY_NAME", "Your Company")
COMPANY_EMAIL = os.getenv("COMPANY_EMAIL", "hr@company.com")
COMPANY_WEBSITE = os.getenv("COMPANY_WEBSITE", "https://company.com")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
