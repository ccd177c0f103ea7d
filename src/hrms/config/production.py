import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrms_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", str(24 * 60 * 60)))

NOTIFY_ASYNC = bool(int(os.getenv("NOTIFY_ASYNC", "1")))
NOTIFY_WORKERS = int(os.getenv("NOTIFY_WORKERS", "4"))

LEAVE_LOCK_TIMEOUT_SECONDS = int(os.getenv("LEAVE_LOCK_TIMEOUT_SECONDS", "10"))

COMPANY_NAME = os.getenv("COMPANY_NAME", "Your Company")
COMPANY_EMAIL = os.getenv("COMPANY_EMAIL", "hr@company.com")
COMPANY_WEBSITE = os.getenv("COMPANY_WEBSITE", "https://company.com")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
