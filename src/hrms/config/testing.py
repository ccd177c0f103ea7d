import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrms_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

TOKEN_MAX_AGE_SECONDS = 3600

NOTIFY_ASYNC = False
NOTIFY_WORKERS = 1

LEAVE_LOCK_TIMEOUT_SECONDS = 1

COMPANY_NAME = "Test Company"
COMPANY_EMAIL = "hr@test.local"
COMPANY_WEBSITE = "https://test.local"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
