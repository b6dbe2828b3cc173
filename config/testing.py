import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "catechism_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

GOOGLE_SERVICE_ACCOUNT_FILE = None
SHEETS_HEADER_ROW = 3
SHEETS_TERM_START = "2025-09-07"

RECONCILE_MAX_WORKERS = 4
RECONCILE_WINDOW_MONTHS = 3
ATTENDANCE_ALERT_THRESHOLD = 3
EVALUATION_ALERT_THRESHOLD = 5
UNSYNCED_RETRY_LIMIT = 50
