import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "catechism_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

GOOGLE_SERVICE_ACCOUNT_FILE = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE")
SHEETS_HEADER_ROW = int(os.getenv("SHEETS_HEADER_ROW", "3"))
SHEETS_TERM_START = os.getenv("SHEETS_TERM_START", "2025-09-07")

RECONCILE_MAX_WORKERS = int(os.getenv("RECONCILE_MAX_WORKERS", "8"))
RECONCILE_WINDOW_MONTHS = int(os.getenv("RECONCILE_WINDOW_MONTHS", "3"))
ATTENDANCE_ALERT_THRESHOLD = int(os.getenv("ATTENDANCE_ALERT_THRESHOLD", "3"))
EVALUATION_ALERT_THRESHOLD = int(os.getenv("EVALUATION_ALERT_THRESHOLD", "5"))
UNSYNCED_RETRY_LIMIT = int(os.getenv("UNSYNCED_RETRY_LIMIT", "50"))
