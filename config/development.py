import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "catechism_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Google Sheets mirror
GOOGLE_SERVICE_ACCOUNT_FILE = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE", "credentials.json")
SHEETS_HEADER_ROW = int(os.getenv("SHEETS_HEADER_ROW", "3"))
SHEETS_TERM_START = os.getenv("SHEETS_TERM_START", "2025-09-07")

# Reconciliation
RECONCILE_MAX_WORKERS = int(os.getenv("RECONCILE_MAX_WORKERS", "8"))
RECONCILE_WINDOW_MONTHS = int(os.getenv("RECONCILE_WINDOW_MONTHS", "3"))
ATTENDANCE_ALERT_THRESHOLD = int(os.getenv("ATTENDANCE_ALERT_THRESHOLD", "3"))
EVALUATION_ALERT_THRESHOLD = int(os.getenv("EVALUATION_ALERT_THRESHOLD", "5"))
UNSYNCED_RETRY_LIMIT = int(os.getenv("UNSYNCED_RETRY_LIMIT", "50"))
