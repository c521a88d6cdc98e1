import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "smart_attendance_test"),
}

REMOTE_DB_CONFIG = None

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOCATION_TIMEOUT_SECONDS = 1.0
REMOTE_CONNECT_TIMEOUT_SECONDS = 1
SYNC_ENABLED = False
SYNC_INTERVAL_SECONDS = 60.0
