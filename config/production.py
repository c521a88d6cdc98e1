import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "smart_attendance"),
}

REMOTE_DB_CONFIG = (
    {
        "host": os.getenv("REMOTE_DB_HOST"),
        "port": int(os.getenv("REMOTE_DB_PORT", "3306")),
        "user": os.getenv("REMOTE_DB_USER", "root"),
        "password": os.getenv("REMOTE_DB_PASSWORD", ""),
        "database": os.getenv("REMOTE_DB_NAME", "smart_attendance"),
    }
    if os.getenv("REMOTE_DB_HOST")
    else None
)

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOCATION_TIMEOUT_SECONDS = float(os.getenv("LOCATION_TIMEOUT_SECONDS", "10"))
# Kept short: a record lookup that misses locally waits on this while offline.
REMOTE_CONNECT_TIMEOUT_SECONDS = int(os.getenv("REMOTE_CONNECT_TIMEOUT_SECONDS", "3"))
SYNC_ENABLED = bool(int(os.getenv("SYNC_ENABLED", "1")))
SYNC_INTERVAL_SECONDS = float(os.getenv("SYNC_INTERVAL_SECONDS", "900"))
