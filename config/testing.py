import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "eventflow_test"),
}

DEBUG = False
TESTING = True

LOG_LEVEL = "DEBUG"
LOG_FILE = None

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ADMIN_EMAIL = None
ADMIN_PASSWORD = None

FEED_POLL_SECONDS = 0.1
SELF_VIEW_POLL_SECONDS = 0.1
VIEW_IDLE_SECONDS = 60.0
VIEW_SWEEP_SECONDS = 1.0

AUTO_TIME_IN_ON_REGISTRATION = False
