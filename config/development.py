import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "eventflow_db"),
}

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "logs/eventflow.log")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed a demo event on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@eventflow.local")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

# Seconds between change-journal polls for open manager consoles
FEED_POLL_SECONDS = float(os.getenv("FEED_POLL_SECONDS", "1.0"))
# Seconds between refreshes of a participant's own view
SELF_VIEW_POLL_SECONDS = float(os.getenv("SELF_VIEW_POLL_SECONDS", "5.0"))
# Live views unused this long are closed; the sweep runs every VIEW_SWEEP_SECONDS
VIEW_IDLE_SECONDS = float(os.getenv("VIEW_IDLE_SECONDS", "900"))
VIEW_SWEEP_SECONDS = float(os.getenv("VIEW_SWEEP_SECONDS", "60"))

# Mark participants present/late as soon as they register
AUTO_TIME_IN_ON_REGISTRATION = bool(int(os.getenv("AUTO_TIME_IN_ON_REGISTRATION", "0")))
