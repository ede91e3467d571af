import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to this file as lockout.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "lockout.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Brute-force protection
    LOCKOUT_MAX_FAILED_ATTEMPTS = int(os.getenv("LOCKOUT_MAX_FAILED_ATTEMPTS", "10"))      # permanent lock at this many
    LOCKOUT_BACKOFF_START_ATTEMPT = int(os.getenv("LOCKOUT_BACKOFF_START_ATTEMPT", "5"))   # throttling starts here
    LOCKOUT_BACKOFF_WINDOW_SECONDS = int(os.getenv("LOCKOUT_BACKOFF_WINDOW_SECONDS", "60"))
    LOCKOUT_ATTEMPT_WINDOW_MINUTES = int(os.getenv("LOCKOUT_ATTEMPT_WINDOW_MINUTES", "15"))

    # Basic app settings
    DEBUG = False
