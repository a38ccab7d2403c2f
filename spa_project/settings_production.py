"""
Production environment settings.
Use: DJANGO_SETTINGS_MODULE=spa_project.settings_production

- Production DB (PostgreSQL via DATABASE_URL; SQLite supported)
- DEBUG=False, SECRET_KEY from env
- Log rotation and retention (VAT records are kept for the FTA audit period)
"""

import os
from pathlib import Path

import dj_database_url

from .settings import *  # noqa: F401, F403
from .settings import LOGGING, rotating_log_handler

BASE_DIR = Path(__file__).resolve().parent.parent

# Production: never debug
DEBUG = False
SECRET_KEY = os.environ.get("SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable must be set in production")
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "").split(",")
if not ALLOWED_HOSTS or ALLOWED_HOSTS == [""]:
    raise ValueError("ALLOWED_HOSTS environment variable must be set in production")

DATABASES = {
    "default": dj_database_url.config(
        default="sqlite:///" + os.environ.get("DB_PATH", str(BASE_DIR / "db_production.sqlite3")),
        conn_max_age=600,
        ssl_require=os.environ.get("DB_SSL_REQUIRE", "false").lower() in ("1", "true", "yes"),
    )
}

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# Log retention
LOGS_DIR = Path(os.environ.get("LOGS_DIR", str(BASE_DIR / "logs")))
LOGS_DIR.mkdir(parents=True, exist_ok=True)


# VAT records are kept for the FTA audit period; error logs longest
LOGGING["handlers"]["compliance_file"] = rotating_log_handler(LOGS_DIR / "compliance.log")
LOGGING["handlers"]["compliance_json_file"] = rotating_log_handler(LOGS_DIR / "compliance_json.log", "json")
LOGGING["handlers"]["compliance_error_file"] = rotating_log_handler(
    LOGS_DIR / "compliance_error.log", level="ERROR", max_mb=5, backups=90
)
LOGGING["loggers"]["compliance"]["handlers"] = [
    "console",
    "compliance_file",
    "compliance_json_file",
    "compliance_error_file",
]
LOGGING["loggers"]["django.request"]["handlers"] = ["console", "compliance_error_file"]
