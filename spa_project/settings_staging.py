"""
Staging environment settings.
Use: DJANGO_SETTINGS_MODULE=spa_project.settings_staging

FTA certification runs happen here: test data is imported into the staging
database and exported as FAF for submission. Never import test data in production.
"""

import os
from pathlib import Path

import dj_database_url

from .settings import *  # noqa: F401, F403
from .settings import LOGGING, rotating_log_handler

BASE_DIR = Path(__file__).resolve().parent.parent

DEBUG = os.environ.get("DEBUG", "false").lower() in ("1", "true", "yes")
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1,staging.example.com").split(",")

DATABASES = {
    "default": dj_database_url.config(default="sqlite:///" + str(BASE_DIR / "db_staging.sqlite3")),
}

FTA_TEST_DATA_NOTES = os.environ.get("FTA_TEST_DATA_NOTES", "FTA Test Data (staging)")

LOGS_DIR = BASE_DIR / "logs"
LOGS_DIR.mkdir(exist_ok=True)

LOGGING["handlers"]["compliance_file"] = rotating_log_handler(LOGS_DIR / "compliance.log")
LOGGING["handlers"]["compliance_json_file"] = rotating_log_handler(LOGS_DIR / "compliance_json.log", "json")
LOGGING["loggers"]["compliance"]["handlers"] = ["console", "compliance_file", "compliance_json_file"]
