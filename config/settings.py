"""
GATE – Django Settings (Infrastructure Only)
=============================================
Django hosts the ORM stores and configuration. The access engines do
not depend on Django; only core.access_store does.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("GATE_SECRET_KEY", "gate-dev-key-replace-before-deployment")

DEBUG = os.environ.get("GATE_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── GATE Modules ─────────────────────────────────────
    "core.access_store",
]

# ── Database ──────────────────────────────────────────────────
# SQLite by default. GATE_DB_PATH overrides the file location.
# IMMEDIATE transactions take the write lock at BEGIN, so concurrent
# writers wait on `timeout` instead of failing on lock upgrade.
# The test database is a file so worker threads share it.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("GATE_DB_PATH", str(BASE_DIR / "db.sqlite3")),
        "OPTIONS": {
            "transaction_mode": "IMMEDIATE",
            "timeout": 20,
        },
        "TEST": {
            "NAME": os.environ.get("GATE_TEST_DB_PATH", str(BASE_DIR / "test_gate.sqlite3")),
        },
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Access Engine Tunables ───────────────────────────────────
# Read by core.config.load_engine_config(). Unknown keys are rejected.
GATE_ACCESS = {
    "PIN_LENGTH": 6,
    "PIN_COLLISION_RETRIES": 10,
    "QR_TOKEN_BYTES": 24,
    "MAX_USAGE_LIMIT": 50,
    "CAS_RETRY_ATTEMPTS": 3,
    "ASYNC_NOTIFICATIONS": True,
    "ACCESS_LOG_CAPACITY": 10_000,
}

# ── Logging ──────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "gate": {
            "handlers": ["console"],
            "level": os.environ.get("GATE_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
