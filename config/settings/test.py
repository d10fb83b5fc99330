# config/settings/test.py
from .base import *  # noqa

DEBUG = False

# SQLite keeps the suite self-contained. Row locks (SELECT ... FOR UPDATE) are a
# no-op there, so the concurrency tests only run with TEST_DB_ENGINE=postgres.
if os.getenv("TEST_DB_ENGINE", "sqlite").lower() != "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Inline writes so tests can assert on persisted audit rows.
AUDIT_EMITTER = "hospital_core.audit.emitters.SynchronousAuditEmitter"

LOGGING["handlers"]["console"]["formatter"] = "verbose"
LOGGING["root"]["level"] = "WARNING"
LOGGING["loggers"]["hospital_core"]["level"] = "WARNING"
