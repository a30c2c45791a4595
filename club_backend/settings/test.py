"""
Test settings for the club membership backend.

Runs against SQLite, executes Celery tasks eagerly and relaxes throttling
so the API tests are hermetic.
"""
import tempfile

from .base import *  # noqa

DEBUG = False
SECRET_KEY = "test-secret-key-not-for-production-use-0123456789"

# File-backed so threads in transactional tests get their own connections;
# IMMEDIATE makes concurrent writers wait on the lock instead of failing.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.path.join(tempfile.gettempdir(), "club_backend.sqlite3"),  # noqa: F405
        "TEST": {"NAME": os.path.join(tempfile.gettempdir(), "club_backend_test.sqlite3")},  # noqa: F405
        "OPTIONS": {"timeout": 20, "transaction_mode": "IMMEDIATE"},
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

REST_FRAMEWORK = {**REST_FRAMEWORK, "DEFAULT_THROTTLE_CLASSES": []}  # noqa: F405

PAYMENT_WEBHOOK_TOKEN = "test-webhook-token"

# App loggers propagate to the root logger so pytest's caplog sees them.
LOGGING = {  # noqa: F405
    **LOGGING,  # noqa: F405
    "loggers": {
        name: {**config, "handlers": [], "propagate": True}
        for name, config in LOGGING["loggers"].items()  # noqa: F405
    },
}
