from celery import Celery
import os

# Celery configuration
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/1")

celery_app = Celery(
    "vaultshare",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["vaultshare.cleanup"],
)

celery_app.conf.beat_schedule = {
    # Every 10 minutes remove bytes left behind by soft-deleted files
    "purge-deleted-objects": {
        "task": "vaultshare.cleanup.purge_deleted_objects",
        "schedule": 600.0,
    },
}
