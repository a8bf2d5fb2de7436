# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "storefront.tasks.auto_confirm",
    "storefront.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "auto-confirm-orders-every-minute": {
        "task": "storefront.tasks.auto_confirm.auto_confirm_orders_task",
        "schedule": 60.0,
    },
}

celery_app.conf.timezone = "UTC"
