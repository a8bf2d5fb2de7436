# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Publishes order events for the notification side (email, websocket).
    Delivery happens in Celery workers; callers only enqueue, and only
    after their transaction has committed.
    """

    @staticmethod
    def send_order_created(user_id: int, order_id: int):
        send_order_event_task.delay(user_id, order_id, "ORDER_CREATED")

    @staticmethod
    def send_order_cancelled(user_id: int, order_id: int, status: str):
        # CANCELED or CANCEL_REQUEST
        send_order_event_task.delay(user_id, order_id, f"ORDER_{status}")

    @staticmethod
    def send_order_status_changed(user_id: int, order_id: int, status: str):
        send_order_event_task.delay(user_id, order_id, f"ORDER_STATUS_{status}")

    @staticmethod
    def send_payment_received(user_id: int, order_id: int):
        send_order_event_task.delay(user_id, order_id, "PAYMENT_RECEIVED")


@celery_app.task(name="storefront.services.notification_service.send_order_event_task")
def send_order_event_task(user_id: int, order_id: int, event: str):
    """
    Celery task - the delivery channels live outside this service,
    here the event is only logged and acknowledged.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} -> {event}")

    return {"user_id": user_id, "order_id": order_id, "event": event, "status": "sent"}


def publish(send, *args):
    """
    Calls a notifier method after the transaction has committed.
    A broker outage is logged and never turned into a failed request.
    """
    try:
        send(*args)
    except Exception as e:
        logger.warning(f"Failed to publish {getattr(send, '__name__', send)} {args}: {e}")
