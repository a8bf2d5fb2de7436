# storefront/tasks/auto_confirm.py
from datetime import datetime, timezone, timedelta

from sqlalchemy.orm import Session

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.domain.enums import OrderStatus
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger
from storefront.utils.settings import ORDER_AUTO_CONFIRM_MINUTES

logger = get_logger(__name__)


def auto_confirm_orders(db: Session, now: datetime | None = None) -> int:
    """NEW orders nobody touched for ORDER_AUTO_CONFIRM_MINUTES become CONFIRMED."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(minutes=ORDER_AUTO_CONFIRM_MINUTES)
    repo = OrderRepo(db)

    confirmed = 0
    for order_id in repo.find_stale_ids(OrderStatus.NEW.value, cutoff):
        # conditional, a cancellation that got there first wins
        if repo.update_status_if(order_id, OrderStatus.NEW.value, OrderStatus.CONFIRMED.value):
            repo.add_tracking(order_id, OrderStatus.CONFIRMED.value, "Confirmed automatically")
            confirmed += 1
    db.commit()

    logger.info(f"Auto-confirmed {confirmed} order(s) older than {cutoff.isoformat()}")
    return confirmed


@celery_app.task(name="storefront.tasks.auto_confirm.auto_confirm_orders_task")
def auto_confirm_orders_task():
    logger.info("Auto-confirm orders task started")

    db = SessionLocal()
    try:
        return auto_confirm_orders(db)
    finally:
        db.close()
