# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import (
    CancelOrderIn,
    ErrorOut,
    OrderOut,
    OrderStatusIn,
    OrderWithPaymentOut,
    TrackingOut,
)
from storefront.services.checkout_service import CheckoutOrchestrator

router = APIRouter(
    prefix="/orders",
    tags=["orders"],
    responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}},
)


def get_service(db: Session):
    return CheckoutOrchestrator(db)


@router.get("/user/{user_id}", response_model=List[OrderOut])
def get_user_orders(user_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_user_orders(user_id)


@router.post("/{order_id}/cod/process", response_model=OrderOut)
def process_cod_payment(order_id: int, db: Session = Depends(get_db)):
    """
    Confirms a COD order as delivered and paid.
    """
    return get_service(db).process_cod_payment(order_id)


@router.patch("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    payload: CancelOrderIn | None = None,
    db: Session = Depends(get_db),
):
    """
    Cancels the order and restores stock, or files a cancel request
    when the shop is already preparing it.
    """
    return get_service(db).cancel_order(order_id, payload.reason if payload else None)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(order_id: int, payload: OrderStatusIn, db: Session = Depends(get_db)):
    return get_service(db).update_status(order_id, payload.status, payload.note)


@router.get("/{order_id}/details", response_model=OrderWithPaymentOut)
def get_order_details(order_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_order_with_payment(order_id)


@router.get("/{order_id}/tracking", response_model=List[TrackingOut])
def get_order_tracking(order_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_tracking(order_id)
