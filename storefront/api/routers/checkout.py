# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import CheckoutIn, ErrorOut, OrderSummaryOut
from storefront.services.checkout_service import CheckoutOrchestrator

router = APIRouter(tags=["checkout"])


def get_service(db: Session):
    return CheckoutOrchestrator(db)


@router.post(
    "/checkout",
    response_model=OrderSummaryOut,
    status_code=201,
    responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}, 409: {"model": ErrorOut}},
)
def checkout(payload: CheckoutIn, db: Session = Depends(get_db)):
    """
    Creates the order, its line items and payment from a cart,
    applying the optional voucher. The cart is emptied on success.
    """
    return get_service(db).create_order_with_payment(
        user_id=payload.user_id,
        cart_id=payload.cart_id,
        payment_method_id=payload.payment_method_id,
        total_amount=payload.total_amount,
        voucher_code=payload.voucher_code,
        final_amount=payload.final_amount,
        shipping_address=payload.shipping_address,
        notes=payload.notes,
    )
