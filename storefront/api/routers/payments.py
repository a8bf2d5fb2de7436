# storefront/api/routers/payments.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.enums import PaymentStatus
from storefront.domain.schemas import ErrorOut, PaymentOut, PaymentStatusIn
from storefront.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"], responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}})


@router.patch("/{payment_id}/status", response_model=PaymentOut)
def update_payment_status(payment_id: int, payload: PaymentStatusIn, db: Session = Depends(get_db)):
    """
    Callback for the payment gateway (success/failure + transaction id).
    """
    return PaymentService(db).update_status(
        payment_id,
        PaymentStatus(payload.status),
        transaction_id=payload.transaction_id,
        gateway_data=payload.gateway_data,
    )
