# storefront/api/routers/vouchers.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import (
    ApplyVoucherIn,
    ErrorOut,
    ValidateVoucherIn,
    VoucherCreateIn,
    VoucherOut,
    VoucherResultOut,
    VoucherUpdateIn,
)
from storefront.services.voucher_engine import VoucherEngine
from storefront.services.voucher_service import VoucherService

router = APIRouter(
    prefix="/vouchers",
    tags=["vouchers"],
    responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}},
)


@router.post("/apply", response_model=VoucherResultOut)
def apply_voucher(payload: ApplyVoucherIn, db: Session = Depends(get_db)):
    """Preview only, usage is not recorded."""
    return VoucherEngine(db).apply(payload.code, payload.order_amount)


@router.post("/validate-user", response_model=VoucherResultOut)
def validate_voucher_for_user(payload: ValidateVoucherIn, db: Session = Depends(get_db)):
    return VoucherEngine(db).validate(payload.code, payload.user_id, payload.order_amount)


# back-office

@router.post("/", response_model=VoucherOut, status_code=201)
def create_voucher(payload: VoucherCreateIn, db: Session = Depends(get_db)):
    return VoucherService(db).create(payload.model_dump())


@router.get("/", response_model=List[VoucherOut])
def list_vouchers(db: Session = Depends(get_db)):
    return VoucherService(db).list_vouchers()


@router.put("/{voucher_id}", response_model=VoucherOut)
def update_voucher(voucher_id: int, payload: VoucherUpdateIn, db: Session = Depends(get_db)):
    return VoucherService(db).update(voucher_id, payload.model_dump(exclude_unset=True))


@router.delete("/{voucher_id}", status_code=204)
def deactivate_voucher(voucher_id: int, db: Session = Depends(get_db)):
    VoucherService(db).deactivate(voucher_id)


@router.delete("/{voucher_id}/hard", status_code=204)
def delete_voucher(voucher_id: int, db: Session = Depends(get_db)):
    VoucherService(db).hard_delete(voucher_id)
