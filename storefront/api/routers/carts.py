#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import (
    CreateCartIn,
    ItemIn,
    CartOut,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session):
    return CartService(db)


@router.post("/", response_model=CartOut)
def create_cart(payload: CreateCartIn, db: Session = Depends(get_db)):
    return get_service(db).create_cart(payload.user_id)


@router.get("/{cart_id}", response_model=CartOut)
def get_cart(
    cart_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).get_cart(cart_id, user_id)


@router.post("/{cart_id}/items", response_model=CartOut)
def add_item(
    cart_id: int,
    payload: ItemIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).add_product(
        user_id=user_id,
        cart_id=cart_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )


@router.delete("/{cart_id}/items/{product_id}", response_model=CartOut)
def remove_item(
    cart_id: int,
    product_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_product(user_id, cart_id, product_id)
