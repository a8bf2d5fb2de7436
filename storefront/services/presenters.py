# storefront/services/presenters.py
# plain dicts handed to the routers, the response schemas turn them into json
from typing import Any, Dict

from storefront.data.models.order import OrderModel, OrderDetailModel, OrderTrackingModel
from storefront.data.models.payment import PaymentModel
from storefront.data.models.voucher import VoucherModel


def voucher_to_dict(v: VoucherModel) -> Dict[str, Any]:
    return {
        "id": v.id,
        "code": v.code,
        "description": v.description,
        "discount_type": v.discount_type,
        "discount_value": v.discount_value,
        "min_order_value": v.min_order_value,
        "max_discount": v.max_discount,
        "start_date": v.start_date,
        "end_date": v.end_date,
        "usage_limit": v.usage_limit,
        "used_count": v.used_count,
        "per_user_limit": v.per_user_limit,
        "combinable": v.combinable,
        "is_active": v.is_active,
    }


def order_to_dict(o: OrderModel) -> Dict[str, Any]:
    return {
        "id": o.id,
        "user_id": o.user_id,
        "status": o.status,
        "payment_method": o.payment_method,
        "payment_status": o.payment_status,
        "total_amount": o.total_amount,
        "voucher_discount": o.voucher_discount,
        "shipping_address": o.shipping_address,
        "notes": o.notes,
        "created_at": o.created_at,
    }


def payment_to_dict(p: PaymentModel) -> Dict[str, Any]:
    return {
        "id": p.id,
        "order_id": p.order_id,
        "payment_method_id": p.payment_method_id,
        "status": p.status,
        "amount": p.amount,
        "currency": p.currency,
        "transaction_id": p.transaction_id,
        "paid_at": p.paid_at,
    }


def detail_to_dict(d: OrderDetailModel, product_name: str | None = None) -> Dict[str, Any]:
    return {
        "product_id": d.product_id,
        "product_name": product_name,
        "quantity": d.quantity,
        "price": d.price,
        "total": d.total,
    }


def tracking_to_dict(t: OrderTrackingModel) -> Dict[str, Any]:
    return {
        "status": t.status,
        "note": t.note,
        "created_at": t.created_at,
    }
