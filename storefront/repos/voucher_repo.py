# storefront/repos/voucher_repo.py
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.voucher import VoucherModel, VoucherUsageModel, OrderVoucherModel


class VoucherRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_voucher(self, voucher_id: int) -> VoucherModel | None:
        return self.db.get(VoucherModel, voucher_id)

    def get_by_code(self, code: str) -> VoucherModel | None:
        return self.db.execute(select(VoucherModel).where(VoucherModel.code == code)).scalar_one_or_none()

    def list_vouchers(self) -> List[VoucherModel]:
        return list(self.db.execute(select(VoucherModel).order_by(VoucherModel.id)).scalars())

    def save(self, voucher: VoucherModel) -> VoucherModel:
        self.db.add(voucher)
        self.db.flush()
        return voucher

    def delete(self, voucher: VoucherModel):
        self.db.delete(voucher)
        self.db.flush()

    def get_usage(self, voucher_id: int, user_id: int) -> VoucherUsageModel | None:
        return self.db.execute(
            select(VoucherUsageModel).where(
                VoucherUsageModel.voucher_id == voucher_id,
                VoucherUsageModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def create_usage(self, voucher_id: int, user_id: int) -> VoucherUsageModel:
        usage = VoucherUsageModel(voucher_id=voucher_id, user_id=user_id, times_used=0)
        self.db.add(usage)
        self.db.flush()
        return usage

    def increment_used_count(self, voucher_id: int) -> int:
        # never pushes used_count past usage_limit
        res = self.db.execute(
            update(VoucherModel)
            .where(
                VoucherModel.id == voucher_id,
                (VoucherModel.usage_limit.is_(None)) | (VoucherModel.used_count < VoucherModel.usage_limit),
            )
            .values(used_count=VoucherModel.used_count + 1)
        )
        return res.rowcount

    def increment_times_used(self, usage_id: int, per_user_limit: int | None) -> int:
        stmt = update(VoucherUsageModel).where(VoucherUsageModel.id == usage_id)
        if per_user_limit is not None:
            stmt = stmt.where(VoucherUsageModel.times_used < per_user_limit)
        res = self.db.execute(
            stmt.values(times_used=VoucherUsageModel.times_used + 1)
        )
        return res.rowcount

    def get_order_voucher(self, order_id: int, voucher_id: int) -> OrderVoucherModel | None:
        return self.db.execute(
            select(OrderVoucherModel).where(
                OrderVoucherModel.order_id == order_id,
                OrderVoucherModel.voucher_id == voucher_id,
            )
        ).scalar_one_or_none()

    def add_order_voucher(self, record: OrderVoucherModel) -> OrderVoucherModel:
        self.db.add(record)
        self.db.flush()
        return record

    def is_used_in_orders(self, voucher_id: int) -> bool:
        return self.db.execute(
            select(OrderVoucherModel.id).where(OrderVoucherModel.voucher_id == voucher_id).limit(1)
        ).first() is not None
