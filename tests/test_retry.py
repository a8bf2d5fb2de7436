import pytest
from sqlalchemy.exc import OperationalError

from storefront.domain.errors import ConcurrencyConflict, InsufficientStock
from storefront.utils.retry import db_retry


class TestDbRetry:
    def test_conflicts_are_retried_until_success(self):
        calls = []

        @db_retry(attempts=3)
        def claim():
            calls.append(1)
            if len(calls) < 3:
                raise ConcurrencyConflict("cart changed")
            return "claimed"

        assert claim() == "claimed"
        assert len(calls) == 3

    def test_lock_timeouts_are_retried(self):
        calls = []

        @db_retry(attempts=2)
        def write():
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("UPDATE products", {}, Exception("database is locked"))
            return "written"

        assert write() == "written"
        assert len(calls) == 2

    def test_last_error_is_reraised(self):
        calls = []

        @db_retry(attempts=2)
        def claim():
            calls.append(1)
            raise ConcurrencyConflict("cart changed")

        with pytest.raises(ConcurrencyConflict):
            claim()
        assert len(calls) == 2

    def test_client_errors_are_not_retried(self):
        calls = []

        @db_retry(attempts=3)
        def checkout():
            calls.append(1)
            raise InsufficientStock(1, 2, 0)

        with pytest.raises(InsufficientStock):
            checkout()
        assert len(calls) == 1
