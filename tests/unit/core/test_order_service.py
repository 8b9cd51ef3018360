"""Unit tests for OrderService."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.order_manager.core.exceptions import BadRequestError, NotFoundError
from src.order_manager.core.services import UNSET, OrderService
from src.order_manager.entities.service.order import OrderRepository
from tests.fixtures.core import association_product_ids


def _order_count(order_service: OrderService) -> int:
    return len(order_service.list_orders())


class TestCreateOrder:
    def test_create_then_get_returns_supplied_products(self, order_service):
        created = order_service.create_order("Office Supplies Order", [1, 3])

        fetched = order_service.get_order(created.id)

        assert fetched.order_description == "Office Supplies Order"
        assert fetched.product_ids == {1, 3}
        assert fetched == created

    def test_create_assigns_creation_time(self, order_service):
        created = order_service.create_order("Timed", [1])

        assert created.created_at is not None

    def test_duplicate_product_ids_are_accepted(self, order_service, database_service):
        created = order_service.create_order("Dupes", [2, 2, 4])

        assert created.product_ids == {2, 4}
        assert [p.id for p in created.products] == [2, 4]
        with database_service.read_scope() as session:
            rows = association_product_ids(session, created.id)
        assert rows == [2, 2, 4]

    def test_unknown_product_is_rejected_without_writing(self, order_service):
        with pytest.raises(BadRequestError) as exc_info:
            order_service.create_order("Bad", [1, 999])

        assert exc_info.value.message == "One or more product IDs are invalid"
        assert exc_info.value.status_code == 400
        assert _order_count(order_service) == 0

    def test_failure_after_insert_rolls_back(self, order_service, monkeypatch):
        def explode(self, order_id, product_ids):
            raise RuntimeError("association insert failed")

        monkeypatch.setattr(OrderRepository, "add_products", explode)

        with pytest.raises(RuntimeError, match="association insert failed"):
            order_service.create_order("Half written", [1])

        monkeypatch.undo()
        assert _order_count(order_service) == 0


class TestReadOrders:
    def test_get_missing_order(self, order_service):
        with pytest.raises(NotFoundError) as exc_info:
            order_service.get_order(12345)

        assert exc_info.value.message == "Order with id 12345 not found"
        assert exc_info.value.status_code == 404

    def test_list_orders_newest_first(self, order_service):
        first = order_service.create_order("first", [1])
        second = order_service.create_order("second", [2])

        assert [o.id for o in order_service.list_orders()] == [second.id, first.id]

    def test_list_products(self, order_service):
        names = [p.product_name for p in order_service.list_products()]

        assert names == ["HP laptop", "lenovo laptop", "Car", "Bike"]


class TestUpdateOrder:
    def test_replace_products(self, order_service):
        order = order_service.create_order("Office Supplies Order", [1, 3])

        updated = order_service.update_order(order.id, product_ids=[2])

        assert updated.product_ids == {2}
        assert updated.order_description == "Office Supplies Order"
        assert updated.created_at == order.created_at

    def test_update_description_only(self, order_service):
        order = order_service.create_order("Old", [1, 2])

        updated = order_service.update_order(order.id, order_description="New")

        assert updated.order_description == "New"
        assert updated.product_ids == {1, 2}

    def test_empty_product_list_clears_associations(self, order_service):
        order = order_service.create_order("Clear me", [1, 2])

        updated = order_service.update_order(order.id, product_ids=[])

        assert updated.products == []

    def test_no_fields_changes_nothing(self, order_service):
        order = order_service.create_order("Stable", [3])

        updated = order_service.update_order(order.id)

        assert updated == order

    def test_explicit_unset_is_same_as_omitting(self, order_service):
        order = order_service.create_order("Stable", [3])

        updated = order_service.update_order(
            order.id, order_description=UNSET, product_ids=UNSET
        )

        assert updated == order

    def test_missing_order(self, order_service):
        with pytest.raises(NotFoundError):
            order_service.update_order(999, order_description="nope")

    def test_unknown_product_leaves_order_untouched(self, order_service):
        order = order_service.create_order("Keep", [1])

        with pytest.raises(BadRequestError):
            order_service.update_order(
                order.id, order_description="Changed", product_ids=[1, 999]
            )

        assert order_service.get_order(order.id) == order

    def test_failure_during_replace_rolls_back_description(
        self, order_service, monkeypatch
    ):
        order = order_service.create_order("Original", [1, 2])

        def explode(self, order_id, product_ids):
            raise RuntimeError("replace failed")

        monkeypatch.setattr(OrderRepository, "replace_associations", explode)
        with pytest.raises(RuntimeError):
            order_service.update_order(
                order.id, order_description="Torn", product_ids=[3]
            )
        monkeypatch.undo()

        assert order_service.get_order(order.id) == order

    def test_order_deleted_between_check_and_write(self, order_service, monkeypatch):
        order = order_service.create_order("Racing", [1])

        # Pretend the pre-check ran before a concurrent delete
        monkeypatch.setattr(OrderService, "_ensure_order_exists", lambda self, _id: None)
        order_service.delete_order(order.id)

        with pytest.raises(NotFoundError):
            order_service.update_order(order.id, order_description="Too late")


class TestDeleteOrder:
    def test_delete_then_get_is_not_found(self, order_service, database_service):
        order = order_service.create_order("Temporary", [1, 2])

        order_service.delete_order(order.id)

        with pytest.raises(NotFoundError):
            order_service.get_order(order.id)
        with database_service.read_scope() as session:
            assert association_product_ids(session, order.id) == []

    def test_delete_missing_order(self, order_service):
        with pytest.raises(NotFoundError) as exc_info:
            order_service.delete_order(77)

        assert exc_info.value.message == "Order with id 77 not found"

    def test_delete_twice(self, order_service):
        order = order_service.create_order("Once", [1])
        order_service.delete_order(order.id)

        with pytest.raises(NotFoundError):
            order_service.delete_order(order.id)


class TestConcurrentCreates:
    def test_disjoint_creates_get_distinct_ids(self, file_database_service):
        service = OrderService(file_database_service)
        requests = [(f"Order {n}", [n % 4 + 1]) for n in range(12)]

        with ThreadPoolExecutor(max_workers=6) as pool:
            created = list(pool.map(lambda args: service.create_order(*args), requests))

        assert len({order.id for order in created}) == len(requests)
        for (description, product_ids), order in zip(requests, created, strict=True):
            fetched = service.get_order(order.id)
            assert fetched.order_description == description
            assert fetched.product_ids == set(product_ids)
        assert len(service.list_orders()) == len(requests)
