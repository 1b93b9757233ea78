"""
Tests for editing, voiding and purging orders.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import DatabaseError
from django.utils import timezone

from orders.models import Order, OrderItem


def edit_url(order):
    return f"/orders/{order.id}/items/"


def void_url(order):
    return f"/orders/{order.id}/void/"


def purge_url(order):
    return f"/orders/{order.id}/purge/"


@pytest.fixture
def cashier_order(cashier, menu, place_order):
    return place_order(cashier, [{"menu_id": menu.id, "quantity": 2}])


@pytest.mark.django_db
class TestEditOrder:
    def test_admin_replaces_items_and_recomputes(self, admin_client, admin_user, cashier_order, category):
        from inventory.models import Menu

        tea = Menu.objects.create(category=category, name="Teh Tarik", price=Decimal("15000.00"))
        kept = cashier_order.items.get()

        response = admin_client.put(edit_url(cashier_order), {
            "items": [
                {"id": kept.id, "menu_id": kept.menu_id, "quantity": 1},
                {"menu_id": tea.id, "quantity": 2},
            ],
            "edit_reason": "Customer changed the order",
        }, format="json")

        assert response.status_code == 200
        cashier_order.refresh_from_db()
        assert cashier_order.subtotal == Decimal("55000.00")
        assert cashier_order.tax == Decimal("5500.00")
        assert cashier_order.total == Decimal("60500.00")
        assert cashier_order.edited_by == admin_user
        assert cashier_order.edited_at is not None
        assert cashier_order.edit_reason == "Customer changed the order"
        assert cashier_order.items.count() == 2
        assert response.data["order"]["editor_name"] == "Head Admin"

    def test_omitted_items_are_removed(self, admin_client, cashier, menu, tracked_menu, place_order):
        order = place_order(cashier, [
            {"menu_id": menu.id, "quantity": 1},
            {"menu_id": tracked_menu.id, "quantity": 1},
        ])
        croissant = order.items.get(menu=tracked_menu)

        response = admin_client.put(edit_url(order), {
            "items": [{"id": croissant.id, "menu_id": tracked_menu.id, "quantity": 3}],
            "edit_reason": "Removed the coffee",
        }, format="json")

        assert response.status_code == 200
        order.refresh_from_db()
        assert list(order.items.values_list("item_name", "quantity")) == [("Croissant", 3)]
        assert order.subtotal == Decimal("54000.00")

    def test_custom_item_cannot_be_resubmitted(self, admin_client, cashier, menu, place_order):
        order = place_order(cashier, [
            {"menu_id": menu.id, "quantity": 1},
            {"is_custom": True, "name": "Extra Sugar", "price": Decimal("2000"), "quantity": 1},
        ])
        before = list(order.items.values_list("item_name", "menu_id", "quantity"))
        custom = order.items.get(is_custom=True)

        response = admin_client.put(edit_url(order), {
            "items": [{"id": custom.id, "quantity": 5}],
            "edit_reason": "Only sugar left",
        }, format="json")

        assert response.status_code == 422
        assert list(order.items.values_list("item_name", "menu_id", "quantity")) == before
        order.refresh_from_db()
        assert order.edited_at is None

    def test_custom_item_cannot_become_catalog_line(self, admin_client, cashier, menu, place_order):
        order = place_order(cashier, [
            {"menu_id": menu.id, "quantity": 1},
            {"is_custom": True, "name": "Extra Sugar", "price": Decimal("2000"), "quantity": 1},
        ])
        custom = order.items.get(is_custom=True)

        response = admin_client.put(edit_url(order), {
            "items": [{"id": custom.id, "menu_id": menu.id, "quantity": 2}],
            "edit_reason": "Swap sugar for coffee",
        }, format="json")

        assert response.status_code == 422
        custom.refresh_from_db()
        assert custom.is_custom is True
        assert custom.quantity == 1
        assert order.items.count() == 2

    def test_custom_item_can_be_dropped(self, admin_client, cashier, menu, place_order):
        order = place_order(cashier, [
            {"menu_id": menu.id, "quantity": 1},
            {"is_custom": True, "name": "Extra Sugar", "price": Decimal("2000"), "quantity": 1},
        ])
        kept = order.items.get(is_custom=False)

        response = admin_client.put(edit_url(order), {
            "items": [{"id": kept.id, "menu_id": menu.id, "quantity": 1}],
            "edit_reason": "No sugar after all",
        }, format="json")

        assert response.status_code == 200
        assert not order.items.filter(is_custom=True).exists()
        order.refresh_from_db()
        assert order.subtotal == Decimal("25000.00")

    def test_item_of_another_order(self, admin_client, cashier, menu, place_order, cashier_order):
        other = place_order(cashier, [{"menu_id": menu.id, "quantity": 1}])
        foreign_item = other.items.get()

        response = admin_client.put(edit_url(cashier_order), {
            "items": [{"id": foreign_item.id, "menu_id": menu.id, "quantity": 1}],
            "edit_reason": "Wrong line",
        }, format="json")

        assert response.status_code == 422
        cashier_order.refresh_from_db()
        assert cashier_order.edited_at is None
        assert OrderItem.objects.filter(order=cashier_order).count() == 1

    def test_duplicate_item_ids(self, admin_client, cashier_order, menu):
        item = cashier_order.items.get()

        response = admin_client.put(edit_url(cashier_order), {
            "items": [
                {"id": item.id, "menu_id": menu.id, "quantity": 1},
                {"id": item.id, "menu_id": menu.id, "quantity": 2},
            ],
            "edit_reason": "Twice",
        }, format="json")

        assert response.status_code == 422

    def test_voided_order_is_not_editable(self, admin_client, admin_user, cashier_order, menu):
        from orders.services import void_order

        void_order(cashier_order, admin_user, "Duplicate entry at the till")

        response = admin_client.put(edit_url(cashier_order), {
            "items": [{"menu_id": menu.id, "quantity": 1}],
            "edit_reason": "Too late",
        }, format="json")

        assert response.status_code == 422
        cashier_order.refresh_from_db()
        assert cashier_order.edited_at is None

    def test_cashier_cannot_edit(self, cashier_client, cashier_order, menu):
        response = cashier_client.put(edit_url(cashier_order), {
            "items": [{"menu_id": menu.id, "quantity": 1}],
            "edit_reason": "Not allowed",
        }, format="json")

        assert response.status_code == 403


@pytest.mark.django_db
class TestVoidOrder:
    def test_admin_voids_and_restores_stock(self, admin_client, admin_user, cashier, tracked_menu, place_order):
        order = place_order(cashier, [{"menu_id": tracked_menu.id, "quantity": 2}])

        response = admin_client.post(
            void_url(order), {"delete_reason": "duplicate entry"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["order"]["is_voided"] is True
        assert response.data["order"]["deleter_name"] == "Head Admin"

        order = Order.all_objects.get(pk=order.pk)
        assert order.status == Order.STATUS_CANCELLED
        assert order.deleted_by == admin_user
        assert order.deleted_at is not None
        assert order.delete_reason == "duplicate entry"

        tracked_menu.refresh_from_db()
        assert tracked_menu.stock == 12

    def test_voided_order_leaves_default_manager(self, admin_user, cashier_order):
        from orders.services import void_order

        void_order(cashier_order, admin_user, "Duplicate entry at the till")

        assert not Order.objects.filter(pk=cashier_order.pk).exists()
        assert Order.all_objects.filter(pk=cashier_order.pk).exists()

    def test_untracked_stock_stays_null(self, admin_client, cashier_order, menu):
        admin_client.post(void_url(cashier_order), {"delete_reason": "duplicate entry"}, format="json")

        menu.refresh_from_db()
        assert menu.stock is None

    def test_void_twice_is_rejected(self, admin_client, admin_user, client_for, branch_admin, cashier_order):
        admin_client.post(void_url(cashier_order), {"delete_reason": "duplicate entry"}, format="json")
        first = Order.all_objects.get(pk=cashier_order.pk)

        response = client_for(branch_admin).post(
            void_url(cashier_order), {"delete_reason": "voiding once more"}, format="json"
        )

        assert response.status_code == 422
        again = Order.all_objects.get(pk=cashier_order.pk)
        assert again.deleted_by == admin_user
        assert again.deleted_at == first.deleted_at
        assert again.delete_reason == "duplicate entry"

    def test_cashier_voids_own_branch_today(self, cashier_client, cashier, cashier_order):
        response = cashier_client.post(
            void_url(cashier_order), {"delete_reason": "customer cancelled"}, format="json"
        )

        assert response.status_code == 200
        assert Order.all_objects.get(pk=cashier_order.pk).deleted_by == cashier

    def test_cashier_cannot_void_other_branch(self, client_for, other_cashier, cashier_order):
        response = client_for(other_cashier).post(
            void_url(cashier_order), {"delete_reason": "customer cancelled"}, format="json"
        )

        assert response.status_code == 403
        assert Order.all_objects.get(pk=cashier_order.pk).deleted_at is None

    def test_cashier_cannot_void_yesterdays_order(self, cashier_client, cashier_order):
        Order.all_objects.filter(pk=cashier_order.pk).update(
            created_at=timezone.now() - timedelta(days=2)
        )

        response = cashier_client.post(
            void_url(cashier_order), {"delete_reason": "customer cancelled"}, format="json"
        )

        assert response.status_code == 403
        assert Order.all_objects.get(pk=cashier_order.pk).deleted_at is None

    def test_admin_may_void_older_orders(self, admin_client, cashier_order):
        Order.all_objects.filter(pk=cashier_order.pk).update(
            created_at=timezone.now() - timedelta(days=30)
        )

        response = admin_client.post(
            void_url(cashier_order), {"delete_reason": "late correction"}, format="json"
        )

        assert response.status_code == 200

    def test_pending_order_is_not_voidable(self, admin_client, cashier, menu, place_order):
        order = place_order(cashier, [{"menu_id": menu.id, "quantity": 1}], status=Order.STATUS_PENDING)

        response = admin_client.post(void_url(order), {"delete_reason": "duplicate entry"}, format="json")

        assert response.status_code == 422
        assert Order.all_objects.get(pk=order.pk).deleted_at is None

    def test_reason_too_short(self, admin_client, cashier_order):
        response = admin_client.post(void_url(cashier_order), {"delete_reason": "oops"}, format="json")

        assert response.status_code == 422
        assert "delete_reason" in response.data["errors"]

    def test_reason_too_long(self, admin_client, cashier_order):
        response = admin_client.post(
            void_url(cashier_order), {"delete_reason": "x" * 501}, format="json"
        )

        assert response.status_code == 422

    def test_unknown_order(self, admin_client):
        response = admin_client.post(
            "/orders/999999/void/", {"delete_reason": "duplicate entry"}, format="json"
        )

        assert response.status_code == 404

    def test_storage_failure_rolls_back_stock(self, admin_client, cashier, tracked_menu, place_order, monkeypatch):
        order = place_order(cashier, [{"menu_id": tracked_menu.id, "quantity": 2}])

        def fail(*args, **kwargs):
            raise DatabaseError("could not write orders row")

        monkeypatch.setattr(Order, "save", fail)

        response = admin_client.post(void_url(order), {"delete_reason": "duplicate entry"}, format="json")

        assert response.status_code == 500
        assert response.data["success"] is False
        assert response.data["message"] == "The operation could not be completed."
        assert "orders row" not in str(response.data)

        tracked_menu.refresh_from_db()
        assert tracked_menu.stock == 10
        order = Order.all_objects.get(pk=order.pk)
        assert order.deleted_at is None
        assert order.status == Order.STATUS_SUCCESS


@pytest.mark.django_db
class TestPurgeOrder:
    def test_pending_order_is_deleted(self, cashier_client, cashier, menu, place_order):
        order = place_order(cashier, [{"menu_id": menu.id, "quantity": 1}], status=Order.STATUS_PENDING)

        response = cashier_client.delete(purge_url(order))

        assert response.status_code == 200
        assert order.order_number in response.data["message"]
        assert not Order.all_objects.filter(pk=order.pk).exists()
        assert not OrderItem.objects.filter(order_id=order.pk).exists()

    def test_successful_order_is_kept(self, cashier_client, cashier_order):
        response = cashier_client.delete(purge_url(cashier_order))

        assert response.status_code == 422
        assert Order.all_objects.filter(pk=cashier_order.pk).exists()

    def test_cashier_of_other_branch(self, client_for, other_cashier, cashier, menu, place_order):
        order = place_order(cashier, [{"menu_id": menu.id, "quantity": 1}], status=Order.STATUS_PENDING)

        response = client_for(other_cashier).delete(purge_url(order))

        assert response.status_code == 403
        assert Order.all_objects.filter(pk=order.pk).exists()
