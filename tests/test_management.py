"""
Tests for authentication, branch, employee and catalog management.
"""
from decimal import Decimal

import pytest

from authentication.models import Branch, User
from authentication.permissions import get_user_permissions, Permissions
from inventory.models import Category, Menu


PASSWORD = "SecurePassword123!"


@pytest.mark.django_db
class TestLogin:
    def test_login_returns_tokens_and_role(self, api_client, cashier):
        response = api_client.post(
            "/auth/login/", {"email": cashier.email, "password": PASSWORD}, format="json"
        )

        assert response.status_code == 200
        assert response.data["access"]
        assert response.data["refresh"]
        assert response.data["role"] == User.ROLE_CASHIER
        assert response.data["user"]["branch"] == cashier.branch_id
        assert response.data["permissions"][Permissions.VOID_ORDERS] is True
        assert response.data["permissions"][Permissions.VIEW_REPORTS] is False

    def test_wrong_password(self, api_client, cashier):
        response = api_client.post(
            "/auth/login/", {"email": cashier.email, "password": "wrong"}, format="json"
        )

        assert response.status_code == 422
        assert response.data["success"] is False

    def test_profile_requires_authentication(self, api_client):
        response = api_client.get("/profile/")

        assert response.status_code == 401
        assert response.data == {
            "success": False,
            "message": "Authentication required",
            "errors": response.data["errors"],
        }

    def test_profile(self, cashier_client, cashier):
        response = cashier_client.get("/profile/")

        assert response.status_code == 200
        assert response.data["branch_name"] == cashier.branch.name


class TestRolePermissions:
    def test_cashier_capabilities(self):
        cashier = User(role=User.ROLE_CASHIER)

        granted = {name for name, allowed in get_user_permissions(cashier).items() if allowed}

        assert granted == {Permissions.MANAGE_POS, Permissions.VOID_ORDERS}

    def test_admin_has_everything(self):
        admin = User(role=User.ROLE_ADMIN)

        assert all(get_user_permissions(admin).values())


@pytest.mark.django_db
class TestBranchManagement:
    def test_admin_creates_branch(self, admin_client):
        response = admin_client.post(
            "/branches/", {"name": "Cabang Kemang", "address": "Jl. Kemang Raya 5"}, format="json"
        )

        assert response.status_code == 201
        assert Branch.objects.filter(name="Cabang Kemang").exists()

    def test_cashier_cannot_manage_branches(self, cashier_client):
        response = cashier_client.post(
            "/branches/", {"name": "Cabang Kemang", "address": "Jl. Kemang Raya 5"}, format="json"
        )

        assert response.status_code == 403

    def test_branch_with_employees_is_kept(self, admin_client, cashier, branch):
        response = admin_client.delete(f"/branches/{branch.id}/")

        assert response.status_code == 422
        assert Branch.objects.filter(pk=branch.pk).exists()

    def test_empty_branch_is_deleted(self, admin_client, other_branch):
        response = admin_client.delete(f"/branches/{other_branch.id}/")

        assert response.status_code == 204
        assert not Branch.objects.filter(pk=other_branch.pk).exists()

    def test_branch_list_counts_users(self, admin_client, cashier, branch):
        response = admin_client.get("/branches/")

        assert response.status_code == 200
        assert response.data[0]["users_count"] == 1


@pytest.mark.django_db
class TestEmployeeManagement:
    def test_create_cashier(self, admin_client, branch):
        response = admin_client.post("/employees/", {
            "name": "New Cashier",
            "email": "new.cashier@cabang.id",
            "role": "cashier",
            "branch_id": branch.id,
            "password": PASSWORD,
            "password_confirmation": PASSWORD,
        }, format="json")

        assert response.status_code == 201
        user = User.objects.get(email="new.cashier@cabang.id")
        assert user.branch == branch
        assert user.check_password(PASSWORD)

    def test_password_confirmation_must_match(self, admin_client):
        response = admin_client.post("/employees/", {
            "name": "New Cashier",
            "email": "new.cashier@cabang.id",
            "role": "cashier",
            "password": PASSWORD,
            "password_confirmation": "Different123!",
        }, format="json")

        assert response.status_code == 422
        assert "password" in response.data["errors"]

    def test_admin_cannot_delete_self(self, admin_client, admin_user):
        response = admin_client.delete(f"/employees/{admin_user.id}/")

        assert response.status_code == 422
        assert User.objects.filter(pk=admin_user.pk).exists()

    def test_delete_other_employee(self, admin_client, cashier):
        response = admin_client.delete(f"/employees/{cashier.id}/")

        assert response.status_code == 204


@pytest.mark.django_db
class TestCatalog:
    def test_cashier_reads_menus(self, cashier_client, menu):
        response = cashier_client.get("/menu/menus/")

        assert response.status_code == 200
        assert response.data[0]["name"] == "Kopi Susu"

    def test_cashier_cannot_create_menu(self, cashier_client, category):
        response = cashier_client.post("/menu/menus/", {
            "category_id": category.id, "name": "Latte", "price": "28000",
        }, format="json")

        assert response.status_code == 403

    def test_admin_creates_menu(self, admin_client, category):
        response = admin_client.post("/menu/menus/", {
            "category_id": category.id, "name": "Latte", "price": "28000",
        }, format="json")

        assert response.status_code == 201
        assert Menu.objects.get(name="Latte").price == Decimal("28000.00")

    def test_negative_price(self, admin_client, category):
        response = admin_client.post("/menu/menus/", {
            "category_id": category.id, "name": "Latte", "price": "-1",
        }, format="json")

        assert response.status_code == 422

    def test_filter_by_category(self, cashier_client, menu):
        tea = Category.objects.create(name="Tea")
        Menu.objects.create(category=tea, name="Teh Tarik", price=Decimal("15000"))

        response = cashier_client.get("/menu/menus/", {"category": tea.id})

        assert [row["name"] for row in response.data] == ["Teh Tarik"]

    def test_category_with_menus_is_kept(self, admin_client, menu, category):
        response = admin_client.delete(f"/menu/categories/{category.id}/")

        assert response.status_code == 422
        assert Category.objects.filter(pk=category.pk).exists()

    def test_deleting_menu_keeps_order_lines(self, admin_client, cashier, menu, place_order):
        order = place_order(cashier, [{"menu_id": menu.id, "quantity": 1}])

        response = admin_client.delete(f"/menu/menus/{menu.id}/")

        assert response.status_code == 204
        item = order.items.get()
        assert item.menu is None
        assert item.item_name == "Kopi Susu"

    def test_pos_data(self, cashier_client, cashier, menu):
        response = cashier_client.get("/orders/pos/")

        assert response.status_code == 200
        assert response.data["branch_id"] == cashier.branch_id
        assert response.data["categories"][0]["name"] == "Coffee"
        assert len(response.data["menus"]) == 1


@pytest.mark.django_db
def test_health_check(api_client):
    response = api_client.get("/health/")

    assert response.status_code == 200
    assert response.data["database"] == "connected"
