"""
Pytest configuration and fixtures for the multi-branch point of sale.
"""
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from authentication.models import Branch, User
from inventory.models import Category, Menu


PASSWORD = "SecurePassword123!"


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def branch(db):
    return Branch.objects.create(name="Cabang Sudirman", address="Jl. Sudirman No. 1")


@pytest.fixture
def other_branch(db):
    return Branch.objects.create(name="Cabang Thamrin", address="Jl. Thamrin No. 9")


@pytest.fixture
def admin_user(db):
    """Admin without a branch: sees every branch"""
    return User.objects.create_user(
        email="admin@cabang.id", password=PASSWORD, name="Head Admin", role=User.ROLE_ADMIN
    )


@pytest.fixture
def branch_admin(branch):
    return User.objects.create_user(
        email="branch.admin@cabang.id", password=PASSWORD, name="Branch Admin",
        role=User.ROLE_ADMIN, branch=branch,
    )


@pytest.fixture
def cashier(branch):
    return User.objects.create_user(
        email="cashier@cabang.id", password=PASSWORD, name="Siti Cashier",
        role=User.ROLE_CASHIER, branch=branch,
    )


@pytest.fixture
def other_cashier(other_branch):
    return User.objects.create_user(
        email="cashier.thamrin@cabang.id", password=PASSWORD, name="Budi Cashier",
        role=User.ROLE_CASHIER, branch=other_branch,
    )


@pytest.fixture
def cashier_without_branch(db):
    return User.objects.create_user(
        email="floater@cabang.id", password=PASSWORD, name="Unassigned Cashier",
        role=User.ROLE_CASHIER,
    )


@pytest.fixture
def category(db):
    return Category.objects.create(name="Coffee", icon="C")


@pytest.fixture
def menu(category):
    return Menu.objects.create(category=category, name="Kopi Susu", price=Decimal("25000.00"))


@pytest.fixture
def tracked_menu(category):
    """Menu with a legacy stock counter"""
    return Menu.objects.create(
        category=category, name="Croissant", price=Decimal("18000.00"), stock=10
    )


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def cashier_client(cashier):
    return _client_for(cashier)


@pytest.fixture
def client_for():
    return _client_for


@pytest.fixture
def place_order():
    """Record an order through the checkout service"""
    from orders.services import build_lines, checkout, compute_totals

    def _place(user, items, branch=None, **extra):
        totals = compute_totals(build_lines(items))
        data = {
            'items': items,
            'subtotal': totals.subtotal,
            'tax': totals.tax,
            'total': totals.total,
            'payment_method': 'cash',
        }
        if branch is not None:
            data['branch_id'] = branch.pk
        data.update(extra)
        return checkout(user, data)

    return _place
