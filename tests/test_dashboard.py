"""
Tests for the dashboard overview, menu analysis, receipts and calendar helpers.
"""
from datetime import date
from decimal import Decimal

import pytest

from inventory.models import Menu
from orders.services import void_order
from orders.timeutils import date_bounds, preset_dates, week_days, pos_timezone


@pytest.mark.django_db
class TestDashboardOverview:
    def test_today_totals_skip_voided_orders(self, admin_client, admin_user, cashier, menu, place_order):
        kept = place_order(cashier, [{"menu_id": menu.id, "quantity": 2}])
        voided = place_order(cashier, [{"menu_id": menu.id, "quantity": 1}])
        void_order(voided, admin_user, "duplicate entry")

        response = admin_client.get("/dashboard/")

        assert response.status_code == 200
        assert response.data["total_transactions"] == 1
        assert response.data["total_income"] == kept.total
        assert response.data["top_selling_menus"][0]["menu_name"] == "Kopi Susu"
        assert response.data["top_selling_menus"][0]["total_sold"] == 2
        assert len(response.data["chart_labels"]) == 7
        assert sum(response.data["chart_data"]) == kept.total

    def test_cashier_overview_is_scoped(self, cashier_client, cashier, other_cashier, menu, place_order):
        place_order(cashier, [{"menu_id": menu.id, "quantity": 1}])
        place_order(other_cashier, [{"menu_id": menu.id, "quantity": 3}])

        response = cashier_client.get("/dashboard/")

        assert response.data["total_transactions"] == 1
        assert response.data["active_branches"] == 1
        assert [row["name"] for row in response.data["branch_performance"]] == [cashier.branch.name]
        assert len(response.data["latest_transactions"]) == 1
        assert response.data["latest_transactions"][0]["is_new"] is True

    def test_unassigned_cashier_sees_nothing(self, client_for, cashier_without_branch, cashier, menu, place_order):
        place_order(cashier, [{"menu_id": menu.id, "quantity": 1}])

        response = client_for(cashier_without_branch).get("/dashboard/")

        assert response.data["total_transactions"] == 0
        assert response.data["branch_performance"] == []
        assert response.data["active_branches"] == 0


@pytest.mark.django_db
class TestMenuAnalysis:
    def test_breakdown_and_zero_sales(self, admin_client, cashier, menu, category, place_order):
        idle = Menu.objects.create(category=category, name="Affogato", price=Decimal("32000.00"))
        place_order(cashier, [
            {"menu_id": menu.id, "quantity": 3},
            {"is_custom": True, "name": "Extra Sugar", "price": Decimal("2000"), "quantity": 1},
        ])

        response = admin_client.get("/dashboard/reports/menu-analysis/", {"date_range": "today"})

        assert response.status_code == 200
        data = response.data
        assert data["top_performers"][0]["menu_name"] == "Kopi Susu"
        assert data["top_performers"][0]["total_sold"] == 3

        breakdown = {row["category_name"]: row for row in data["category_breakdown"]}
        assert breakdown["Coffee"]["percentage"] == 75.0
        assert breakdown["Custom Items"]["percentage"] == 25.0

        assert [row["menu_id"] for row in data["zero_sales"]] == [idle.id]
        assert data["summary"]["best_selling_item"] == {"name": "Kopi Susu", "sold": 3}
        assert data["filters"]["date_range"] == "today"

    def test_defaults_to_this_month(self, admin_client):
        response = admin_client.get("/dashboard/reports/menu-analysis/")

        assert response.status_code == 200
        assert response.data["filters"]["date_range"] == "this_month"
        assert response.data["summary"]["best_selling_item"] is None

    def test_admin_only(self, cashier_client):
        assert cashier_client.get("/dashboard/reports/menu-analysis/").status_code == 403


@pytest.mark.django_db
class TestReceipts:
    def test_receipt_data(self, cashier_client, cashier, menu, place_order):
        order = place_order(
            cashier, [{"menu_id": menu.id, "quantity": 2}],
            cash_amount=Decimal("60000"),
        )

        response = cashier_client.get(f"/orders/{order.id}/receipt/")

        assert response.status_code == 200
        assert response.data["order_number"] == order.order_number
        assert response.data["branch_name"] == cashier.branch.name
        assert response.data["change_amount"] == Decimal("5000.00")
        assert response.data["items"][0]["name"] == "Kopi Susu"

    def test_receipt_pdf(self, cashier_client, cashier, menu, place_order):
        order = place_order(cashier, [{"menu_id": menu.id, "quantity": 1}])

        response = cashier_client.get(f"/orders/{order.id}/receipt/pdf/")

        assert response.status_code == 200
        assert response["Content-Type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_receipt_of_other_branch(self, client_for, other_cashier, cashier, menu, place_order):
        order = place_order(cashier, [{"menu_id": menu.id, "quantity": 1}])

        response = client_for(other_cashier).get(f"/orders/{order.id}/receipt/")

        assert response.status_code == 404


class TestCalendar:
    def test_date_bounds_are_half_open(self):
        tz = pos_timezone()

        start, end = date_bounds(date(2025, 3, 7), date(2025, 3, 7), tz)

        assert start.isoformat() == "2025-03-07T00:00:00+07:00"
        assert end.isoformat() == "2025-03-08T00:00:00+07:00"

    def test_week_starts_on_monday(self):
        days = week_days(date(2025, 3, 7))

        assert days[0] == date(2025, 3, 3)
        assert days[-1] == date(2025, 3, 9)

    @pytest.mark.parametrize("preset,expected", [
        ("today", (date(2025, 3, 7), date(2025, 3, 7))),
        ("yesterday", (date(2025, 3, 6), date(2025, 3, 6))),
        ("last_week", (date(2025, 2, 24), date(2025, 3, 2))),
        ("this_month", (date(2025, 3, 1), date(2025, 3, 31))),
        ("last_month", (date(2025, 2, 1), date(2025, 2, 28))),
        ("this_year", (date(2025, 1, 1), date(2025, 12, 31))),
        ("bogus", (date(2025, 3, 1), date(2025, 3, 31))),
    ])
    def test_presets(self, preset, expected):
        assert preset_dates(preset, date(2025, 3, 7)) == expected
