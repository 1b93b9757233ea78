"""
Read-only projections of order data: filtered order sets with their summary,
the dashboard overview and the menu analysis.

All of them start from ``orders.scope.visibility_scope`` so a user never sees
orders outside their branch.
"""
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Sum, Max, Q, Value
from django.db.models.functions import Coalesce, TruncDate

from authentication.models import Branch
from inventory.models import Menu
from orders.models import Order, OrderItem
from orders.scope import visibility_scope, visible_orders
from orders.services import quantize_money
from orders.timeutils import date_bounds, local_today, local_now, week_days, preset_dates

ZERO = Decimal('0.00')
CUSTOM_ITEMS_LABEL = 'Custom Items'


def filter_orders(user, filters, tz):
    """
    Orders visible to ``user`` narrowed by cleaned ``ReportFilterForm`` data.
    Voided orders stay in the set unless the status filter excludes them.
    """
    queryset = visible_orders(user, include_voided=True)

    start_date = filters.get('start_date')
    end_date = filters.get('end_date')
    if start_date:
        start, _end = date_bounds(start_date, start_date, tz)
        queryset = queryset.filter(created_at__gte=start)
    if end_date:
        _start, end = date_bounds(end_date, end_date, tz)
        queryset = queryset.filter(created_at__lt=end)

    if filters.get('branch_id'):
        queryset = queryset.filter(branch=filters['branch_id'])
    if filters.get('payment_method'):
        queryset = queryset.filter(payment_method=filters['payment_method'])
    if filters.get('status'):
        queryset = queryset.filter(status=filters['status'])

    return queryset.order_by('-created_at', '-id')


def summarize(queryset):
    """Count, voided count and revenue of the non-voided orders in ``queryset``"""
    totals = queryset.aggregate(
        count=Count('id'),
        voided_count=Count('id', filter=Q(deleted_at__isnull=False)),
        revenue=Sum('total', filter=Q(deleted_at__isnull=True)),
    )
    return {
        'count': totals['count'],
        'voided_count': totals['voided_count'],
        'success_count': totals['count'] - totals['voided_count'],
        'revenue': quantize_money(totals['revenue'] or ZERO),
    }


# =============== DASHBOARD ===============

def _top_menus(items, limit=None):
    rows = items.filter(menu__isnull=False).values(
        'menu_id', 'menu__name', 'menu__icon', 'menu__price', 'menu__category__name'
    ).annotate(
        total_sold=Sum('quantity'),
        total_revenue=Sum('subtotal'),
    ).order_by('-total_sold', 'menu__name')
    if limit:
        rows = rows[:limit]

    return [
        {
            'menu_id': row['menu_id'],
            'menu_name': row['menu__name'],
            'category_name': row['menu__category__name'],
            'icon': row['menu__icon'],
            'price': row['menu__price'],
            'total_sold': row['total_sold'],
            'total_revenue': row['total_revenue'] or ZERO,
        }
        for row in rows
    ]


def dashboard_overview(user, tz):
    today = local_today(tz)
    start, end = date_bounds(today, today, tz)

    orders = Order.objects.filter(visibility_scope(user))
    today_orders = orders.created_between(start, end)
    today_totals = today_orders.aggregate(income=Sum('total'), count=Count('id'))

    today_items = OrderItem.objects.filter(
        visibility_scope(user, prefix='order__'),
        order__deleted_at__isnull=True,
        order__created_at__gte=start,
        order__created_at__lt=end,
    )

    branches = Branch.objects.all()
    if user.branch_id is not None:
        branches = branches.filter(pk=user.branch_id)
    elif user.is_cashier:
        branches = branches.none()

    live_today = Q(
        orders__deleted_at__isnull=True,
        orders__created_at__gte=start,
        orders__created_at__lt=end,
    )
    branch_performance = [
        {
            'id': branch.id,
            'name': branch.name,
            'address': branch.address,
            'transaction_count': branch.transaction_count,
            'total_income': branch.total_income,
            'latest_activity': branch.latest_activity,
        }
        for branch in branches.annotate(
            transaction_count=Count('orders', filter=live_today),
            total_income=Coalesce(Sum('orders__total', filter=live_today), Value(ZERO)),
            latest_activity=Max('orders__created_at', filter=Q(orders__deleted_at__isnull=True)),
        ).order_by('name')
    ]

    recent_cutoff = local_now(tz) - timedelta(minutes=5)
    latest_transactions = [
        {
            'id': order.id,
            'order_number': order.order_number,
            'items': ', '.join(
                f"{item.quantity}x {item.item_name}" if item.quantity > 1 else item.item_name
                for item in order.items.all()
            ),
            'branch_name': order.branch.name if order.branch else None,
            'total': order.total,
            'created_at': order.created_at,
            'is_new': order.created_at >= recent_cutoff,
        }
        for order in orders.select_related('branch').prefetch_related('items').order_by('-created_at')[:5]
    ]

    days = week_days(today)
    week_start, week_end = date_bounds(days[0], days[-1], tz)
    daily = dict(
        orders.created_between(week_start, week_end)
        .annotate(day=TruncDate('created_at', tzinfo=tz))
        .values('day')
        .annotate(total=Sum('total'))
        .values_list('day', 'total')
    )

    return {
        'total_income': quantize_money(today_totals['income'] or ZERO),
        'total_transactions': today_totals['count'],
        'active_branches': branches.count(),
        'top_selling_menus': _top_menus(today_items, limit=5),
        'branch_performance': branch_performance,
        'latest_transactions': latest_transactions,
        'chart_labels': [day.strftime('%a') for day in days],
        'chart_data': [daily.get(day, ZERO) for day in days],
    }


# =============== MENU ANALYSIS ===============

def menu_analysis(user, preset, branch, tz):
    first_day, last_day = preset_dates(preset, local_today(tz))
    start, end = date_bounds(first_day, last_day, tz)

    items = OrderItem.objects.filter(
        visibility_scope(user, prefix='order__'),
        order__deleted_at__isnull=True,
        order__created_at__gte=start,
        order__created_at__lt=end,
    )
    if branch is not None:
        items = items.filter(order__branch=branch)

    top_performers = _top_menus(items)

    categories = list(
        items.values('menu__category_id', 'menu__category__name')
        .annotate(total_sold=Sum('quantity'), total_revenue=Sum('subtotal'))
        .order_by('-total_sold')
    )
    sold_total = sum(row['total_sold'] for row in categories)
    category_breakdown = [
        {
            'category_id': row['menu__category_id'],
            'category_name': row['menu__category__name'] or CUSTOM_ITEMS_LABEL,
            'total_sold': row['total_sold'],
            'total_revenue': row['total_revenue'] or ZERO,
            'percentage': round(row['total_sold'] / sold_total * 100, 1) if sold_total else 0,
        }
        for row in categories
    ]

    sold_ids = [row['menu_id'] for row in top_performers]
    zero_sales = [
        {
            'menu_id': menu.id,
            'menu_name': menu.name,
            'category_name': menu.category.name,
            'price': menu.price,
            'stock': menu.stock,
        }
        for menu in Menu.objects.exclude(id__in=sold_ids).select_related('category').order_by('name')
    ]

    best_selling = top_performers[0] if top_performers else None
    highest_revenue = max(top_performers, key=lambda row: row['total_revenue']) if top_performers else None

    return {
        'period': {'start_date': first_day, 'end_date': last_day},
        'top_performers': top_performers,
        'category_breakdown': category_breakdown,
        'zero_sales': zero_sales,
        'summary': {
            'total_items_sold': sum(row['total_sold'] for row in top_performers),
            'total_revenue': sum((row['total_revenue'] for row in top_performers), ZERO),
            'best_selling_item': {
                'name': best_selling['menu_name'], 'sold': best_selling['total_sold']
            } if best_selling else None,
            'highest_revenue_item': {
                'name': highest_revenue['menu_name'], 'revenue': highest_revenue['total_revenue']
            } if highest_revenue else None,
            'zero_sales_count': len(zero_sales),
        },
    }
