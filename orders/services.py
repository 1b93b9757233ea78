"""
Order workflows: checkout, item edits, voids and purges.

Every write runs inside a single ``transaction.atomic`` block so an order and
its lines are stored, changed or voided all together.
"""
import logging
from collections import namedtuple
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction, DatabaseError
from django.utils import timezone
from django.utils.translation import gettext as _

from authentication.models import Branch
from inventory.models import Menu
from .conf import pos_setting
from .exceptions import (
    BranchRequired, InvalidOrderItem, TotalsMismatch, InsufficientPayment,
    OrderNotEditable, OrderAlreadyVoided, OrderNotVoidable, OrderNotPending,
    VoidNotPermitted, OrderAccessDenied, CheckoutFailed,
)
from .models import Order, OrderItem, OrderSequence
from .timeutils import pos_timezone, local_date, local_today

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
TOLERANCE = Decimal('0.01')

Totals = namedtuple('Totals', ['subtotal', 'tax', 'total'])


def quantize_money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# =============== ORDER LINES ===============

@dataclass
class CatalogLine:
    """A line sold from the menu; name and price are taken from the menu"""
    menu: Menu
    quantity: int
    note: str = None

    is_custom = False

    @property
    def name(self):
        return self.menu.name

    @property
    def price(self):
        return self.menu.price

    @property
    def subtotal(self):
        return quantize_money(self.price * self.quantity)

    def item_fields(self):
        return {
            'menu': self.menu,
            'item_name': self.name,
            'price': self.price,
            'quantity': self.quantity,
            'subtotal': self.subtotal,
            'note': self.note,
            'is_custom': False,
        }


@dataclass
class CustomLine:
    """A free-form line priced by the cashier, never linked to a menu"""
    name: str
    price: Decimal
    quantity: int
    note: str = None

    is_custom = True

    @property
    def subtotal(self):
        return quantize_money(self.price * self.quantity)

    def item_fields(self):
        return {
            'menu': None,
            'item_name': self.name,
            'price': self.price,
            'quantity': self.quantity,
            'subtotal': self.subtotal,
            'note': self.note,
            'is_custom': True,
        }


def compute_totals(lines, tax_rate=None):
    if tax_rate is None:
        tax_rate = pos_setting('TAX_RATE')
    subtotal = quantize_money(sum((line.subtotal for line in lines), Decimal('0')))
    tax = quantize_money(subtotal * Decimal(tax_rate))
    return Totals(subtotal, tax, subtotal + tax)


def _fetch_menus(menu_ids):
    menus = Menu.objects.in_bulk(set(menu_ids))
    missing = sorted(set(menu_ids) - set(menus))
    if missing:
        raise InvalidOrderItem(
            _('Menu %(ids)s does not exist.') % {'ids': ', '.join(str(pk) for pk in missing)}
        )
    return menus


def build_lines(items):
    """Turn validated item payloads into ``CatalogLine``/``CustomLine`` values"""
    menus = _fetch_menus([item['menu_id'] for item in items if not item.get('is_custom')])

    lines = []
    for item in items:
        if item.get('is_custom'):
            lines.append(CustomLine(
                name=item['name'],
                price=quantize_money(item['price']),
                quantity=item['quantity'],
                note=item.get('note'),
            ))
        else:
            lines.append(CatalogLine(
                menu=menus[item['menu_id']],
                quantity=item['quantity'],
                note=item.get('note'),
            ))
    return lines


# =============== ORDER NUMBERS ===============

def format_order_number(day, sequence):
    prefix = pos_setting('ORDER_NUMBER_PREFIX')
    return f"{prefix}-{day:%Y%m%d}-{sequence:04d}"


def _highest_recorded_sequence(day):
    """Largest sequence already used on ``day``, voided orders included"""
    day_prefix = format_order_number(day, 0)[:-4]
    numbers = Order.all_objects.filter(
        order_number__startswith=day_prefix
    ).values_list('order_number', flat=True)

    highest = 0
    for number in numbers:
        suffix = number[len(day_prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def next_order_number(day=None, tz=None):
    """
    Allocate the next order number for a local business day.

    Must run inside ``transaction.atomic``: the day's sequence row stays
    locked until the caller's transaction ends, so concurrent checkouts are
    numbered one after another. A concurrent insert of the same day row is
    resolved by ``get_or_create`` falling back to the existing row.
    """
    if day is None:
        day = local_today(tz or pos_timezone())

    sequence, created = OrderSequence.objects.select_for_update().get_or_create(
        day=day,
        defaults={'last_number': lambda: _highest_recorded_sequence(day)},
    )
    sequence.last_number += 1
    sequence.save(update_fields=['last_number'])
    return format_order_number(day, sequence.last_number)


# =============== CHECKOUT ===============

def resolve_branch(user, branch_id=None):
    if user.is_admin:
        if branch_id is None:
            raise BranchRequired(_('Please select a branch before saving the order.'))
        try:
            return Branch.objects.get(pk=branch_id)
        except Branch.DoesNotExist:
            raise BranchRequired(_('The selected branch does not exist.'))

    if user.branch_id is None:
        raise BranchRequired(
            _('Your account is not assigned to a branch. Ask an admin to assign one.')
        )
    return user.branch


def _check_declared_totals(totals, declared):
    for field in Totals._fields:
        if field in declared and abs(quantize_money(declared[field]) - getattr(totals, field)) > TOLERANCE:
            raise TotalsMismatch(
                _('The declared %(field)s %(declared)s does not match the computed %(computed)s.') % {
                    'field': field,
                    'declared': declared[field],
                    'computed': getattr(totals, field),
                }
            )


def _settle_cash(total, cash_amount, change_amount):
    if cash_amount is None:
        return None, change_amount

    cash_amount = quantize_money(cash_amount)
    if cash_amount < total:
        raise InsufficientPayment()

    expected_change = cash_amount - total
    if change_amount is not None and abs(quantize_money(change_amount) - expected_change) > TOLERANCE:
        raise TotalsMismatch(_('The change amount does not match the cash received.'))
    return cash_amount, expected_change


def checkout(user, data, tz=None):
    """
    Record a new order with its lines.

    ``data`` is the validated checkout payload. Amounts are recomputed from
    the lines; declared subtotal, tax and total only have to agree with them.
    """
    branch = resolve_branch(user, data.get('branch_id'))
    lines = build_lines(data['items'])
    totals = compute_totals(lines)
    _check_declared_totals(totals, data)
    cash_amount, change_amount = _settle_cash(
        totals.total, data.get('cash_amount'), data.get('change_amount')
    )

    try:
        with transaction.atomic():
            order = Order.objects.create(
                order_number=next_order_number(tz=tz),
                user=user,
                branch=branch,
                subtotal=totals.subtotal,
                tax=totals.tax,
                total=totals.total,
                status=data.get('status', Order.STATUS_SUCCESS),
                payment_method=data.get('payment_method', 'cash'),
                cash_amount=cash_amount,
                change_amount=change_amount,
                notes=data.get('notes'),
            )
            OrderItem.objects.bulk_create(
                [OrderItem(order=order, **line.item_fields()) for line in lines]
            )
    except DatabaseError:
        logger.exception("Checkout failed", extra={'user_id': user.id, 'branch_id': branch.id})
        raise CheckoutFailed()

    logger.info(
        "Order created",
        extra={
            'order_number': order.order_number,
            'user_id': user.id,
            'branch_id': branch.id,
            'total': str(order.total),
        },
    )
    return order


# =============== EDIT ===============

def edit_order_items(order, user, items, reason):
    """
    Replace the lines of ``order`` with ``items`` and restamp the edit audit.

    Stored lines missing from ``items`` are removed. Catalog lines take the
    menu's current name and price. Custom lines can only be dropped, never
    resubmitted.
    """
    with transaction.atomic():
        order = Order.all_objects.select_for_update().get(pk=order.pk)
        if order.is_voided:
            raise OrderNotEditable()

        stored = {item.id: item for item in order.items.all()}
        submitted_ids = {item['id'] for item in items if item.get('id') is not None}

        foreign = sorted(submitted_ids - set(stored))
        if foreign:
            raise InvalidOrderItem(
                _('Item %(ids)s does not belong to this order.') % {
                    'ids': ', '.join(str(pk) for pk in foreign)
                }
            )

        menus = _fetch_menus([item['menu_id'] for item in items if item.get('menu_id') is not None])

        lines = []
        for item in items:
            existing = stored.get(item.get('id'))
            if existing is not None and existing.is_custom:
                raise InvalidOrderItem(_('Custom items cannot be edited.'))
            if item.get('menu_id') is None:
                raise InvalidOrderItem(_('Each item needs a menu.'))
            lines.append((existing, CatalogLine(
                menu=menus[item['menu_id']],
                quantity=item['quantity'],
                note=existing.note if existing else None,
            )))

        order.items.exclude(id__in=submitted_ids).delete()

        for existing, line in lines:
            if existing is None:
                OrderItem.objects.create(order=order, **line.item_fields())
                continue
            for field, value in line.item_fields().items():
                setattr(existing, field, value)
            existing.save()

        totals = compute_totals([line for _existing, line in lines])
        order.subtotal = totals.subtotal
        order.tax = totals.tax
        order.total = totals.total
        order.edited_by = user
        order.edited_at = timezone.now()
        order.edit_reason = reason
        order.save()

    logger.info(
        "Order edited",
        extra={'order_number': order.order_number, 'user_id': user.id, 'reason': reason},
    )
    return order


# =============== VOID ===============

def void_order(order, user, reason, tz=None):
    """
    Cancel a successful order, give tracked stock back and stamp the void audit.

    Cashiers may only void orders of their own branch created today.
    """
    tz = tz or pos_timezone()

    with transaction.atomic():
        order = Order.all_objects.select_for_update().get(pk=order.pk)

        if order.is_voided:
            raise OrderAlreadyVoided()

        if user.is_cashier:
            if order.branch_id is None or order.branch_id != user.branch_id:
                raise VoidNotPermitted(_('You can only void orders of your own branch.'))
            if local_date(order.created_at, tz) != local_today(tz):
                raise VoidNotPermitted(_('Cashiers can only void orders created today.'))

        if order.status != Order.STATUS_SUCCESS:
            raise OrderNotVoidable()

        for item in order.items.filter(is_custom=False, menu__isnull=False).select_related('menu'):
            item.menu.restore_stock(item.quantity)

        order.status = Order.STATUS_CANCELLED
        order.deleted_by = user
        order.deleted_at = timezone.now()
        order.delete_reason = reason
        order.save()

    logger.info(
        "Order voided",
        extra={
            'order_number': order.order_number,
            'user_id': user.id,
            'role': user.role,
            'reason': reason,
        },
    )
    return order


# =============== PURGE ===============

def purge_pending_order(order, user):
    """Permanently delete an order that never left the pending state"""
    if order.status != Order.STATUS_PENDING:
        raise OrderNotPending()

    if user.is_cashier and (order.branch_id is None or order.branch_id != user.branch_id):
        raise OrderAccessDenied()

    order_number = order.order_number
    with transaction.atomic():
        order.delete()

    logger.info(
        "Pending order purged",
        extra={'order_number': order_number, 'user_id': user.id, 'role': user.role},
    )
    return order_number
