from django.db.models import Q

from .models import Order


def visibility_scope(user, prefix=''):
    """
    Predicate selecting the orders ``user`` may see.

    Cashiers see their whole branch and nothing when unassigned. Admins
    assigned to a branch see that branch, unassigned admins see everything.
    ``prefix`` points the predicate at an order relation, e.g. ``'order__'``.
    """
    if user is None or not user.is_authenticated:
        return Q(**{f'{prefix}pk__in': []})

    if user.is_cashier and user.branch_id is None:
        return Q(**{f'{prefix}pk__in': []})

    if user.branch_id is not None:
        return Q(**{f'{prefix}branch_id': user.branch_id})

    return Q()


def visible_orders(user, include_voided=True):
    manager = Order.all_objects if include_voided else Order.objects
    return manager.filter(visibility_scope(user))
