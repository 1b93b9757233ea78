from decimal import Decimal

from django.conf import settings


DEFAULTS = {
    'TIME_ZONE': 'Asia/Jakarta',
    'TAX_RATE': Decimal('0.10'),
    'CURRENCY': 'IDR',
    'ORDER_NUMBER_PREFIX': 'ORD',
    'VOID_REASON_MIN_LENGTH': 10,
    'HISTORY_PAGE_SIZE': 10,
    'REPORT_PAGE_SIZE': 20,
}


def pos_setting(name):
    """Read a value from ``settings.POS``, falling back to the defaults above"""
    overrides = getattr(settings, 'POS', {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
