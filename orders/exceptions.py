from rest_framework import exceptions, status
from django.utils.translation import gettext_lazy as _

from authentication.exceptions import BusinessRuleViolation


class BranchRequired(BusinessRuleViolation):
    default_detail = _('A branch is required to record an order.')
    default_code = 'branch_required'


class InvalidOrderItem(BusinessRuleViolation):
    default_detail = _('One of the order items is invalid.')
    default_code = 'invalid_order_item'


class TotalsMismatch(BusinessRuleViolation):
    default_detail = _('The order totals do not match the items.')
    default_code = 'totals_mismatch'


class InsufficientPayment(BusinessRuleViolation):
    default_detail = _('The cash amount does not cover the order total.')
    default_code = 'insufficient_payment'


class OrderNotEditable(BusinessRuleViolation):
    default_detail = _('A voided order cannot be edited.')
    default_code = 'order_not_editable'


class OrderAlreadyVoided(BusinessRuleViolation):
    default_detail = _('This order has already been voided.')
    default_code = 'order_already_voided'


class OrderNotVoidable(BusinessRuleViolation):
    default_detail = _('Only successful orders can be voided.')
    default_code = 'order_not_voidable'


class OrderNotPending(BusinessRuleViolation):
    default_detail = _('Only pending orders can be deleted permanently.')
    default_code = 'order_not_pending'


class VoidNotPermitted(exceptions.PermissionDenied):
    default_detail = _('You are not allowed to void this order.')
    default_code = 'void_not_permitted'


class OrderAccessDenied(exceptions.PermissionDenied):
    default_detail = _('You do not have access to this order.')
    default_code = 'order_access_denied'


class CheckoutFailed(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _('The order could not be saved. Please try again.')
    default_code = 'checkout_failed'
