from rest_framework import permissions

from .models import User


# Permission constants
class Permissions:
    VIEW_ALL_BRANCHES = 'view_all_branches'
    MANAGE_BRANCHES = 'manage_branches'
    MANAGE_MENU = 'manage_menu'
    MANAGE_EMPLOYEES = 'manage_employees'
    VIEW_REPORTS = 'view_reports'
    MANAGE_POS = 'manage_pos'
    EDIT_ORDERS = 'edit_orders'
    VOID_ORDERS = 'void_orders'

    ALL = [
        VIEW_ALL_BRANCHES, MANAGE_BRANCHES, MANAGE_MENU, MANAGE_EMPLOYEES,
        VIEW_REPORTS, MANAGE_POS, EDIT_ORDERS, VOID_ORDERS,
    ]


# Default permissions for each role
DEFAULT_PERMISSIONS = {
    User.ROLE_ADMIN: Permissions.ALL,
    User.ROLE_CASHIER: [
        Permissions.MANAGE_POS,
        Permissions.VOID_ORDERS,
    ],
}


def get_user_permissions(user):
    """Map every known permission to a boolean for the given user."""
    if not user or not user.is_authenticated:
        return {}
    granted = DEFAULT_PERMISSIONS.get(user.role, [])
    return {name: name in granted for name in Permissions.ALL}


def user_has_permission(user, permission_name):
    return get_user_permissions(user).get(permission_name, False)


class IsAdmin(permissions.BasePermission):
    """
    Permission to only allow admins
    """
    message = 'Only admins can perform this action.'

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.role == User.ROLE_ADMIN
        )


class IsAdminOrCashier(permissions.BasePermission):
    """
    Permission for any employee role that can operate the POS
    """
    message = 'You do not have a point of sale role.'

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.role in (User.ROLE_ADMIN, User.ROLE_CASHIER)
        )


class HasPermission(permissions.BasePermission):
    """
    Permission to check a specific role capability.
    Subclasses set ``required_permission``.
    """
    required_permission = None
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return user_has_permission(request.user, self.required_permission)


def require_permission(permission_name):
    """
    Build a permission class requiring ``permission_name``
    """
    return type(
        f'Requires_{permission_name}',
        (HasPermission,),
        {'required_permission': permission_name},
    )


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Read access for any employee, writes for admins only
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.role == User.ROLE_ADMIN
