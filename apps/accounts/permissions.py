from rest_framework.permissions import BasePermission


class IsAdminStaff(BasePermission):
    """
    Admin console access.
    """
    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.is_staff
        )


class IsCustomer(BasePermission):
    """
    Authenticated login that is linked to a Customer record.
    """
    message = "No customer account is linked to this login."

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.is_customer
        )
