from rest_framework.permissions import BasePermission

from .models import User


class HasRole(BasePermission):
    """Allow authenticated users whose role is in ``allowed_roles``."""

    allowed_roles: frozenset = frozenset()

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        if user.role in self.allowed_roles:
            return True
        self.message = f"User role {user.role} is not authorized to access this route."
        return False


def role_required(*roles: str) -> type[HasRole]:
    return type("RoleRequired", (HasRole,), {"allowed_roles": frozenset(roles)})


IsAdminRole = role_required(User.ADMIN)


class IsOwnerOrAdmin(BasePermission):
    """Object-level check against ``obj.<owner_field>_id``."""

    owner_field = "user"
    message = "Not authorized to access this resource."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        user = request.user
        if getattr(user, "is_admin", False):
            return True
        owner_field = getattr(view, "owner_field", self.owner_field)
        return getattr(obj, f"{owner_field}_id", None) == user.pk
