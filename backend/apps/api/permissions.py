from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsStaffOrReadOnly(BasePermission):
    """Anyone may read; only authenticated staff accounts may write."""

    message = "Only staff accounts may modify the catalog"

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        user = getattr(request, "user", None)
        return bool(
            user
            and getattr(user, "is_authenticated", False)
            and (getattr(user, "is_staff", False) or getattr(user, "is_superuser", False))
        )


def is_privileged(user) -> bool:
    return bool(getattr(user, "is_staff", False) or getattr(user, "is_superuser", False))
