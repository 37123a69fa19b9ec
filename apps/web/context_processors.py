from __future__ import annotations

from apps.users.models import Role

BADGE_CLASSES = {
    Role.SUPER_ADMIN: "badge-super",
    Role.AGENCY_ADMIN: "badge-admin",
    Role.ADMIN: "badge-admin",
}


def role_badge(request):
    """Expose the signed-in member's role badge to every template."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return {}
    role = user.role or ""
    return {
        "role_badge": {
            "label": user.get_role_display() if role else "No role",
            "css": BADGE_CLASSES.get(role, "badge-member"),
        },
        "is_admin_role": user.is_admin(),
        "is_super_admin_role": user.is_super_admin(),
    }
