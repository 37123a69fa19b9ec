"""Permission policy for agencies and members.

Every role decision in the API, the pages and the management commands is
made here. Predicates return a bool; ``check_*`` functions raise
``PermissionDenied`` (or ``ValidationFailed``) carrying the message shown
to the user.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from shared.exceptions import PermissionDenied, ValidationFailed

from .models import ADMIN_ROLES, AGENCY_ADMIN_ROLES, Role

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .models import Agency, Member


def _role(actor: Any) -> str:
    return getattr(actor, "role", "") or ""


def is_super_admin(actor: Any) -> bool:
    return _role(actor) == Role.SUPER_ADMIN


def is_agency_admin(actor: Any) -> bool:
    return _role(actor) in AGENCY_ADMIN_ROLES


def can_manage_members(actor: Any) -> bool:
    return _role(actor) in ADMIN_ROLES


def can_view_all_agencies(actor: Any) -> bool:
    return is_super_admin(actor)


can_create_agency = can_view_all_agencies
can_delete_agency = can_view_all_agencies
can_change_agency_classification = can_view_all_agencies


def _same_agency(actor: Any, agency_id: Any) -> bool:
    actor_agency_id = getattr(actor, "agency_id", None)
    return actor_agency_id is not None and agency_id is not None and str(actor_agency_id) == str(agency_id)


def can_view_agency(actor: Any, agency: "Agency") -> bool:
    if is_super_admin(actor):
        return True
    return is_agency_admin(actor) and _same_agency(actor, agency.pk)


can_edit_agency = can_view_agency


def assignable_roles(actor: Any) -> list[str]:
    """Roles the actor may give to a member."""
    all_roles = [Role.AGENCY_USER, Role.AGENCY_ADMIN, Role.SUPER_ADMIN]
    if is_super_admin(actor):
        return list(all_roles)
    if is_agency_admin(actor):
        return [role for role in all_roles if role != Role.SUPER_ADMIN]
    return []


def can_edit_member(actor: Any, member: "Member") -> bool:
    try:
        check_member_edit(actor, member)
    except PermissionDenied:
        return False
    return True


def check_member_edit(
    actor: Any,
    member: "Member",
    new_role: str | None = None,
    new_agency_id: Any = ...,
) -> None:
    """Raise ``PermissionDenied`` unless ``actor`` may apply the change to ``member``.

    ``new_agency_id`` uses ``...`` for "not supplied" so that an explicit
    ``None`` (detach from agency) is still checked.
    """
    if not can_manage_members(actor):
        raise PermissionDenied("Unauthorized - Members cannot edit other members")

    if is_agency_admin(actor):
        if not _same_agency(actor, member.agency_id):
            raise PermissionDenied("You can only edit members in your agency")
        if new_role == Role.SUPER_ADMIN or member.role == Role.SUPER_ADMIN:
            raise PermissionDenied("Only Super Admins can manage Super Admin accounts")

    if new_role and new_role != member.role and new_role == Role.SUPER_ADMIN and not is_super_admin(actor):
        raise PermissionDenied("Only Super Admins can assign Super Admin role")

    if new_agency_id is not ... and not is_super_admin(actor):
        if str(new_agency_id or "") != str(member.agency_id or ""):
            raise PermissionDenied("Only Super Admins can change member agency")


def check_member_create(actor: Any, role: str | None, agency_id: Any) -> None:
    if not can_manage_members(actor):
        raise PermissionDenied("You don't have permission to manage members")
    if role == Role.SUPER_ADMIN and not is_super_admin(actor):
        raise PermissionDenied("Only Super Admins can assign Super Admin role")
    if is_agency_admin(actor) and agency_id and not _same_agency(actor, agency_id):
        raise PermissionDenied("You can only add members to your agency")


def check_member_delete(actor: Any, member: "Member") -> None:
    if not can_manage_members(actor):
        raise PermissionDenied("Unauthorized")

    if is_agency_admin(actor):
        if not _same_agency(actor, member.agency_id):
            raise PermissionDenied("You can only delete members in your agency")
        if member.role == Role.SUPER_ADMIN:
            raise PermissionDenied("Cannot delete Super Admin accounts")

    if getattr(actor, "pk", None) == member.pk:
        raise ValidationFailed("Cannot delete your own account")


def members_visible_to(actor: Any, queryset):
    """Narrow a member queryset to what ``actor`` may see."""
    if is_super_admin(actor):
        return queryset
    agency_id = getattr(actor, "agency_id", None)
    if agency_id:
        return queryset.filter(agency_id=agency_id)
    return queryset.filter(pk=getattr(actor, "pk", None))


def agencies_visible_to(actor: Any, queryset):
    if is_super_admin(actor):
        return queryset
    if is_agency_admin(actor) and getattr(actor, "agency_id", None):
        return queryset.filter(pk=actor.agency_id)
    return queryset.none()
