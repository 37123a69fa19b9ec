"""Database probes and role repair shared by the API and the pages."""

from __future__ import annotations

from typing import Any

import structlog
from django.conf import settings  # type: ignore
from django.db import DatabaseError, connection  # type: ignore
from django.utils import timezone  # type: ignore

from apps.users import services
from apps.users.models import Agency, Member, Role
from shared.exceptions import ValidationFailed

logger = structlog.get_logger(__name__)


def database_connected() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as exc:
        logger.error("db.probe_failed", error=str(exc))
        return False
    return True


def database_snapshot() -> dict[str, Any]:
    """Counts plus the full agency and member tables."""
    agencies = list(
        Agency.objects.values("id", "member_number", "name", "email", "membership_type", "status", "created_at")
    )
    users = list(
        Member.objects.values(
            "id", "external_id", "email", "first_name", "last_name", "role", "agency_id", "status", "created_at"
        )
    )
    return {
        "agencyCount": len(agencies),
        "userCount": len(users),
        "agencies": agencies,
        "users": users,
        "timestamp": timezone.now().isoformat(),
        "database": "Connected" if database_connected() else "Not Connected",
    }


def find_repair_agency(agency_id: Any = None, agency_name: str | None = None) -> Agency | None:
    """Look up by id or member number, then by name, then the configured default."""
    if agency_id not in (None, ""):
        lookup = {"member_number": agency_id} if str(agency_id).upper().startswith("AG") else {"pk": agency_id}
        try:
            return Agency.objects.get(**lookup)
        except (Agency.DoesNotExist, ValueError):
            logger.warning("role_repair.agency_missing", agency_id=agency_id)
    if agency_name:
        agency = Agency.objects.filter(name__iexact=agency_name).first()
        if agency is not None:
            return agency
    return Agency.objects.filter(member_number=settings.ROLE_REPAIR_DEFAULT_AGENCY).first()


def repair_role(
    member: Member,
    role: str | None,
    agency_id: Any = None,
    agency_name: str | None = None,
    request=None,
) -> dict[str, Any]:
    if role not in Role.values:
        raise ValidationFailed("Invalid role")

    agency = None if role == Role.SUPER_ADMIN else find_repair_agency(agency_id, agency_name)
    services.assign_role(member, role, agency, actor=member, reason="role repair", request=request)
    return {
        "success": True,
        "message": f"Role updated to {role}",
        "metadata": member.identity_metadata(),
    }
