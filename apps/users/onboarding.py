"""First-sign-in onboarding: a new member picks a role and an agency."""

from __future__ import annotations

from typing import Any

import structlog
from django.conf import settings  # type: ignore
from django.utils.crypto import constant_time_compare  # type: ignore

from shared.exceptions import NotFound, PermissionDenied, ValidationFailed

from . import services
from .models import ONBOARDING_ROLES, Agency, Member, Role

logger = structlog.get_logger(__name__)


def onboarding_state(member: Member) -> dict[str, Any]:
    return {
        "onboarded": member.is_onboarded,
        "role": member.role or None,
        "agencies": list(Agency.objects.order_by("name").values("id", "name")),
    }


def complete_onboarding(
    member: Member,
    role: str | None,
    agency_id: Any = None,
    access_code: str | None = None,
    request=None,
) -> Member:
    """Validate the choice and assign role and agency to ``member``."""
    if role not in ONBOARDING_ROLES:
        raise ValidationFailed("Invalid role")

    agency = None
    if role == Role.SUPER_ADMIN:
        if not constant_time_compare(access_code or "", settings.SUPER_ADMIN_ACCESS_CODE):
            logger.warning("onboarding.bad_access_code", member_id=member.pk)
            raise PermissionDenied("Invalid access code")
    else:
        if agency_id in (None, ""):
            raise ValidationFailed("Please select an agency")
        try:
            agency = Agency.objects.get(pk=agency_id)
        except (Agency.DoesNotExist, ValueError, TypeError) as exc:
            raise NotFound("Agency not found") from exc

    services.assign_role(member, role, agency, actor=member, reason="onboarding", request=request)
    logger.info("onboarding.completed", member_id=member.pk, role=role, agency_id=member.agency_id)
    return member
