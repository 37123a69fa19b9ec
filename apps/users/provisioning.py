"""Provision members from identity-provider user events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore

from apps.activity.models import Activity

from .models import Agency, Member, Role, Status
from .services import schedule_identity_sync

logger = structlog.get_logger(__name__)


@dataclass
class RoleDecision:
    role: str
    agency: Agency | None
    reason: str
    member: Member | None = None


def primary_email(data: dict[str, Any]) -> str:
    """Pick the primary address out of a provider user payload."""
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for address in addresses:
        if primary_id and address.get("id") == primary_id:
            return address.get("email_address") or ""
    if addresses:
        return addresses[0].get("email_address") or ""
    return data.get("email") or ""


def decide_role(email: str, external_id: str | None = None, member: Member | None = None) -> RoleDecision:
    """First matching rule wins.

    ``member`` is a row already linked to this identity (created by an
    earlier sign-in); it is left out of the first-user and email rules.
    """
    others = Member.objects.all()
    if member is not None:
        others = others.exclude(pk=member.pk)

    if not others.exists():
        return RoleDecision(Role.SUPER_ADMIN, None, "first user")

    existing = None
    if email:
        existing = (
            others.select_related("agency")
            .filter(email__iexact=email)
            .filter(Q(external_id__isnull=True) | Q(external_id=external_id))
            .first()
        )
    if existing is not None:
        return RoleDecision(existing.role or Role.AGENCY_USER, existing.agency, "existing member", member=existing)

    domain = email.rpartition("@")[2].lower()
    member_number = settings.AUTO_ADMIN_EMAIL_DOMAINS.get(domain)
    if member_number:
        agency = Agency.objects.filter(member_number=member_number).first()
        if agency is not None:
            return RoleDecision(Role.AGENCY_ADMIN, agency, f"admin domain {domain}")
        logger.warning("webhook.admin_domain_agency_missing", domain=domain, member_number=member_number)

    if email:
        agency = Agency.objects.filter(Q(email__iexact=email) | Q(primary_contact_email__iexact=email)).first()
        if agency is not None:
            return RoleDecision(Role.AGENCY_ADMIN, agency, "agency contact email")

    return RoleDecision(Role.AGENCY_USER, None, "default")


@transaction.atomic
def provision_created_user(data: dict[str, Any]) -> dict[str, Any]:
    """Handle ``user.created``; returns the JSON body for the webhook response."""
    external_id = data.get("id")
    metadata = data.get("unsafe_metadata") or {}

    if metadata.get("role"):
        logger.info("webhook.user_has_role", external_id=external_id, role=metadata["role"])
        return {"message": "User already has role"}

    # Sign-in may have created a bare member before this event arrived.
    linked = Member.objects.filter(external_id=external_id).first()
    if linked is not None and linked.role:
        logger.info("webhook.user_already_processed", external_id=external_id)
        return {"message": "User already processed"}

    email = primary_email(data)
    if linked is None and email:
        claimed = Member.objects.filter(email__iexact=email).exclude(external_id__isnull=True).first()
        if claimed is not None:
            logger.warning(
                "webhook.email_linked_elsewhere",
                external_id=external_id,
                member_id=claimed.pk,
                linked_external_id=claimed.external_id,
            )
            return {"message": "Email already linked to another user"}

    decision = decide_role(email, external_id, member=linked)

    member = linked or decision.member
    if member is None:
        member = Member.objects.create_user(
            email=email,
            external_id=external_id,
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            role=decision.role,
            agency=decision.agency,
            status=Status.ACTIVE,
        )
    else:
        member.external_id = external_id
        member.role = decision.role
        member.agency = decision.agency
        member.save(update_fields=["external_id", "role", "agency", "updated_at"])

    schedule_identity_sync(member)
    Activity.log(
        member,
        Activity.Type.ROLE_ASSIGNED,
        f"Assigned role {decision.role} to {member.email}",
        details={"member_id": member.pk, "agency_id": member.agency_id, "reason": decision.reason},
    )
    logger.info(
        "webhook.role_assigned",
        member_id=member.pk,
        external_id=external_id,
        role=decision.role,
        agency_id=member.agency_id,
        reason=decision.reason,
    )
    return {"success": True, "message": f"User assigned role: {decision.role}"}


@transaction.atomic
def sync_updated_user(data: dict[str, Any]) -> dict[str, Any]:
    member = Member.objects.filter(external_id=data.get("id")).first()
    if member is None:
        return {"received": True}

    email = primary_email(data)
    if email and not Member.objects.filter(email__iexact=email).exclude(pk=member.pk).exists():
        member.email = email
    member.first_name = data.get("first_name") or member.first_name
    member.last_name = data.get("last_name") or member.last_name
    member.save()
    logger.info("webhook.user_updated", member_id=member.pk)
    return {"success": True, "message": "User updated"}


@transaction.atomic
def unlink_deleted_user(data: dict[str, Any]) -> dict[str, Any]:
    member = Member.objects.filter(external_id=data.get("id")).first()
    if member is None:
        return {"received": True}

    member.external_id = None
    member.status = Status.INACTIVE
    member.save(update_fields=["external_id", "status", "updated_at"])
    logger.info("webhook.user_unlinked", member_id=member.pk)
    return {"success": True, "message": "User unlinked"}
