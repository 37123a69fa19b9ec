"""Domain services for agencies and members.

Each mutating operation checks the permission policy, writes the change
in one transaction, records an ``Activity`` entry and, when a linked
identity is affected, schedules a metadata sync with the identity
provider after commit.
"""

from __future__ import annotations

from functools import partial
from typing import Any, Mapping

import structlog
from django.db import IntegrityError, transaction  # type: ignore

from apps.activity.models import Activity
from shared.exceptions import NotFound, PermissionDenied, ValidationFailed

from . import policy, tasks
from .models import Agency, Member, MembershipType, Role, Status, full_name

logger = structlog.get_logger(__name__)

AGENCY_TEXT_FIELDS = (
    "phone",
    "address",
    "city",
    "state",
    "zip_code",
    "website",
    "primary_contact_email",
    "primary_contact_phone",
)


def schedule_identity_sync(member: Member) -> None:
    if member.external_id:
        transaction.on_commit(partial(tasks.sync_identity_metadata.delay, member.pk), robust=True)


def schedule_identity_delete(external_id: str | None) -> None:
    if external_id:
        transaction.on_commit(partial(tasks.delete_identity.delay, external_id), robust=True)


def resolve_agency(agency_id: Any) -> Agency | None:
    if agency_id in (None, ""):
        return None
    try:
        return Agency.objects.get(pk=agency_id)
    except (Agency.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFound("Agency not found") from exc


def _validate_role(role: str | None) -> None:
    if role and role not in Role.values:
        raise ValidationFailed("Invalid role")


def _primary_contact_name(data: Mapping[str, Any]) -> str | None:
    first = data.get("primary_contact_first_name")
    last = data.get("primary_contact_last_name")
    if first and last:
        return f"{first} {last}"
    if "primary_contact_name" in data:
        return data.get("primary_contact_name") or ""
    return None


# --- Agencies -----------------------------------------------------------------

@transaction.atomic
def create_agency(actor: Member, data: Mapping[str, Any], request=None) -> Agency:
    if not policy.can_create_agency(actor):
        raise PermissionDenied("Only Super Admins can create agencies")

    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip()
    if not name or not email:
        raise ValidationFailed("Agency name and email are required")

    if Agency.objects.filter(email__iexact=email).exists():
        logger.info("agency.duplicate_email", email=email)
        raise ValidationFailed("Agency with this email already exists")

    agency = Agency(
        name=name,
        email=email,
        membership_type=data.get("membership_type") or None,
        status=data.get("status") or Status.PENDING,
        primary_contact_name=_primary_contact_name(data) or "",
    )
    for field in AGENCY_TEXT_FIELDS:
        setattr(agency, field, data.get(field) or "")
    agency.save()

    Activity.log(
        actor,
        Activity.Type.AGENCY_CREATED,
        f"Created agency: {agency.name}",
        request=request,
        details={"agency_id": agency.pk},
    )
    logger.info("agency.created", agency_id=agency.pk, actor_id=actor.pk)
    return agency


@transaction.atomic
def update_agency(actor: Member, agency: Agency, data: Mapping[str, Any], request=None) -> Agency:
    if not policy.can_edit_agency(actor, agency):
        raise PermissionDenied("Insufficient permissions")

    old_name = agency.name

    name = (data.get("name") or "").strip()
    if name:
        agency.name = name

    email = (data.get("email") or "").strip()
    if email and email.lower() != agency.email.lower():
        if Agency.objects.filter(email__iexact=email).exclude(pk=agency.pk).exists():
            raise ValidationFailed("Agency with this email already exists")
        agency.email = email

    for field in AGENCY_TEXT_FIELDS:
        if field in data:
            setattr(agency, field, data.get(field) or "")

    contact_name = _primary_contact_name(data)
    if contact_name is not None:
        agency.primary_contact_name = contact_name

    # Agency admins may edit details but never the classification.
    if policy.can_change_agency_classification(actor):
        if "membership_type" in data:
            agency.membership_type = data.get("membership_type") or None
        if "status" in data:
            agency.status = data.get("status") or Status.PENDING

    agency.save()

    if agency.name != old_name:
        for member in agency.members.exclude(external_id__isnull=True):
            schedule_identity_sync(member)

    Activity.log(
        actor,
        Activity.Type.AGENCY_UPDATED,
        f"Updated agency: {agency.name}",
        request=request,
        details={"agency_id": agency.pk},
    )
    logger.info("agency.updated", agency_id=agency.pk, actor_id=actor.pk)
    return agency


@transaction.atomic
def delete_agency(actor: Member, agency: Agency, request=None) -> None:
    if not policy.can_delete_agency(actor):
        raise PermissionDenied("Only Super Admins can delete agencies")

    agency_id, agency_name = agency.pk, agency.name
    linked = list(agency.members.exclude(external_id__isnull=True).values_list("pk", flat=True))

    # Members survive their agency.
    detached = Member.objects.filter(agency_id=agency_id).update(agency=None)
    agency.delete()

    for member in Member.objects.filter(pk__in=linked):
        schedule_identity_sync(member)

    Activity.log(
        actor,
        Activity.Type.AGENCY_DELETED,
        f"Deleted agency: {agency_name}",
        request=request,
        details={"agency_id": agency_id, "detached_members": detached},
    )
    logger.info("agency.deleted", agency_id=agency_id, detached_members=detached, actor_id=actor.pk)


# --- Members ------------------------------------------------------------------

@transaction.atomic
def create_member(actor: Member, data: Mapping[str, Any], request=None) -> Member:
    first_name = (data.get("first_name") or "").strip()
    last_name = (data.get("last_name") or "").strip()
    email = (data.get("email") or "").strip()

    if not first_name or not last_name or not email:
        raise ValidationFailed("First name, last name, and email are required")

    role = data.get("role") or Role.AGENCY_USER
    _validate_role(role)

    agency_id = data.get("agency_id")
    if policy.is_agency_admin(actor) and not agency_id:
        agency_id = actor.agency_id
    policy.check_member_create(actor, role, agency_id)

    if Member.objects.filter(email__iexact=email).exists():
        raise ValidationFailed(
            f"A member with email {email} already exists. Please use a different email address."
        )

    agency = resolve_agency(agency_id)

    try:
        with transaction.atomic():
            member = Member.objects.create_user(
                email=email,
                first_name=first_name,
                last_name=last_name,
                phone=data.get("phone") or "",
                membership_type=data.get("membership_type") or MembershipType.A1_AGENCY,
                status=data.get("status") or Status.ACTIVE,
                role=role,
                agency=agency,
            )
    except IntegrityError as exc:
        raise ValidationFailed("A member with this email already exists") from exc

    Activity.log(
        actor,
        Activity.Type.MEMBER_CREATED,
        f"Created member: {first_name} {last_name}",
        request=request,
        details={"member_id": member.pk},
    )
    logger.info("member.created", member_id=member.pk, role=role, agency_id=member.agency_id, actor_id=actor.pk)
    return member


@transaction.atomic
def update_member(actor: Member, member: Member, data: Mapping[str, Any], request=None) -> Member:
    new_role = data.get("role") or None
    _validate_role(new_role)
    new_agency_id = data["agency_id"] if "agency_id" in data else ...

    policy.check_member_edit(actor, member, new_role, new_agency_id)

    old_role = member.role
    old_agency_id = member.agency_id

    member.first_name = (data.get("first_name") or "").strip() or member.first_name
    member.last_name = (data.get("last_name") or "").strip() or member.last_name

    email = (data.get("email") or "").strip()
    if email and email.lower() != member.email.lower():
        if Member.objects.filter(email__iexact=email).exclude(pk=member.pk).exists():
            raise ValidationFailed("Email already exists")
        member.email = email

    if "phone" in data:
        member.phone = data.get("phone") or ""
    member.status = data.get("status") or member.status
    member.membership_type = data.get("membership_type") or member.membership_type

    if new_role and new_role != old_role:
        logger.info("member.role_change", member_id=member.pk, old_role=old_role, new_role=new_role)
        member.role = new_role

    if new_agency_id is not ... and policy.is_super_admin(actor):
        member.agency = resolve_agency(new_agency_id)

    member.name = full_name(member.first_name, member.last_name)
    try:
        with transaction.atomic():
            member.save()
    except IntegrityError as exc:
        raise ValidationFailed("Email already exists") from exc

    if member.role != old_role or member.agency_id != old_agency_id:
        schedule_identity_sync(member)

    description = f"Updated member: {member.first_name} {member.last_name}"
    if member.role != old_role:
        description += f" (Role changed from {old_role or 'NONE'} to {member.role})"
    Activity.log(
        actor,
        Activity.Type.MEMBER_UPDATED,
        description,
        request=request,
        details={"member_id": member.pk},
    )
    logger.info("member.updated", member_id=member.pk, actor_id=actor.pk)
    return member


@transaction.atomic
def delete_member(actor: Member, member: Member, request=None) -> None:
    policy.check_member_delete(actor, member)

    member_id = member.pk
    external_id = member.external_id
    label = member.first_name or member.name or "Unknown"

    member.delete()
    schedule_identity_delete(external_id)

    Activity.log(
        actor,
        Activity.Type.MEMBER_DELETED,
        f"Deleted member: {label}",
        request=request,
        details={"member_id": member_id},
    )
    logger.info("member.deleted", member_id=member_id, actor_id=actor.pk)


@transaction.atomic
def assign_role(
    member: Member,
    role: str,
    agency: Agency | None,
    *,
    actor: Member | None = None,
    reason: str = "",
    request=None,
) -> Member:
    """Set role and agency on ``member`` and mirror them to the identity provider."""
    _validate_role(role)
    old_role = member.role
    member.role = role
    member.agency = agency
    member.status = Status.ACTIVE
    member.save(update_fields=["role", "agency", "status", "updated_at"])
    schedule_identity_sync(member)

    Activity.log(
        actor or member,
        Activity.Type.ROLE_ASSIGNED,
        f"Assigned role {role} to {member.email}",
        request=request,
        details={
            "member_id": member.pk,
            "old_role": old_role or None,
            "agency_id": member.agency_id,
            "reason": reason,
        },
    )
    logger.info("member.role_assigned", member_id=member.pk, role=role, agency_id=member.agency_id, reason=reason)
    return member
