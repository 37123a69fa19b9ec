"""Authentication against identity-provider sessions.

The provider signs users in and hands the browser a session JWT. This
backend validates that token and resolves the matching member, creating
a bare one (no role yet) on first sight so onboarding can pick it up.
"""

from __future__ import annotations

import structlog
from django.contrib.auth.backends import ModelBackend  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore

from .identity import InvalidSessionToken, decode_session_token
from .models import Member

logger = structlog.get_logger(__name__)


def _claim(claims: dict, *names: str) -> str:
    for name in names:
        value = claims.get(name)
        if value:
            return str(value)
    return ""


def resolve_member(claims: dict) -> Member | None:
    """Find or create the member behind a set of validated session claims."""
    external_id = claims["sub"]
    member = Member.objects.select_related("agency").filter(external_id=external_id).first()
    if member is not None:
        return member

    email = _claim(claims, "email", "primary_email_address", "email_address")
    if not email:
        logger.warning("identity.session_without_email", external_id=external_id)
        return None

    # A member created by an admin before first sign-in is linked by email.
    member = Member.objects.filter(email__iexact=email, external_id__isnull=True).first()
    if member is not None:
        member.external_id = external_id
        member.save(update_fields=["external_id", "updated_at"])
        logger.info("identity.member_linked", member_id=member.pk, external_id=external_id)
        return member

    try:
        with transaction.atomic():
            member = Member.objects.create_user(
                email=email,
                external_id=external_id,
                first_name=_claim(claims, "first_name", "given_name"),
                last_name=_claim(claims, "last_name", "family_name"),
            )
    except IntegrityError:
        return Member.objects.filter(external_id=external_id).first()

    logger.info("identity.member_created", member_id=member.pk, external_id=external_id)
    return member


class IdentityProviderBackend(ModelBackend):
    """Authenticate with ``authenticate(request, session_token=...)``."""

    def authenticate(self, request, session_token=None, **kwargs):  # type: ignore
        if not session_token:
            return None
        try:
            claims = decode_session_token(session_token)
        except InvalidSessionToken as exc:
            logger.info("identity.session_rejected", reason=str(exc))
            return None

        member = resolve_member(claims)
        if member is None or not self.user_can_authenticate(member):
            return None
        return member
