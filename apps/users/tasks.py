"""Background propagation of member changes to the identity provider."""

from __future__ import annotations

import structlog
from celery import shared_task

from .identity import IdentityProviderError, get_client

logger = structlog.get_logger(__name__)


@shared_task(
    name="users.sync_identity_metadata",
    autoretry_for=(IdentityProviderError,),
    retry_backoff=True,
    max_retries=3,
)
def sync_identity_metadata(member_id: int) -> dict | None:
    """Push the member's role and agency into the provider user's metadata."""
    from .models import Member

    member = Member.objects.select_related("agency").filter(pk=member_id).first()
    if member is None or not member.external_id:
        logger.info("identity.sync_skipped", member_id=member_id)
        return None

    metadata = member.identity_metadata()
    get_client().update_user_metadata(member.external_id, metadata)
    logger.info("identity.synced", member_id=member_id, external_id=member.external_id, **metadata)
    return metadata


@shared_task(
    name="users.delete_identity",
    autoretry_for=(IdentityProviderError,),
    retry_backoff=True,
    max_retries=3,
)
def delete_identity(external_id: str) -> None:
    get_client().delete_user(external_id)
    logger.info("identity.deleted", external_id=external_id)
