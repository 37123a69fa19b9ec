"""Webhook endpoint receiving identity-provider user events."""

from __future__ import annotations

import json
from typing import Any

import structlog
from django.conf import settings  # type: ignore
from django.http import HttpRequest, HttpResponse, JsonResponse  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore

from . import provisioning
from .identity import InvalidWebhookSignature, verify_webhook_signature

logger = structlog.get_logger(__name__)

HANDLERS = {
    "user.created": provisioning.provision_created_user,
    "user.updated": provisioning.sync_updated_user,
    "user.deleted": provisioning.unlink_deleted_user,
}


@csrf_exempt
@require_POST
def identity_webhook(request: HttpRequest) -> HttpResponse:
    """Assign roles to newly created provider users and keep linked members in sync."""
    secret = settings.IDENTITY_WEBHOOK_SECRET
    if secret:
        try:
            verify_webhook_signature(request.body, request.headers, secret)
        except InvalidWebhookSignature as exc:
            logger.warning("webhook.signature_rejected", reason=str(exc))
            return JsonResponse({"error": "Invalid signature"}, status=401)

    try:
        payload: dict[str, Any] = json.loads(request.body.decode("utf-8"))
        event_type = payload["type"]
        data = payload.get("data") or {}
    except (json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError) as exc:
        logger.warning("webhook.invalid_payload", error=str(exc))
        return JsonResponse({"error": "Webhook processing failed"}, status=400)

    handler = HANDLERS.get(event_type)
    if handler is None:
        logger.info("webhook.ignored", event_type=event_type)
        return JsonResponse({"received": True})

    try:
        body = handler(data)
    except Exception as exc:
        logger.error("webhook.failed", event_type=event_type, error=str(exc), exc_info=True)
        return JsonResponse({"error": "Failed to process webhook"}, status=500)
    return JsonResponse(body)
