"""URL declarations for identity-provider webhooks (namespace: webhooks)."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .webhooks import identity_webhook

app_name = "webhooks"

urlpatterns = [
    path("identity/", identity_webhook, name="identity"),
]
