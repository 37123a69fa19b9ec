"""Activity log entries written by every mutating membership operation."""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import models, transaction

logger = logging.getLogger(__name__)


class Activity(models.Model):
    """One recorded change to an agency or member."""

    class Type(models.TextChoices):
        MEMBER_CREATED = "MEMBER_CREATED", "Member created"
        MEMBER_UPDATED = "MEMBER_UPDATED", "Member updated"
        MEMBER_DELETED = "MEMBER_DELETED", "Member deleted"
        AGENCY_CREATED = "AGENCY_CREATED", "Agency created"
        AGENCY_UPDATED = "AGENCY_UPDATED", "Agency updated"
        AGENCY_DELETED = "AGENCY_DELETED", "Agency deleted"
        ROLE_ASSIGNED = "ROLE_ASSIGNED", "Role assigned"

    type = models.CharField(max_length=32, choices=Type.choices)
    description = models.TextField()
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activities",
    )
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Activities"
        indexes = [
            models.Index(fields=["actor", "created_at"], name="activity_actor_created_idx"),
            models.Index(fields=["type", "created_at"], name="activity_type_created_idx"),
        ]
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.actor} - {self.type} - {self.created_at}"

    @classmethod
    def log(cls, actor, type, description, request=None, details=None):
        """Record an activity; failures are logged and never propagate."""
        entry = cls(
            actor=actor if getattr(actor, "pk", None) else None,
            type=type,
            description=description,
            details=details or {},
        )

        if request is not None:
            entry.ip_address = cls.get_client_ip(request)
            entry.user_agent = request.META.get("HTTP_USER_AGENT", "")

        try:
            with transaction.atomic():
                entry.save()
        except Exception:
            logger.exception("Error logging activity %s", type)
            return None
        return entry

    @staticmethod
    def get_client_ip(request):
        x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
        if x_forwarded_for:
            return x_forwarded_for.split(",")[0].strip()
        return request.META.get("REMOTE_ADDR")
