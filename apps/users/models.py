"""Membership domain models for MemberHub.

Agencies own members. Every member carries a role that drives every
permission decision in the system (see ``apps.users.policy``), a
membership type and a status. The role is mirrored to the identity
provider's user metadata so that the provider's session claims agree
with the database.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Role(models.TextChoices):
    SUPER_ADMIN = "SUPER_ADMIN", _("Super Admin")
    AGENCY_ADMIN = "AGENCY_ADMIN", _("Agency Admin")
    ADMIN = "ADMIN", _("Agency Admin (legacy)")
    AGENCY_USER = "AGENCY_USER", _("Member")
    PRIMARY = "PRIMARY", _("Primary Member")
    STANDARD = "STANDARD", _("Standard Member")
    GUEST = "GUEST", _("Guest")


AGENCY_ADMIN_ROLES = frozenset({Role.AGENCY_ADMIN, Role.ADMIN})
ADMIN_ROLES = frozenset({Role.SUPER_ADMIN}) | AGENCY_ADMIN_ROLES
MEMBER_ROLES = frozenset({Role.AGENCY_USER, Role.PRIMARY, Role.STANDARD, Role.GUEST})
ONBOARDING_ROLES = (Role.AGENCY_USER, Role.AGENCY_ADMIN, Role.SUPER_ADMIN)


class MembershipType(models.TextChoices):
    A1_AGENCY = "A1_AGENCY", _("A1 - Agency")
    A2_BRANCH = "A2_BRANCH", _("A2 - Branch")
    A3_ASSOCIATE = "A3_ASSOCIATE", _("A3 - Associate")
    STERLING_PARTNER = "STERLING_PARTNER", _("Sterling Partner")


class Status(models.TextChoices):
    ACTIVE = "ACTIVE", _("Active")
    INACTIVE = "INACTIVE", _("Inactive")
    SUSPENDED = "SUSPENDED", _("Suspended")
    PENDING = "PENDING", _("Pending")


def full_name(first_name: str | None, last_name: str | None) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


class Agency(models.Model):
    """An organization that members belong to."""

    member_number = models.CharField(max_length=10, unique=True, null=True, blank=True)
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=2, blank=True)
    zip_code = models.CharField(max_length=10, blank=True)
    website = models.URLField(blank=True)
    membership_type = models.CharField(
        max_length=32,
        choices=MembershipType.choices,
        null=True,
        blank=True,
    )
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    primary_contact_name = models.CharField(max_length=255, blank=True)
    primary_contact_email = models.EmailField(blank=True)
    primary_contact_phone = models.CharField(max_length=32, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Agency")
        verbose_name_plural = _("Agencies")
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return self.name

    def save(self, *args: Any, **kwargs: Any) -> None:
        super().save(*args, **kwargs)
        if not self.member_number:
            self.member_number = f"AG{self.pk:08d}"
            type(self).objects.filter(pk=self.pk).update(member_number=self.member_number)


class MemberManager(BaseUserManager):
    """Manager using email as the login; passwords are optional."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a member.")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            # Credentials live with the identity provider
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", Role.SUPER_ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    def get_by_email(self, email: str):
        return self.get(email__iexact=email)


class Member(AbstractUser):
    """A person in the system, optionally linked to an identity-provider user."""

    username = models.CharField(_("Display name"), max_length=150, blank=True)
    email = models.EmailField(_("Email"), unique=True)
    external_id = models.CharField(
        _("Identity provider ID"),
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, blank=True, default="")
    agency = models.ForeignKey(
        Agency,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="members",
    )
    membership_type = models.CharField(
        max_length=32,
        choices=MembershipType.choices,
        default=MembershipType.A1_AGENCY,
    )
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MemberManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        verbose_name = _("Member")
        verbose_name_plural = _("Members")
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display() or 'no role'})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.name = full_name(self.first_name, self.last_name) or self.name
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and ({"first_name", "last_name"} & set(update_fields)):
            kwargs["update_fields"] = set(update_fields) | {"name"}
        super().save(*args, **kwargs)

    # --- Role helpers -------------------------------------------------------
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    def is_agency_admin(self) -> bool:
        return self.role in AGENCY_ADMIN_ROLES

    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_onboarded(self) -> bool:
        return bool(self.role)

    def identity_metadata(self) -> dict[str, Any]:
        """The metadata document mirrored to the identity provider."""
        return {
            "role": self.role or None,
            "agencyId": self.agency_id,
            "agencyName": self.agency.name if self.agency_id else None,
        }
