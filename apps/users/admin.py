"""Admin registrations for the users domain."""

from __future__ import annotations

from django import forms
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import Agency, Member


class MemberCreationForm(forms.ModelForm):
    """Admin add form; credentials stay with the identity provider."""

    class Meta:
        model = Member
        fields = ("email", "first_name", "last_name", "role", "agency")

    def save(self, commit=True):  # type: ignore
        member = super().save(commit=False)
        member.set_unusable_password()
        if commit:
            member.save()
        return member


class MemberInline(admin.TabularInline):
    model = Member
    fields = ("email", "name", "role", "status")
    readonly_fields = fields
    extra = 0
    can_delete = False
    show_change_link = True


@admin.register(Agency)
class AgencyAdmin(admin.ModelAdmin):
    list_display = ("member_number", "name", "email", "membership_type", "status", "created_at")
    list_filter = ("status", "membership_type")
    search_fields = ("member_number", "name", "email", "primary_contact_email")
    readonly_fields = ("member_number", "created_at", "updated_at")
    inlines = [MemberInline]


@admin.register(Member)
class MemberAdmin(BaseUserAdmin):
    add_form = MemberCreationForm
    fieldsets = (
        (None, {"fields": ("email", "external_id")}),
        (
            _("Personal info"),
            {"fields": ("first_name", "last_name", "name", "phone")},
        ),
        (
            _("Membership"),
            {"fields": ("role", "agency", "membership_type", "status")},
        ),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "first_name", "last_name", "role", "agency"),
            },
        ),
    )
    list_display = ("email", "name", "role", "agency", "status", "external_id")
    list_filter = ("role", "status", "membership_type", "is_staff")
    search_fields = ("email", "first_name", "last_name", "external_id")
    ordering = ("email",)
    readonly_fields = ("name", "created_at", "updated_at", "date_joined")
