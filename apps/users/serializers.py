"""Serializers shared by the auth, profile and member endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import Agency

Member = get_user_model()


class AgencyShortSerializer(serializers.ModelSerializer):
    """Compact agency embedded in member responses."""

    class Meta:
        model = Agency
        fields = ["id", "member_number", "name", "email", "membership_type", "status"]


class MemberSerializer(serializers.ModelSerializer):
    """The member as returned by the API."""

    agency = AgencyShortSerializer(read_only=True)
    role_display = serializers.CharField(source="get_role_display", read_only=True)

    class Meta:
        model = Member
        fields = [
            "id",
            "external_id",
            "email",
            "first_name",
            "last_name",
            "name",
            "phone",
            "role",
            "role_display",
            "agency",
            "membership_type",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProfileSerializer(MemberSerializer):
    """Current member with onboarding state."""

    onboarded = serializers.BooleanField(source="is_onboarded", read_only=True)
    metadata = serializers.SerializerMethodField()

    class Meta(MemberSerializer.Meta):
        fields = MemberSerializer.Meta.fields + ["onboarded", "metadata"]
        read_only_fields = fields

    def get_metadata(self, obj) -> dict:
        return obj.identity_metadata()
