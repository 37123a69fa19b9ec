"""Serializers for the agency, member and onboarding API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.models import ONBOARDING_ROLES, Agency, Member, MembershipType, Role, Status


class AgencySerializer(serializers.ModelSerializer):
    """Agency as listed."""

    membership_type_display = serializers.CharField(source="get_membership_type_display", read_only=True)
    member_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Agency
        fields = [
            "id",
            "member_number",
            "name",
            "email",
            "phone",
            "address",
            "city",
            "state",
            "zip_code",
            "website",
            "membership_type",
            "membership_type_display",
            "status",
            "primary_contact_name",
            "primary_contact_email",
            "primary_contact_phone",
            "member_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AgencyMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = Member
        fields = ["id", "email", "first_name", "last_name", "name", "role", "status", "created_at"]
        read_only_fields = fields


class AgencyDetailSerializer(AgencySerializer):
    """Agency with its members."""

    users = AgencyMemberSerializer(source="members", many=True, read_only=True)

    class Meta(AgencySerializer.Meta):
        fields = AgencySerializer.Meta.fields + ["users"]
        read_only_fields = fields


class AgencyWriteSerializer(serializers.Serializer):
    """Input for agency create and update.

    Required fields are enforced by the service layer so that the API and
    the pages report the same message.
    """

    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    state = serializers.CharField(required=False, allow_blank=True, max_length=2)
    zip_code = serializers.CharField(required=False, allow_blank=True, max_length=10)
    website = serializers.URLField(required=False, allow_blank=True)
    membership_type = serializers.ChoiceField(
        choices=MembershipType.choices, required=False, allow_null=True, allow_blank=True
    )
    status = serializers.ChoiceField(choices=Status.choices, required=False, allow_blank=True)
    primary_contact_first_name = serializers.CharField(required=False, allow_blank=True)
    primary_contact_last_name = serializers.CharField(required=False, allow_blank=True)
    primary_contact_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    primary_contact_email = serializers.EmailField(required=False, allow_blank=True)
    primary_contact_phone = serializers.CharField(required=False, allow_blank=True, max_length=32)


class MemberWriteSerializer(serializers.Serializer):
    first_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    last_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    role = serializers.ChoiceField(choices=Role.choices, required=False, allow_blank=True)
    agency_id = serializers.IntegerField(required=False, allow_null=True)
    membership_type = serializers.ChoiceField(choices=MembershipType.choices, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Status.choices, required=False, allow_blank=True)


class OnboardingSerializer(serializers.Serializer):
    """Onboarding choice; field names follow the sign-up form."""

    role = serializers.CharField(required=False, allow_blank=True)
    agencyId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    accessCode = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_role(self, value: str) -> str:
        if value not in ONBOARDING_ROLES:
            raise serializers.ValidationError("Invalid role")
        return value
