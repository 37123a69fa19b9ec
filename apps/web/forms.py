"""Forms for the member, agency and onboarding pages."""

from __future__ import annotations

from django import forms  # type: ignore

from apps.users import policy
from apps.users.models import ONBOARDING_ROLES, Agency, MembershipType, Role, Status

BLANK = [("", "---------")]


def agency_choices():
    return BLANK + [(str(pk), name) for pk, name in Agency.objects.order_by("name").values_list("pk", "name")]


class MemberForm(forms.Form):
    first_name = forms.CharField(max_length=150)
    last_name = forms.CharField(max_length=150)
    email = forms.EmailField()
    phone = forms.CharField(max_length=32, required=False)
    role = forms.ChoiceField(choices=())
    agency_id = forms.ChoiceField(choices=(), required=False, label="Agency")
    membership_type = forms.ChoiceField(choices=MembershipType.choices, initial=MembershipType.A1_AGENCY)
    status = forms.ChoiceField(choices=Status.choices, initial=Status.ACTIVE)

    def __init__(self, *args, actor=None, **kwargs):
        super().__init__(*args, **kwargs)
        roles = policy.assignable_roles(actor)
        current = self.initial.get("role")
        if current and current not in roles:
            # Keep legacy roles displayable without offering them.
            roles = [current] + roles
        self.fields["role"].choices = [(role, Role(role).label) for role in roles]
        if policy.is_super_admin(actor):
            self.fields["agency_id"].choices = agency_choices()
        else:
            del self.fields["agency_id"]


class AgencyForm(forms.Form):
    name = forms.CharField(max_length=255)
    email = forms.EmailField()
    phone = forms.CharField(max_length=32, required=False)
    address = forms.CharField(max_length=255, required=False)
    city = forms.CharField(max_length=100, required=False)
    state = forms.CharField(max_length=2, required=False)
    zip_code = forms.CharField(max_length=10, required=False)
    website = forms.URLField(required=False)
    membership_type = forms.ChoiceField(choices=BLANK + list(MembershipType.choices), required=False)
    status = forms.ChoiceField(choices=Status.choices, initial=Status.PENDING)
    primary_contact_first_name = forms.CharField(max_length=150, required=False, label="Contact first name")
    primary_contact_last_name = forms.CharField(max_length=150, required=False, label="Contact last name")
    primary_contact_email = forms.EmailField(required=False, label="Contact email")
    primary_contact_phone = forms.CharField(max_length=32, required=False, label="Contact phone")

    def __init__(self, *args, actor=None, **kwargs):
        super().__init__(*args, **kwargs)
        if not policy.can_change_agency_classification(actor):
            self.fields["membership_type"].disabled = True
            self.fields["status"].disabled = True

    @classmethod
    def initial_for(cls, agency: Agency) -> dict:
        first, _, last = agency.primary_contact_name.partition(" ")
        return {
            "name": agency.name,
            "email": agency.email,
            "phone": agency.phone,
            "address": agency.address,
            "city": agency.city,
            "state": agency.state,
            "zip_code": agency.zip_code,
            "website": agency.website,
            "membership_type": agency.membership_type or "",
            "status": agency.status,
            "primary_contact_first_name": first,
            "primary_contact_last_name": last,
            "primary_contact_email": agency.primary_contact_email,
            "primary_contact_phone": agency.primary_contact_phone,
        }


class OnboardingForm(forms.Form):
    role = forms.ChoiceField(
        choices=[(role, Role(role).label) for role in ONBOARDING_ROLES],
        widget=forms.RadioSelect,
    )
    agency_id = forms.ChoiceField(choices=(), required=False, label="Agency")
    access_code = forms.CharField(required=False, widget=forms.PasswordInput, label="Access code")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["agency_id"].choices = agency_choices()


class RoleRepairForm(forms.Form):
    role = forms.ChoiceField(choices=Role.choices, initial=Role.AGENCY_ADMIN)
    agency_id = forms.CharField(required=False, label="Agency ID or member number")
