"""Page views.

Pages go through the same policy and services as the API; domain errors
are shown with the messages framework instead of JSON bodies.
"""

from __future__ import annotations

import structlog
from django.conf import settings  # type: ignore
from django.contrib import messages  # type: ignore
from django.contrib.auth import authenticate, login, logout  # type: ignore
from django.contrib.auth.decorators import login_required  # type: ignore
from django.http import Http404  # type: ignore
from django.shortcuts import redirect, render  # type: ignore
from django.utils.http import url_has_allowed_host_and_scheme  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore

from apps.diagnostics import services as diagnostics
from apps.users import onboarding, policy, services
from apps.users.api.filters import MemberFilterSet
from apps.users.models import Agency, Member, MembershipType, Status
from shared.exceptions import MemberHubError

from .forms import AgencyForm, MemberForm, OnboardingForm, RoleRepairForm

logger = structlog.get_logger(__name__)


def home(request):
    if request.user.is_authenticated:
        return redirect("web:dashboard")
    return render(request, "web/home.html", {"sign_in_url": settings.IDENTITY_SIGN_IN_URL})


# --- Sign-in ------------------------------------------------------------------

def sign_in(request):
    if request.user.is_authenticated:
        return redirect("web:dashboard")
    return render(request, "web/sign_in.html", {"sign_in_url": settings.IDENTITY_SIGN_IN_URL})


def sign_in_callback(request):
    """Land here from the provider with its session cookie (or ``?token=``)."""
    token = request.COOKIES.get(settings.IDENTITY_SESSION_COOKIE) or request.GET.get("token")
    member = authenticate(request, session_token=token)
    if member is None:
        messages.error(request, "Sign-in failed. Please try again.")
        return redirect("web:sign-in")

    login(request, member, backend="apps.users.authentication.IdentityProviderBackend")
    logger.info("web.signed_in", member_id=member.pk)

    if not member.is_onboarded:
        return redirect("web:onboarding")
    next_url = request.GET.get("next")
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return redirect(next_url)
    return redirect("web:dashboard")


@require_POST
def sign_out(request):
    logout(request)
    return redirect("web:home")


@login_required
def onboarding_page(request):
    if request.user.is_onboarded:
        return redirect("web:dashboard")

    form = OnboardingForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            onboarding.complete_onboarding(
                request.user,
                form.cleaned_data["role"],
                agency_id=form.cleaned_data.get("agency_id"),
                access_code=form.cleaned_data.get("access_code"),
                request=request,
            )
        except MemberHubError as exc:
            messages.error(request, exc.message)
        else:
            messages.success(request, "Onboarding completed successfully")
            return redirect("web:dashboard")
    return render(request, "web/onboarding.html", {"form": form})


# --- Dashboard ----------------------------------------------------------------

@login_required
def dashboard(request):
    user = request.user
    if not user.is_onboarded:
        return redirect("web:onboarding")

    members = policy.members_visible_to(user, Member.objects.select_related("agency"))
    agencies = policy.agencies_visible_to(user, Agency.objects.all())
    context = {
        "member_count": members.count(),
        "active_agency_count": agencies.filter(status=Status.ACTIVE).count(),
        "recent_members": members[:10],
        "can_manage": policy.can_manage_members(user),
    }
    return render(request, "web/dashboard.html", context)


# --- Members ------------------------------------------------------------------

@login_required
def member_list(request):
    queryset = policy.members_visible_to(request.user, Member.objects.select_related("agency"))
    filterset = MemberFilterSet(request.GET, queryset=queryset)
    context = {
        "members": filterset.qs,
        "filters": request.GET,
        "statuses": Status.choices,
        "membership_types": MembershipType.choices,
        "can_manage": policy.can_manage_members(request.user),
    }
    return render(request, "web/member_list.html", context)


@login_required
def member_create(request):
    if not policy.can_manage_members(request.user):
        messages.error(request, "You don't have permission to manage members")
        return redirect("web:dashboard")

    form = MemberForm(request.POST or None, actor=request.user)
    if request.method == "POST" and form.is_valid():
        try:
            member = services.create_member(request.user, form.cleaned_data, request=request)
        except MemberHubError as exc:
            messages.error(request, exc.message)
        else:
            messages.success(request, f"Member {member.name} created")
            return redirect("web:member-list")
    return render(request, "web/member_form.html", {"form": form, "member": None})


def _editable_member(request, pk) -> Member | None:
    member = Member.objects.select_related("agency").filter(pk=pk).first()
    if member is None:
        return None
    if policy.is_agency_admin(request.user) and member.agency_id != request.user.agency_id:
        return None
    return member


@login_required
def member_edit(request, pk):
    if not policy.can_manage_members(request.user):
        return redirect("web:dashboard")

    member = _editable_member(request, pk)
    if member is None:
        messages.error(request, "Member not found")
        return redirect("web:member-list")

    initial = {
        "first_name": member.first_name,
        "last_name": member.last_name,
        "email": member.email,
        "phone": member.phone,
        "role": member.role,
        "agency_id": str(member.agency_id or ""),
        "membership_type": member.membership_type,
        "status": member.status,
    }
    form = MemberForm(request.POST or None, initial=initial, actor=request.user)
    if request.method == "POST" and form.is_valid():
        try:
            services.update_member(request.user, member, form.cleaned_data, request=request)
        except MemberHubError as exc:
            messages.error(request, exc.message)
        else:
            messages.success(request, f"Member {member.name} updated")
            return redirect("web:member-list")
    return render(request, "web/member_form.html", {"form": form, "member": member})


@login_required
@require_POST
def member_delete(request, pk):
    member = Member.objects.filter(pk=pk).first()
    if member is None:
        messages.error(request, "Member not found")
        return redirect("web:member-list")
    try:
        services.delete_member(request.user, member, request=request)
    except MemberHubError as exc:
        messages.error(request, exc.message)
    else:
        messages.success(request, "Member deleted successfully")
    return redirect("web:member-list")


# --- Agencies -----------------------------------------------------------------

@login_required
def agency_list(request):
    if not policy.can_manage_members(request.user):
        return redirect("web:dashboard")
    agencies = policy.agencies_visible_to(request.user, Agency.objects.all())
    context = {
        "agencies": agencies,
        "can_create": policy.can_create_agency(request.user),
        "can_delete": policy.can_delete_agency(request.user),
    }
    return render(request, "web/agency_list.html", context)


@login_required
def agency_create(request):
    if not policy.can_create_agency(request.user):
        messages.error(request, "Only Super Admins can create new agencies.")
        return redirect("web:agency-list")

    form = AgencyForm(request.POST or None, actor=request.user)
    if request.method == "POST" and form.is_valid():
        try:
            agency = services.create_agency(request.user, form.cleaned_data, request=request)
        except MemberHubError as exc:
            messages.error(request, exc.message)
        else:
            messages.success(request, f"Agency {agency.name} created")
            return redirect("web:agency-detail", pk=agency.pk)
    return render(request, "web/agency_form.html", {"form": form, "agency": None})


def _viewable_agency(request, pk) -> Agency | None:
    agency = Agency.objects.filter(pk=pk).first()
    if agency is None or not policy.can_view_agency(request.user, agency):
        return None
    return agency


@login_required
def agency_detail(request, pk):
    agency = _viewable_agency(request, pk)
    if agency is None:
        messages.error(request, "Agency not found")
        return redirect("web:agency-list")
    context = {
        "agency": agency,
        "members": agency.members.all(),
        "can_edit": policy.can_edit_agency(request.user, agency),
        "can_delete": policy.can_delete_agency(request.user),
    }
    return render(request, "web/agency_detail.html", context)


@login_required
def agency_edit(request, pk):
    agency = _viewable_agency(request, pk)
    if agency is None:
        messages.error(request, "Agency not found")
        return redirect("web:agency-list")

    form = AgencyForm(request.POST or None, initial=AgencyForm.initial_for(agency), actor=request.user)
    if request.method == "POST" and form.is_valid():
        try:
            services.update_agency(request.user, agency, form.cleaned_data, request=request)
        except MemberHubError as exc:
            messages.error(request, exc.message)
        else:
            messages.success(request, f"Agency {agency.name} updated")
            return redirect("web:agency-detail", pk=agency.pk)
    return render(request, "web/agency_form.html", {"form": form, "agency": agency})


@login_required
@require_POST
def agency_delete(request, pk):
    agency = Agency.objects.filter(pk=pk).first()
    if agency is None:
        messages.error(request, "Agency not found")
        return redirect("web:agency-list")
    try:
        services.delete_agency(request.user, agency, request=request)
    except MemberHubError as exc:
        messages.error(request, exc.message)
        return redirect("web:agency-detail", pk=agency.pk)
    messages.success(request, "Agency deleted successfully")
    return redirect("web:agency-list")


# --- Diagnostics --------------------------------------------------------------

@login_required
def check_role(request):
    context = {
        "metadata": request.user.identity_metadata(),
        "repair_enabled": settings.ROLE_REPAIR_ENABLED,
        "form": RoleRepairForm(),
    }
    return render(request, "web/check_role.html", context)


@login_required
def fix_role(request):
    if not settings.ROLE_REPAIR_ENABLED:
        raise Http404

    form = RoleRepairForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            result = diagnostics.repair_role(
                request.user,
                form.cleaned_data["role"],
                agency_id=form.cleaned_data.get("agency_id"),
                request=request,
            )
        except MemberHubError as exc:
            messages.error(request, exc.message)
        else:
            messages.success(request, result["message"])
            return redirect("web:check-role")
    return render(request, "web/fix_role.html", {"form": form})


@login_required
def debug_db(request):
    if not policy.is_super_admin(request.user):
        messages.error(request, "Access denied")
        return redirect("web:dashboard")
    return render(request, "web/debug_db.html", {"snapshot": diagnostics.database_snapshot()})
