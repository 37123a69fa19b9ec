"""Tests for the server-rendered pages."""

from __future__ import annotations

from unittest import mock

from django.contrib.messages import get_messages
from django.test import TestCase, override_settings
from django.urls import reverse

from apps.users.models import Agency, Member, Role, Status


def flashed(response) -> list[str]:
    return [str(message) for message in get_messages(response.wsgi_request)]


class SignInPageTests(TestCase):
    def test_home_for_anonymous(self) -> None:
        response = self.client.get(reverse("web:home"))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Sign in")

    def test_pages_require_sign_in(self) -> None:
        response = self.client.get(reverse("web:dashboard"))
        self.assertRedirects(response, f"{reverse('web:sign-in')}?next={reverse('web:dashboard')}")

    def test_sign_in_links_to_provider(self) -> None:
        response = self.client.get(reverse("web:sign-in"))
        self.assertContains(response, "https://identity.test/sign-in")

    @mock.patch("apps.users.authentication.decode_session_token")
    def test_callback_sends_new_member_to_onboarding(self, decode) -> None:
        decode.return_value = {"sub": "user_1", "email": "new@example.com"}
        self.client.cookies["__session"] = "session-jwt"
        response = self.client.get(reverse("web:sign-in-callback"))
        self.assertRedirects(response, reverse("web:onboarding"))
        decode.assert_called_once_with("session-jwt")

    @mock.patch("apps.users.authentication.decode_session_token")
    def test_callback_sends_onboarded_member_to_dashboard(self, decode) -> None:
        Member.objects.create_user(email="m@example.com", external_id="user_2", role=Role.AGENCY_USER)
        decode.return_value = {"sub": "user_2", "email": "m@example.com"}
        response = self.client.get(reverse("web:sign-in-callback"), {"token": "jwt"})
        self.assertRedirects(response, reverse("web:dashboard"))

    def test_callback_without_token(self) -> None:
        response = self.client.get(reverse("web:sign-in-callback"))
        self.assertRedirects(response, reverse("web:sign-in"))

    def test_sign_out(self) -> None:
        self.client.force_login(Member.objects.create_user(email="m@example.com", role=Role.AGENCY_USER))
        response = self.client.post(reverse("web:sign-out"))
        self.assertRedirects(response, reverse("web:home"))
        self.assertRedirects(self.client.get(reverse("web:dashboard")), "/sign-in/?next=/dashboard/")


class OnboardingPageTests(TestCase):
    def setUp(self) -> None:
        self.agency = Agency.objects.create(name="Acme", email="info@acme.com")
        self.member = Member.objects.create_user(email="new@example.com")
        self.client.force_login(self.member)

    def test_dashboard_redirects_until_onboarded(self) -> None:
        self.assertRedirects(self.client.get(reverse("web:dashboard")), reverse("web:onboarding"))

    def test_choose_agency(self) -> None:
        response = self.client.post(
            reverse("web:onboarding"), {"role": Role.AGENCY_USER, "agency_id": str(self.agency.pk)}
        )
        self.assertRedirects(response, reverse("web:dashboard"))
        self.member.refresh_from_db()
        self.assertEqual(self.member.agency, self.agency)

    def test_wrong_access_code(self) -> None:
        response = self.client.post(reverse("web:onboarding"), {"role": Role.SUPER_ADMIN, "access_code": "nope"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("Invalid access code", flashed(response))

    def test_onboarded_member_skips_page(self) -> None:
        self.member.role = Role.AGENCY_USER
        self.member.save()
        self.assertRedirects(self.client.get(reverse("web:onboarding")), reverse("web:dashboard"))


class MemberPageTests(TestCase):
    def setUp(self) -> None:
        self.agency = Agency.objects.create(name="Acme", email="info@acme.com", status=Status.ACTIVE)
        self.other_agency = Agency.objects.create(name="Other", email="info@other.com")
        self.agency_admin = Member.objects.create_user(
            email="boss@acme.com", first_name="Bea", last_name="Boss", role=Role.AGENCY_ADMIN, agency=self.agency
        )
        self.member = Member.objects.create_user(
            email="m@acme.com", first_name="Mo", last_name="Member", role=Role.AGENCY_USER, agency=self.agency
        )
        self.outsider = Member.objects.create_user(
            email="x@other.com", first_name="Xi", last_name="Out", role=Role.AGENCY_USER, agency=self.other_agency
        )

    def test_dashboard_stats(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.get(reverse("web:dashboard"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["member_count"], 2)
        self.assertEqual(response.context["active_agency_count"], 1)
        self.assertContains(response, "Agency Admin")

    def test_member_list_filters(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.get(reverse("web:member-list"), {"search": "mo"})
        self.assertEqual(list(response.context["members"]), [self.member])
        self.assertNotContains(response, "x@other.com")

    def test_create_member(self) -> None:
        self.client.force_login(self.agency_admin)
        payload = {
            "first_name": "Ann",
            "last_name": "Lee",
            "email": "ann@acme.com",
            "role": Role.AGENCY_USER,
            "membership_type": "A1_AGENCY",
            "status": Status.ACTIVE,
        }
        response = self.client.post(reverse("web:member-create"), payload)
        self.assertRedirects(response, reverse("web:member-list"))
        self.assertEqual(Member.objects.get(email="ann@acme.com").agency, self.agency)

    def test_member_cannot_open_create_page(self) -> None:
        self.client.force_login(self.member)
        self.assertRedirects(self.client.get(reverse("web:member-create")), reverse("web:dashboard"))

    def test_edit_role_choices_exclude_super_admin(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.get(reverse("web:member-edit", args=[self.member.pk]))
        roles = [value for value, _ in response.context["form"].fields["role"].choices]
        self.assertNotIn(Role.SUPER_ADMIN, roles)
        self.assertNotIn("agency_id", response.context["form"].fields)

    def test_edit_other_agency_member_redirects(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.get(reverse("web:member-edit", args=[self.outsider.pk]))
        self.assertRedirects(response, reverse("web:member-list"))

    def test_edit_member(self) -> None:
        self.client.force_login(self.agency_admin)
        payload = {
            "first_name": "Mo",
            "last_name": "Changed",
            "email": "m@acme.com",
            "role": Role.AGENCY_ADMIN,
            "membership_type": "A1_AGENCY",
            "status": Status.ACTIVE,
        }
        response = self.client.post(reverse("web:member-edit", args=[self.member.pk]), payload)
        self.assertRedirects(response, reverse("web:member-list"))
        self.member.refresh_from_db()
        self.assertEqual(self.member.name, "Mo Changed")
        self.assertEqual(self.member.role, Role.AGENCY_ADMIN)

    def test_delete_member(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.post(reverse("web:member-delete", args=[self.member.pk]))
        self.assertRedirects(response, reverse("web:member-list"))
        self.assertFalse(Member.objects.filter(pk=self.member.pk).exists())

    def test_delete_other_agency_member_shows_error(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.post(reverse("web:member-delete", args=[self.outsider.pk]))
        self.assertIn("You can only delete members in your agency", flashed(response))
        self.assertTrue(Member.objects.filter(pk=self.outsider.pk).exists())


class AgencyPageTests(TestCase):
    def setUp(self) -> None:
        self.agency = Agency.objects.create(name="Acme", email="info@acme.com", status=Status.ACTIVE)
        self.other_agency = Agency.objects.create(name="Other", email="info@other.com")
        self.super_admin = Member.objects.create_user(email="root@example.com", role=Role.SUPER_ADMIN)
        self.agency_admin = Member.objects.create_user(
            email="boss@acme.com", role=Role.AGENCY_ADMIN, agency=self.agency
        )
        self.member = Member.objects.create_user(email="m@acme.com", role=Role.AGENCY_USER, agency=self.agency)

    def test_members_redirected_from_agencies(self) -> None:
        self.client.force_login(self.member)
        self.assertRedirects(self.client.get(reverse("web:agency-list")), reverse("web:dashboard"))

    def test_agency_admin_sees_only_own_agency(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.get(reverse("web:agency-list"))
        self.assertEqual(list(response.context["agencies"]), [self.agency])

    def test_only_super_admin_creates(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.get(reverse("web:agency-create"))
        self.assertRedirects(response, reverse("web:agency-list"))
        self.assertIn("Only Super Admins can create new agencies.", flashed(response))

    def test_create_agency(self) -> None:
        self.client.force_login(self.super_admin)
        response = self.client.post(
            reverse("web:agency-create"), {"name": "New", "email": "new@example.com", "status": Status.ACTIVE}
        )
        agency = Agency.objects.get(email="new@example.com")
        self.assertRedirects(response, reverse("web:agency-detail", args=[agency.pk]))
        self.assertEqual(agency.status, Status.ACTIVE)

    def test_detail_lists_members(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.get(reverse("web:agency-detail", args=[self.agency.pk]))
        self.assertContains(response, "m@acme.com")

    def test_detail_other_agency_redirects(self) -> None:
        self.client.force_login(self.agency_admin)
        response = self.client.get(reverse("web:agency-detail", args=[self.other_agency.pk]))
        self.assertRedirects(response, reverse("web:agency-list"))

    def test_classification_read_only_for_agency_admin(self) -> None:
        self.client.force_login(self.agency_admin)
        url = reverse("web:agency-edit", args=[self.agency.pk])
        form = self.client.get(url).context["form"]
        self.assertTrue(form.fields["status"].disabled)

        response = self.client.post(
            url, {"name": "Acme Renamed", "email": "info@acme.com", "status": Status.SUSPENDED}
        )
        self.assertRedirects(response, reverse("web:agency-detail", args=[self.agency.pk]))
        self.agency.refresh_from_db()
        self.assertEqual(self.agency.name, "Acme Renamed")
        self.assertEqual(self.agency.status, Status.ACTIVE)

    def test_delete_agency(self) -> None:
        self.client.force_login(self.super_admin)
        response = self.client.post(reverse("web:agency-delete", args=[self.agency.pk]))
        self.assertRedirects(response, reverse("web:agency-list"))
        self.member.refresh_from_db()
        self.assertIsNone(self.member.agency)


class DiagnosticPageTests(TestCase):
    def setUp(self) -> None:
        self.member = Member.objects.create_user(email="m@example.com", role=Role.AGENCY_USER)
        self.client.force_login(self.member)

    def test_check_role(self) -> None:
        response = self.client.get(reverse("web:check-role"))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "AGENCY_USER")

    def test_fix_role_page(self) -> None:
        response = self.client.post(reverse("web:fix-role"), {"role": Role.AGENCY_ADMIN})
        self.assertRedirects(response, reverse("web:check-role"))
        self.member.refresh_from_db()
        self.assertEqual(self.member.role, Role.AGENCY_ADMIN)

    @override_settings(ROLE_REPAIR_ENABLED=False)
    def test_fix_role_page_disabled(self) -> None:
        self.assertEqual(self.client.get(reverse("web:fix-role")).status_code, 404)

    def test_debug_db_requires_super_admin(self) -> None:
        response = self.client.get(reverse("web:debug-db"))
        self.assertRedirects(response, reverse("web:dashboard"))

    def test_debug_db_for_super_admin(self) -> None:
        self.member.role = Role.SUPER_ADMIN
        self.member.save()
        response = self.client.get(reverse("web:debug-db"))
        self.assertContains(response, "m@example.com")
