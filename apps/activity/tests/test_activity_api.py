"""Tests for the activity log model and API."""

from __future__ import annotations

from unittest import mock

from django.db import DatabaseError
from django.test import RequestFactory
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activity.models import Activity
from apps.users import services
from apps.users.models import Agency, Member, Role


class ActivityLogTests(APITestCase):
    def test_log_captures_request_details(self) -> None:
        member = Member.objects.create_user(email="root@example.com", role=Role.SUPER_ADMIN)
        request = RequestFactory().post(
            "/", HTTP_X_FORWARDED_FOR="203.0.113.5, 10.0.0.1", HTTP_USER_AGENT="pytest-agent"
        )
        entry = Activity.log(member, Activity.Type.AGENCY_CREATED, "Created agency: Acme", request=request)
        self.assertEqual(entry.ip_address, "203.0.113.5")
        self.assertEqual(entry.user_agent, "pytest-agent")
        self.assertEqual(entry.details, {})

    def test_log_falls_back_to_remote_addr(self) -> None:
        request = RequestFactory().get("/", REMOTE_ADDR="198.51.100.7")
        self.assertEqual(Activity.get_client_ip(request), "198.51.100.7")

    def test_log_without_actor(self) -> None:
        entry = Activity.log(None, Activity.Type.ROLE_ASSIGNED, "system")
        self.assertIsNone(entry.actor)

    def test_failed_write_does_not_fail_the_operation(self) -> None:
        actor = Member.objects.create_user(email="root@example.com", role=Role.SUPER_ADMIN)
        with mock.patch.object(Activity, "save", side_effect=DatabaseError("disk full")):
            with self.assertLogs("apps.activity.models", level="ERROR") as logs:
                agency = services.create_agency(actor, {"name": "Acme", "email": "info@acme.com"})

        self.assertTrue(Agency.objects.filter(pk=agency.pk, name="Acme").exists())
        self.assertFalse(Activity.objects.exists())
        self.assertIn("Error logging activity", logs.output[0])


class ActivityAPITests(APITestCase):
    def setUp(self) -> None:
        self.agency = Agency.objects.create(name="Acme", email="info@acme.com")
        self.other_agency = Agency.objects.create(name="Other", email="info@other.com")
        self.super_admin = Member.objects.create_user(email="root@example.com", role=Role.SUPER_ADMIN)
        self.agency_admin = Member.objects.create_user(
            email="boss@acme.com", role=Role.AGENCY_ADMIN, agency=self.agency
        )
        self.other_admin = Member.objects.create_user(
            email="boss@other.com", role=Role.AGENCY_ADMIN, agency=self.other_agency
        )
        self.member = Member.objects.create_user(email="m@acme.com", role=Role.AGENCY_USER, agency=self.agency)

        Activity.log(self.super_admin, Activity.Type.AGENCY_CREATED, "Created agency: Acme")
        Activity.log(self.agency_admin, Activity.Type.MEMBER_CREATED, "Created member: M")
        Activity.log(self.other_admin, Activity.Type.MEMBER_CREATED, "Created member: O")

    def test_super_admin_sees_everything_newest_first(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.get(reverse("activity:activity-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [a["description"] for a in response.data],
            ["Created member: O", "Created member: M", "Created agency: Acme"],
        )

    def test_agency_admin_sees_own_agency_activity(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.get(reverse("activity:activity-list"))
        self.assertEqual([a["actor_email"] for a in response.data], ["boss@acme.com"])

    def test_filter_by_type(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.get(reverse("activity:activity-list"), {"type": Activity.Type.AGENCY_CREATED})
        self.assertEqual(len(response.data), 1)

    def test_members_are_forbidden(self) -> None:
        self.client.force_authenticate(self.member)
        response = self.client.get(reverse("activity:activity-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "Insufficient permissions"})
