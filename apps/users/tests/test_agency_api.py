"""API tests for agency endpoints."""

from __future__ import annotations

from unittest import mock

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import Agency, Member, MembershipType, Role, Status


class AgencyAPITests(APITestCase):
    def setUp(self) -> None:
        self.agency = Agency.objects.create(
            name="Acme", email="info@acme.com", status=Status.ACTIVE, membership_type=MembershipType.A1_AGENCY
        )
        self.other_agency = Agency.objects.create(name="Other", email="info@other.com")
        self.super_admin = Member.objects.create_user(email="root@example.com", role=Role.SUPER_ADMIN)
        self.agency_admin = Member.objects.create_user(
            email="boss@acme.com", role=Role.AGENCY_ADMIN, agency=self.agency
        )
        self.member = Member.objects.create_user(email="m@acme.com", role=Role.AGENCY_USER, agency=self.agency)

    def test_requires_authentication(self) -> None:
        response = self.client.get(reverse("api:agency-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_super_admin_lists_all_newest_first(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.get(reverse("api:agency-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([a["name"] for a in response.data], ["Other", "Acme"])

    def test_list_filters(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.get(reverse("api:agency-list"), {"status": Status.ACTIVE})
        self.assertEqual([a["name"] for a in response.data], ["Acme"])
        response = self.client.get(reverse("api:agency-list"), {"search": "other"})
        self.assertEqual([a["name"] for a in response.data], ["Other"])

    def test_agency_admin_sees_only_own_agency(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.get(reverse("api:agency-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a["id"] for a in response.data], [self.agency.pk])
        self.assertEqual(response.data[0]["member_count"], 2)

    def test_agency_admin_without_agency(self) -> None:
        orphan = Member.objects.create_user(email="orphan@example.com", role=Role.AGENCY_ADMIN)
        self.client.force_authenticate(orphan)
        response = self.client.get(reverse("api:agency-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "No agency associated with this user"})

    def test_member_cannot_list(self) -> None:
        self.client.force_authenticate(self.member)
        response = self.client.get(reverse("api:agency-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "Insufficient permissions"})

    def test_create_requires_super_admin(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.post(reverse("api:agency-list"), {"name": "New", "email": "new@example.com"})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "Only Super Admins can create agencies"})

    def test_create(self) -> None:
        self.client.force_authenticate(self.super_admin)
        payload = {
            "name": "New",
            "email": "new@example.com",
            "primary_contact_first_name": "Jo",
            "primary_contact_last_name": "Ray",
        }
        response = self.client.post(reverse("api:agency-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Status.PENDING)
        self.assertEqual(response.data["primary_contact_name"], "Jo Ray")
        self.assertTrue(response.data["member_number"].startswith("AG"))

    def test_create_duplicate_email(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.post(reverse("api:agency-list"), {"name": "Dup", "email": "info@acme.com"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Agency with this email already exists")

    def test_retrieve_includes_users(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.get(reverse("api:agency-detail", args=[self.agency.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual({u["email"] for u in response.data["users"]}, {"boss@acme.com", "m@acme.com"})

    def test_retrieve_other_agency_denied(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.get(reverse("api:agency-detail", args=[self.other_agency.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "Access denied"})

    def test_retrieve_missing(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.get(reverse("api:agency-detail", args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"error": "Agency not found"})

    def test_agency_admin_patch_ignores_classification(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.patch(
            reverse("api:agency-detail", args=[self.agency.pk]),
            {"phone": "555-0100", "status": Status.SUSPENDED},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.agency.refresh_from_db()
        self.assertEqual(self.agency.phone, "555-0100")
        self.assertEqual(self.agency.status, Status.ACTIVE)

    def test_agency_admin_cannot_edit_other_agency(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.patch(
            reverse("api:agency-detail", args=[self.other_agency.pk]), {"name": "Taken"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "Insufficient permissions"})

    def test_delete(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.delete(reverse("api:agency-detail", args=[self.agency.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"message": "Agency deleted successfully"})
        self.member.refresh_from_db()
        self.assertIsNone(self.member.agency_id)

    def test_delete_requires_super_admin(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.delete(reverse("api:agency-detail", args=[self.agency.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "Only Super Admins can delete agencies"})

    def test_unexpected_error_has_operation_message(self) -> None:
        self.client.force_authenticate(self.super_admin)
        with mock.patch("apps.users.services.create_agency", side_effect=RuntimeError("db down")):
            response = self.client.post(reverse("api:agency-list"), {"name": "X", "email": "x@example.com"})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"error": "Failed to create agency"})
