"""API tests for member and profile endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import Agency, Member, Role, Status


class MemberAPITests(APITestCase):
    def setUp(self) -> None:
        self.agency = Agency.objects.create(name="Acme", email="info@acme.com")
        self.other_agency = Agency.objects.create(name="Other", email="info@other.com")
        self.super_admin = Member.objects.create_user(email="root@example.com", role=Role.SUPER_ADMIN)
        self.agency_admin = Member.objects.create_user(
            email="boss@acme.com", role=Role.AGENCY_ADMIN, agency=self.agency
        )
        self.member = Member.objects.create_user(
            email="m@acme.com", first_name="Mo", last_name="Acme", role=Role.AGENCY_USER, agency=self.agency
        )
        self.outsider = Member.objects.create_user(
            email="m@other.com", role=Role.AGENCY_USER, agency=self.other_agency, status=Status.INACTIVE
        )

    def test_list_scoped_to_agency(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.get(reverse("api:member-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual({m["email"] for m in response.data}, {"boss@acme.com", "m@acme.com"})
        self.assertEqual(response.data[0]["agency"]["name"], "Acme")

    def test_super_admin_list_with_limit_and_filters(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.get(reverse("api:member-list"), {"limit": 2})
        self.assertEqual(len(response.data), 2)
        self.assertEqual(response.data[0]["email"], "m@other.com")

        response = self.client.get(reverse("api:member-list"), {"status": Status.INACTIVE})
        self.assertEqual([m["email"] for m in response.data], ["m@other.com"])

        response = self.client.get(reverse("api:member-list"), {"search": "mo"})
        self.assertEqual([m["email"] for m in response.data], ["m@acme.com"])

    def test_retrieve_outside_visibility_is_404(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.get(reverse("api:member-detail", args=[self.outsider.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"error": "Member not found"})

    def test_retrieve_non_numeric_id_is_404(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.get(reverse("api:member-detail", args=["abc"]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"error": "Member not found"})

        response = self.client.get(reverse("api:agency-detail", args=["abc"]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"error": "Agency not found"})

    def test_create_as_agency_admin(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        payload = {"first_name": "Ann", "last_name": "Lee", "email": "ann@acme.com"}
        response = self.client.post(reverse("api:member-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["role"], Role.AGENCY_USER)
        self.assertEqual(response.data["agency"]["id"], self.agency.pk)

    def test_create_missing_fields(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.post(reverse("api:member-list"), {"email": "x@example.com"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {"error": "First name, last name, and email are required"})

    def test_member_cannot_create(self) -> None:
        self.client.force_authenticate(self.member)
        payload = {"first_name": "Ann", "last_name": "Lee", "email": "ann@acme.com"}
        response = self.client.post(reverse("api:member-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "You don't have permission to manage members"})

    def test_agency_admin_cannot_promote_to_super_admin(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.patch(
            reverse("api:member-detail", args=[self.member.pk]), {"role": Role.SUPER_ADMIN}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "Only Super Admins can manage Super Admin accounts"})

    def test_agency_admin_cannot_edit_other_agency_member(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.patch(
            reverse("api:member-detail", args=[self.outsider.pk]), {"first_name": "X"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {"error": "You can only edit members in your agency"})

    def test_update(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.patch(
            reverse("api:member-detail", args=[self.member.pk]),
            {"last_name": "Smith", "role": Role.AGENCY_ADMIN},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["name"], "Mo Smith")
        self.assertEqual(response.data["role"], Role.AGENCY_ADMIN)

    def test_delete(self) -> None:
        self.client.force_authenticate(self.agency_admin)
        response = self.client.delete(reverse("api:member-detail", args=[self.member.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"message": "Member deleted successfully"})
        self.assertFalse(Member.objects.filter(pk=self.member.pk).exists())

    def test_cannot_delete_self(self) -> None:
        self.client.force_authenticate(self.super_admin)
        response = self.client.delete(reverse("api:member-detail", args=[self.super_admin.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {"error": "Cannot delete your own account"})

    def test_me(self) -> None:
        self.client.force_authenticate(self.member)
        response = self.client.get(reverse("api:me"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "m@acme.com")
        self.assertTrue(response.data["onboarded"])
        self.assertEqual(response.data["metadata"]["agencyName"], "Acme")
