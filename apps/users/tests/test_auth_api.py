"""API tests for authentication endpoints."""

from __future__ import annotations

from unittest import mock

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.identity import InvalidSessionToken
from apps.users.models import Member, Role

CLAIMS = {"sub": "user_abc", "email": "ann@example.com", "first_name": "Ann", "last_name": "Lee"}


@mock.patch("apps.users.authentication.decode_session_token")
class SessionExchangeTests(APITestCase):
    def test_first_sign_in_creates_bare_member(self, decode) -> None:
        decode.return_value = CLAIMS
        response = self.client.post(reverse("auth:session"), {"session_token": "tok"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data["tokens"])
        self.assertIn("refresh", response.data["tokens"])
        self.assertFalse(response.data["user"]["onboarded"])

        member = Member.objects.get(external_id="user_abc")
        self.assertEqual(member.role, "")
        self.assertEqual(member.name, "Ann Lee")

    def test_existing_member_linked_by_email(self, decode) -> None:
        decode.return_value = CLAIMS
        member = Member.objects.create_user(email="ANN@example.com", role=Role.AGENCY_USER)
        response = self.client.post(reverse("auth:session"), {"session_token": "tok"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        member.refresh_from_db()
        self.assertEqual(member.external_id, "user_abc")
        self.assertEqual(Member.objects.count(), 1)

    def test_invalid_token(self, decode) -> None:
        decode.side_effect = InvalidSessionToken("expired")
        response = self.client.post(reverse("auth:session"), {"session_token": "tok"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Invalid or expired session token.")

    def test_tokens_authenticate_and_refresh(self, decode) -> None:
        decode.return_value = CLAIMS
        Member.objects.create_user(email="ann@example.com", external_id="user_abc", role=Role.AGENCY_USER)
        tokens = self.client.post(reverse("auth:session"), {"session_token": "tok"}, format="json").data["tokens"]

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = self.client.get(reverse("api:me"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "ann@example.com")

        self.client.credentials()
        response = self.client.post(reverse("auth:token_refresh"), {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)
