"""Serializers for the session exchange endpoint."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate  # type: ignore
from rest_framework import serializers  # type: ignore


class SessionExchangeSerializer(serializers.Serializer):
    session_token = serializers.CharField()

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        request = self.context.get("request")
        member = authenticate(request, session_token=attrs["session_token"])
        if member is None:
            raise serializers.ValidationError({"session_token": "Invalid or expired session token."})
        attrs["user"] = member
        return attrs
