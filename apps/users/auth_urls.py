"""URL routing for authentication endpoints (namespace: auth)."""

from __future__ import annotations

from django.urls import path  # type: ignore
from rest_framework_simplejwt.views import TokenRefreshView  # type: ignore

from .auth_views import SessionExchangeView

app_name = "auth"

urlpatterns = [
    path("session/", SessionExchangeView.as_view(), name="session"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
]
