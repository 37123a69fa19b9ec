"""Diagnostics endpoints."""

from __future__ import annotations

import structlog
from django.conf import settings  # type: ignore
from django.http import Http404, JsonResponse  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_http_methods  # type: ignore
from rest_framework import permissions  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.api.permissions import IsSuperAdmin
from apps.users.models import Role
from shared.api import OperationErrorMixin

from . import services

logger = structlog.get_logger(__name__)


@csrf_exempt
@require_http_methods(["GET"])
def healthz(request):
    """Health check endpoint for load balancers and containers"""
    if services.database_connected():
        logger.info("healthz.ok", database="connected")
        return JsonResponse({"status": "healthy", "database": "connected"}, status=200)
    logger.error("healthz.fail", database="disconnected")
    return JsonResponse({"status": "unhealthy", "database": "disconnected"}, status=503)


class DebugDatabaseView(OperationErrorMixin, APIView):
    """GET /api/v1/debug-db/ - row counts and tables, Super Admin only."""

    permission_classes = [permissions.IsAuthenticated, IsSuperAdmin]
    error_messages = {"get": "Database debug failed"}

    def get(self, request):  # type: ignore
        return Response(services.database_snapshot())


class RoleRepairView(OperationErrorMixin, APIView):
    """Base for the self-service repair endpoints; 404 unless enabled."""

    def initial(self, request, *args, **kwargs):  # type: ignore
        if not settings.ROLE_REPAIR_ENABLED:
            raise Http404
        super().initial(request, *args, **kwargs)


class FixRoleView(RoleRepairView):
    """POST /api/v1/fix-role/ {role, agencyId, agencyName}"""

    error_messages = {"post": "Failed to fix role"}

    def post(self, request):  # type: ignore
        result = services.repair_role(
            request.user,
            request.data.get("role"),
            agency_id=request.data.get("agencyId"),
            agency_name=request.data.get("agencyName"),
            request=request,
        )
        logger.info("role_repair.fixed", member_id=request.user.pk, role=request.user.role)
        return Response(result)


class ForceFixRoleView(RoleRepairView):
    """GET forces AGENCY_ADMIN on the default agency; POST takes a role."""

    error_messages = {"get": "Failed to force fix role", "post": "Failed to force fix role"}

    def get(self, request):  # type: ignore
        result = services.repair_role(request.user, Role.AGENCY_ADMIN, request=request)
        logger.info("role_repair.forced", member_id=request.user.pk, role=Role.AGENCY_ADMIN)
        return Response(result)

    def post(self, request):  # type: ignore
        role = request.data.get("role") or Role.AGENCY_ADMIN
        result = services.repair_role(request.user, role, request=request)
        logger.info("role_repair.forced", member_id=request.user.pk, role=role)
        return Response(result)
