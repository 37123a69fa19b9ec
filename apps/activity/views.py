"""Read-only API over the activity log."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore

from apps.users import policy
from apps.users.api.permissions import IsAdminRole

from .models import Activity
from .serializers import ActivitySerializer


class ActivityViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Recent activity.

    Super Admins see everything; agency admins see activity performed by
    members of their own agency.
    """

    serializer_class = ActivitySerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]
    filterset_fields = ["type", "actor"]

    def get_queryset(self):  # type: ignore
        queryset = Activity.objects.select_related("actor")
        user = self.request.user
        if policy.can_view_all_agencies(user):
            return queryset
        if user.agency_id:
            return queryset.filter(actor__agency_id=user.agency_id)
        return queryset.filter(actor=user)
