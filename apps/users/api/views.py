"""API views for agencies, members, the current profile and onboarding."""

from __future__ import annotations

from django.db.models import Count  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users import onboarding, policy, services
from apps.users.models import Agency, Member
from apps.users.serializers import MemberSerializer, ProfileSerializer
from shared.api import OperationErrorMixin
from shared.exceptions import NotFound, PermissionDenied

from .filters import AgencyFilterSet, MemberFilterSet
from .serializers import (
    AgencyDetailSerializer,
    AgencySerializer,
    AgencyWriteSerializer,
    MemberWriteSerializer,
    OnboardingSerializer,
)


class AgencyViewSet(OperationErrorMixin, viewsets.ModelViewSet):
    """
    Agencies.

    Endpoints:
    - GET /api/v1/agencies/ - all agencies (Super Admin) or the caller's own (agency admin)
    - POST /api/v1/agencies/ - create (Super Admin)
    - GET /api/v1/agencies/{id}/ - detail with members
    - PUT/PATCH /api/v1/agencies/{id}/ - update
    - DELETE /api/v1/agencies/{id}/ - delete (Super Admin), members are kept
    """

    permission_classes = [permissions.IsAuthenticated]
    filterset_class = AgencyFilterSet
    error_messages = {
        "list": "Failed to fetch agencies",
        "retrieve": "Failed to fetch agency",
        "create": "Failed to create agency",
        "update": "Failed to update agency",
        "partial_update": "Failed to update agency",
        "destroy": "Failed to delete agency",
    }

    def get_queryset(self):  # type: ignore
        queryset = Agency.objects.annotate(member_count=Count("members"))
        return policy.agencies_visible_to(self.request.user, queryset)

    def get_serializer_class(self) -> type:  # type: ignore
        if self.action == "retrieve":
            return AgencyDetailSerializer  # type: ignore
        if self.action in ["create", "update", "partial_update"]:
            return AgencyWriteSerializer  # type: ignore
        return AgencySerializer  # type: ignore

    def _get_agency(self) -> Agency:
        try:
            return Agency.objects.annotate(member_count=Count("members")).get(pk=self.kwargs["pk"])
        except (Agency.DoesNotExist, ValueError) as exc:
            raise NotFound("Agency not found") from exc

    def list(self, request, *args, **kwargs):  # type: ignore
        user = request.user
        if not policy.can_view_all_agencies(user):
            if not policy.is_agency_admin(user):
                raise PermissionDenied("Insufficient permissions")
            if not user.agency_id:
                raise PermissionDenied("No agency associated with this user")
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):  # type: ignore
        if not policy.can_manage_members(request.user):
            raise PermissionDenied("Insufficient permissions")
        agency = self._get_agency()
        if not policy.can_view_agency(request.user, agency):
            raise PermissionDenied("Access denied")
        return Response(AgencyDetailSerializer(agency).data)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        agency = services.create_agency(request.user, serializer.validated_data, request=request)
        return Response(AgencySerializer(agency).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        agency = self._get_agency()
        serializer = self.get_serializer(data=request.data, partial=kwargs.get("partial", False))
        serializer.is_valid(raise_exception=True)
        agency = services.update_agency(request.user, agency, serializer.validated_data, request=request)
        return Response(AgencySerializer(agency).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        agency = self._get_agency()
        services.delete_agency(request.user, agency, request=request)
        return Response({"message": "Agency deleted successfully"}, status=status.HTTP_200_OK)


class MemberViewSet(OperationErrorMixin, viewsets.ModelViewSet):
    """
    Members visible to the caller.

    ``?limit=N`` caps the list; filters: status, membership_type, role,
    agency, search.
    """

    permission_classes = [permissions.IsAuthenticated]
    filterset_class = MemberFilterSet
    error_messages = {
        "list": "Failed to fetch members",
        "retrieve": "Failed to fetch member",
        "create": "Failed to create member",
        "update": "Failed to update member",
        "partial_update": "Failed to update member",
        "destroy": "Failed to delete member",
    }

    def get_queryset(self):  # type: ignore
        queryset = Member.objects.select_related("agency")
        return policy.members_visible_to(self.request.user, queryset)

    def get_serializer_class(self) -> type:  # type: ignore
        if self.action in ["create", "update", "partial_update"]:
            return MemberWriteSerializer  # type: ignore
        return MemberSerializer  # type: ignore

    def _get_member(self) -> Member:
        # Edits and deletes look beyond the visible set so the policy can
        # answer with its own message.
        try:
            return Member.objects.select_related("agency").get(pk=self.kwargs["pk"])
        except (Member.DoesNotExist, ValueError) as exc:
            raise NotFound("Member not found") from exc

    def list(self, request, *args, **kwargs):  # type: ignore
        queryset = self.filter_queryset(self.get_queryset())
        try:
            limit = int(request.query_params.get("limit", ""))
        except ValueError:
            limit = 0
        if limit > 0:
            queryset = queryset[:limit]
        return Response(MemberSerializer(queryset, many=True).data)

    def retrieve(self, request, *args, **kwargs):  # type: ignore
        try:
            member = self.get_queryset().filter(pk=self.kwargs["pk"]).first()
        except ValueError:
            member = None
        if member is None:
            raise NotFound("Member not found")
        return Response(MemberSerializer(member).data)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        member = services.create_member(request.user, serializer.validated_data, request=request)
        return Response(MemberSerializer(member).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        member = self._get_member()
        serializer = self.get_serializer(data=request.data, partial=kwargs.get("partial", False))
        serializer.is_valid(raise_exception=True)
        member = services.update_member(request.user, member, serializer.validated_data, request=request)
        return Response(MemberSerializer(member).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        member = self._get_member()
        services.delete_member(request.user, member, request=request)
        return Response({"message": "Member deleted successfully"}, status=status.HTTP_200_OK)


class MeView(APIView):
    """GET /api/v1/me/ - the current member."""

    def get(self, request):  # type: ignore
        return Response(ProfileSerializer(request.user).data)


class OnboardingView(APIView):
    """GET /api/v1/onboarding/ - onboarding state and the agency choices."""

    def get(self, request):  # type: ignore
        return Response(onboarding.onboarding_state(request.user))


class OnboardingCompleteView(OperationErrorMixin, APIView):
    """POST /api/v1/onboarding/complete/ - pick a role (and agency)."""

    permission_classes = [permissions.AllowAny]
    error_messages = {"post": "Failed to complete onboarding"}

    def post(self, request):  # type: ignore
        if not request.user.is_authenticated:
            return Response({"error": "Not authenticated"}, status=status.HTTP_401_UNAUTHORIZED)

        serializer = OnboardingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        member = onboarding.complete_onboarding(
            request.user,
            data.get("role"),
            agency_id=data.get("agencyId"),
            access_code=data.get("accessCode"),
            request=request,
        )
        return Response(
            {
                "success": True,
                "message": "Onboarding completed successfully",
                "role": member.role,
                "agencyId": member.agency_id,
                "agencyName": member.agency.name if member.agency_id else None,
            }
        )
