"""URL routing for the membership API (namespace: api)."""

from django.urls import path, include  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AgencyViewSet, MemberViewSet, MeView, OnboardingCompleteView, OnboardingView

router = DefaultRouter()
router.register(r"agencies", AgencyViewSet, basename="agency")
router.register(r"members", MemberViewSet, basename="member")

urlpatterns = [
    path("me/", MeView.as_view(), name="me"),
    path("onboarding/", OnboardingView.as_view(), name="onboarding"),
    path("onboarding/complete/", OnboardingCompleteView.as_view(), name="onboarding-complete"),
    path("", include(router.urls)),
]
