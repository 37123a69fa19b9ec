from django.urls import path  # type: ignore

from . import views

urlpatterns = [
    path("", views.home, name="home"),
    path("sign-in/", views.sign_in, name="sign-in"),
    path("sign-in/callback/", views.sign_in_callback, name="sign-in-callback"),
    path("sign-out/", views.sign_out, name="sign-out"),
    path("onboarding/", views.onboarding_page, name="onboarding"),
    path("dashboard/", views.dashboard, name="dashboard"),
    path("members/", views.member_list, name="member-list"),
    path("members/new/", views.member_create, name="member-create"),
    path("members/<int:pk>/edit/", views.member_edit, name="member-edit"),
    path("members/<int:pk>/delete/", views.member_delete, name="member-delete"),
    path("agencies/", views.agency_list, name="agency-list"),
    path("agencies/new/", views.agency_create, name="agency-create"),
    path("agencies/<int:pk>/", views.agency_detail, name="agency-detail"),
    path("agencies/<int:pk>/edit/", views.agency_edit, name="agency-edit"),
    path("agencies/<int:pk>/delete/", views.agency_delete, name="agency-delete"),
    path("check-role/", views.check_role, name="check-role"),
    path("fix-role/", views.fix_role, name="fix-role"),
    path("debug-db/", views.debug_db, name="debug-db"),
]
