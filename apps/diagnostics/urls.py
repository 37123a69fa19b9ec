from django.urls import path  # type: ignore

from .views import DebugDatabaseView, FixRoleView, ForceFixRoleView

urlpatterns = [
    path("debug-db/", DebugDatabaseView.as_view(), name="debug-db"),
    path("fix-role/", FixRoleView.as_view(), name="fix-role"),
    path("force-fix-role/", ForceFixRoleView.as_view(), name="force-fix-role"),
]
