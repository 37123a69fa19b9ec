"""URL configuration for MemberHub project.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the versioned REST API provided by Django Rest Framework routers, the
identity provider webhook and the server-rendered pages.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

from apps.diagnostics.views import healthz

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    path('healthz/', healthz, name='healthz'),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/', include(('apps.users.api.urls', 'api'), namespace='api')),
    path('api/v1/', include(('apps.activity.urls', 'activity'), namespace='activity')),
    path('api/v1/', include(('apps.diagnostics.urls', 'diagnostics'), namespace='diagnostics')),
    # Identity provider webhook
    path('api/v1/webhooks/', include(('apps.users.urls', 'webhooks'), namespace='webhooks')),
    # API docs
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='docs'),
    # Pages
    path('', include(('apps.web.urls', 'web'), namespace='web')),
]
