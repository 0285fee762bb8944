"""Root URL configuration: the deploy webhook is the only endpoint."""

from django.urls import include, path

urlpatterns = [
    path("", include("apps.deploy.urls")),
]
