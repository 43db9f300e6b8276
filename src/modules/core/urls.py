from django.urls import path

from modules.core.views import DashboardView, health_check

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("api/v1/dashboard/", DashboardView.as_view(), name="dashboard"),
]
