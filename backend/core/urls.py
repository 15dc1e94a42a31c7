from django.urls import include, path

urlpatterns = [
    path("api/health/", include("health.urls")),
    path("api/auth/", include("apps.auth.urls")),
    path("api/users/", include("apps.users.urls")),
    path("api/audit/", include("apps.audit.urls")),
    # Workflow resources are declared with their own prefixes
    # (tire-requests, tire-orders), so these includes come last.
    path("api/", include("apps.tire_requests.urls")),
    path("api/", include("apps.tire_orders.urls")),
]
