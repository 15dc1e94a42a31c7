from django.urls import path
from apps.tire_requests import views

app_name = "tire_requests"

urlpatterns = [
    path("tire-requests", views.tire_requests_collection, name="collection"),
    path("tire-requests/validate", views.validate_request, name="validate"),
    path(
        "tire-requests/validate-images",
        views.validate_request_images,
        name="validate-images",
    ),
    path("tire-requests/summary/counts", views.dashboard_counts, name="counts"),
    path(
        "tire-requests/manager/requests",
        views.dashboard_requests,
        {"stage": "manager"},
        name="manager-dashboard",
    ),
    path(
        "tire-requests/tto/requests",
        views.dashboard_requests,
        {"stage": "tto"},
        name="tto-dashboard",
    ),
    path(
        "tire-requests/engineer/requests",
        views.dashboard_requests,
        {"stage": "engineer"},
        name="engineer-dashboard",
    ),
    path("tire-requests/<uuid:requestId>", views.tire_request_detail, name="detail"),
    path(
        "tire-requests/<uuid:requestId>/approve",
        views.manager_approve,
        name="manager-approve",
    ),
    path(
        "tire-requests/<uuid:requestId>/reject",
        views.manager_reject,
        name="manager-reject",
    ),
    path(
        "tire-requests/<uuid:requestId>/tto-approve",
        views.tto_approve,
        name="tto-approve",
    ),
    path(
        "tire-requests/<uuid:requestId>/tto-reject",
        views.tto_reject,
        name="tto-reject",
    ),
    path(
        "tire-requests/<uuid:requestId>/engineer-approve",
        views.engineer_approve,
        name="engineer-approve",
    ),
    path(
        "tire-requests/<uuid:requestId>/engineer-reject",
        views.engineer_reject,
        name="engineer-reject",
    ),
    path(
        "tire-requests/<uuid:requestId>/photos",
        views.tire_request_photos,
        name="photos",
    ),
    path(
        "tire-requests/<uuid:requestId>/validate-photos",
        views.clean_photos,
        name="validate-photos",
    ),
    path("tire-requests/<uuid:requestId>/pdf", views.tire_request_pdf, name="pdf"),
]
