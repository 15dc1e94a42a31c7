"""
Tire request API views.

All mutations flow through the service layer.
Role checks: decisions require the stage role, delete requires ADMIN.
"""

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response

from core.exceptions import PermissionDeniedError, ValidationError
from core.permissions import (
    DASHBOARD_PERMISSIONS,
    IsAdmin,
    IsAuthenticatedUser,
    IsEngineer,
    IsManager,
    IsTTO,
)
from apps.tire_requests import services
from apps.tire_requests.serializers import (
    DecisionSerializer,
    TireRequestSerializer,
    TireRequestSummarySerializer,
)
from apps.tire_requests.validation import validate_images

PHOTO_FIELDS = ("tirePhotos", "photos")


def _uploads(request):
    files = []
    for name in PHOTO_FIELDS:
        files.extend(request.FILES.getlist(name))
    return files


def _include_photos(request):
    value = request.query_params.get("includePhotos", "true")
    return value.lower() not in ("0", "false", "no")


def _paginated(request, queryset):
    paginator = LimitOffsetPagination()
    paginator.default_limit = 50
    paginator.max_limit = 100

    page = paginator.paginate_queryset(queryset, request)
    serializer_class = (
        TireRequestSerializer if _include_photos(request) else TireRequestSummarySerializer
    )
    return paginator.get_paginated_response(serializer_class(page, many=True).data)


def _data(obj, http_status=status.HTTP_200_OK):
    return Response({"data": TireRequestSerializer(obj).data}, status=http_status)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticatedUser])
def tire_requests_collection(request):
    """
    GET /api/tire-requests - List requests, optional repeated ?status= filter.
    POST /api/tire-requests - Submit a new request (multipart or JSON).
    """
    if request.method == "GET":
        statuses = request.query_params.getlist("status")
        return _paginated(request, services.list_requests(statuses))

    obj = services.create_request(request.data, _uploads(request), request.user)
    return _data(obj, status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([IsAuthenticatedUser])
def validate_request(request):
    """
    POST /api/tire-requests/validate

    Dry-run: auto-populate and validate without saving.
    """
    result = services.validate_only(request.data, request.user)
    if not result["valid"]:
        raise ValidationError(
            "Validation failed",
            {"errors": result["errors"], "data": result["data"]},
        )
    return Response({"data": result}, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([IsAuthenticatedUser])
def validate_request_images(request):
    """
    POST /api/tire-requests/validate-images

    Check uploaded files (type and size) without saving them.
    """
    files = _uploads(request)
    errors = validate_images(files)
    if errors:
        raise ValidationError.from_errors(errors, "Image validation failed")
    return Response(
        {"data": {"valid": True, "fileCount": len(files)}}, status=status.HTTP_200_OK
    )


@api_view(["GET"])
@permission_classes([IsAuthenticatedUser])
def dashboard_counts(request):
    """GET /api/tire-requests/summary/counts"""
    return Response({"data": services.dashboard_counts()}, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([IsAuthenticatedUser])
def dashboard_requests(request, stage):
    """
    GET /api/tire-requests/{manager,tto,engineer}/requests

    Requests awaiting (or recently decided by) the given stage.
    Pass ?includePhotos=false for lighter rows.
    """
    permission = DASHBOARD_PERMISSIONS.get(stage)
    if permission is not None and not permission().has_permission(request, None):
        raise PermissionDeniedError(f"Only the {stage} role can view this dashboard")

    return _paginated(request, services.dashboard_requests(stage))


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticatedUser])
def tire_request_detail(request, requestId):
    """
    GET /api/tire-requests/{id} - Fetch with consolidated photos.
    PUT /api/tire-requests/{id} - Update fields and photos.
    DELETE /api/tire-requests/{id} - Delete (ADMIN only).
    """
    if request.method == "GET":
        return _data(services.get_request(requestId))

    if request.method == "PUT":
        obj = services.update_request(
            requestId, request.data, _uploads(request), request.user
        )
        return _data(obj)

    if not IsAdmin().has_permission(request, None):
        raise PermissionDeniedError("Only ADMIN can delete tire requests")
    services.delete_request(requestId, request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


def _reason(request):
    serializer = DecisionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.get_reason()


@api_view(["POST"])
@permission_classes([IsManager])
def manager_approve(request, requestId):
    """POST /api/tire-requests/{id}/approve"""
    return _data(services.manager_approve(requestId, request.user.id))


@api_view(["POST"])
@permission_classes([IsManager])
def manager_reject(request, requestId):
    """POST /api/tire-requests/{id}/reject - body: {"reason": "..."}"""
    return _data(services.manager_reject(requestId, _reason(request), request.user.id))


@api_view(["POST"])
@permission_classes([IsTTO])
def tto_approve(request, requestId):
    """POST /api/tire-requests/{id}/tto-approve"""
    return _data(services.tto_approve(requestId, request.user.id))


@api_view(["POST"])
@permission_classes([IsTTO])
def tto_reject(request, requestId):
    """POST /api/tire-requests/{id}/tto-reject - body: {"reason": "..."}"""
    return _data(services.tto_reject(requestId, _reason(request), request.user.id))


@api_view(["POST"])
@permission_classes([IsEngineer])
def engineer_approve(request, requestId):
    """POST /api/tire-requests/{id}/engineer-approve"""
    return _data(services.engineer_approve(requestId, request.user.id))


@api_view(["POST"])
@permission_classes([IsEngineer])
def engineer_reject(request, requestId):
    """POST /api/tire-requests/{id}/engineer-reject - reason optional"""
    return _data(services.engineer_reject(requestId, _reason(request), request.user.id))


@api_view(["GET"])
@permission_classes([IsAuthenticatedUser])
def tire_request_photos(request, requestId):
    """GET /api/tire-requests/{id}/photos"""
    photos = services.get_photos(requestId)
    return Response(
        {"data": {"requestId": str(requestId), "photoUrls": photos, "count": len(photos)}},
        status=status.HTTP_200_OK,
    )


@api_view(["POST"])
@permission_classes([IsAuthenticatedUser])
def clean_photos(request, requestId):
    """
    POST /api/tire-requests/{id}/validate-photos

    Remove corrupted photos and report what was dropped.
    """
    result = services.clean_photos(requestId, request.user)
    return Response({"data": result}, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([IsAuthenticatedUser])
def tire_request_pdf(request, requestId):
    """GET /api/tire-requests/{id}/pdf"""
    content, filename = services.request_pdf(requestId)
    response = HttpResponse(content, content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response
