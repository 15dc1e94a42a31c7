"""
Tire order API views.

All mutations flow through the service layer.
Seller decisions require SELLER; delete requires ADMIN.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response

from core.exceptions import PermissionDeniedError
from core.permissions import IsAdmin, IsAuthenticatedUser, IsSeller
from apps.tire_orders import services
from apps.tire_orders.serializers import (
    RejectOrderSerializer,
    TireOrderSerializer,
    TireOrderWriteSerializer,
)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticatedUser])
def tire_orders_collection(request):
    """
    GET /api/tire-orders - List orders, optional ?vendorEmail= and ?status=.
    POST /api/tire-orders - Place the order for an ENGINEER_APPROVED request.
    """
    if request.method == "GET":
        paginator = LimitOffsetPagination()
        paginator.default_limit = 50
        paginator.max_limit = 100

        queryset = services.list_orders(
            vendor_email=request.query_params.get("vendorEmail"),
            statuses=request.query_params.getlist("status"),
        )
        page = paginator.paginate_queryset(queryset, request)
        return paginator.get_paginated_response(
            TireOrderSerializer(page, many=True).data
        )

    serializer = TireOrderWriteSerializer(data=request.data, context={"creating": True})
    serializer.is_valid(raise_exception=True)
    fields = dict(serializer.validated_data)
    request_id = fields.pop("request_id")

    order = services.create_order(request_id, fields, request.user.id)
    return Response(
        {"data": TireOrderSerializer(order).data}, status=status.HTTP_201_CREATED
    )


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticatedUser])
def tire_order_detail(request, orderId):
    """
    GET /api/tire-orders/{id}
    PUT /api/tire-orders/{id} - Edit a pending order.
    DELETE /api/tire-orders/{id} - ADMIN only.
    """
    if request.method == "GET":
        order = services.get_order(orderId)
        return Response({"data": TireOrderSerializer(order).data})

    if request.method == "PUT":
        serializer = TireOrderWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fields = dict(serializer.validated_data)
        fields.pop("request_id", None)
        order = services.update_order(orderId, fields, request.user.id)
        return Response({"data": TireOrderSerializer(order).data})

    if not IsAdmin().has_permission(request, None):
        raise PermissionDeniedError("Only ADMIN can delete tire orders")
    services.delete_order(orderId, request.user.id)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["PUT"])
@permission_classes([IsSeller])
def confirm_order(request, orderId):
    """PUT /api/tire-orders/{id}/confirm"""
    order = services.confirm_order(orderId, request.user.id)
    return Response({"data": TireOrderSerializer(order).data})


@api_view(["PUT"])
@permission_classes([IsSeller])
def reject_order(request, orderId):
    """PUT /api/tire-orders/{id}/reject - body: {"reason": "..."}"""
    serializer = RejectOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = services.reject_order(
        orderId, serializer.validated_data.get("reason"), request.user.id
    )
    return Response({"data": TireOrderSerializer(order).data})
