"""
User views: get current user, list users, create users.

User creation requires ADMIN role.
"""

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.pagination import LimitOffsetPagination
from core.exceptions import ConflictError, PermissionDeniedError
from core.permissions import IsAdmin, IsAuthenticatedUser
from apps.users.models import User
from apps.users.serializers import UserSerializer, UserCreateSerializer


@api_view(["GET"])
@permission_classes([IsAuthenticatedUser])
def current_user(request):
    """
    GET /api/users/me

    Get current authenticated user.
    """
    serializer = UserSerializer(request.user)
    return Response({"data": serializer.data}, status=status.HTTP_200_OK)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticatedUser])
def users_collection(request):
    """
    GET /api/users/ - List users with pagination, optional ?role= filter.
    POST /api/users/ - Create a new user (ADMIN only).
    """
    if request.method == "GET":
        paginator = LimitOffsetPagination()
        paginator.default_limit = 50
        paginator.max_limit = 100

        users = User.objects.all().order_by("username")
        role = request.query_params.get("role")
        if role:
            users = users.filter(role=role)
        page = paginator.paginate_queryset(users, request)

        serializer = UserSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    if not IsAdmin().has_permission(request, None):
        raise PermissionDeniedError("Only ADMIN can create users")

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=data["username"],
                password=data["password"],
                display_name=data.get("display_name") or data["username"],
                role=data["role"],
                email=data.get("email", ""),
                section=data.get("section", ""),
                service_number=data.get("service_number", ""),
            )
    except IntegrityError:
        raise ConflictError(
            f"User with username '{data['username']}' already exists"
        )

    return Response(
        {"data": UserSerializer(user).data}, status=status.HTTP_201_CREATED
    )
