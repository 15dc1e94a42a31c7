"""
Authentication views: login.

No domain logic - authentication only.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import authenticate
from apps.auth.serializers import LoginSerializer
from apps.users.serializers import UserSerializer

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([AllowAny])
def login(request):
    """
    POST /api/auth/login

    Authenticate by username or email and return a JWT access token.
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    identifier = serializer.validated_data["identifier"]
    user = authenticate(
        request, username=identifier, password=serializer.validated_data["password"]
    )

    if user is None:
        logger.info("login_failed", extra={"operation": "LOGIN"})
        raise AuthenticationFailed("Invalid credentials")

    refresh = RefreshToken.for_user(user)
    logger.info(
        "login_succeeded", extra={"operation": "LOGIN", "entity_id": str(user.id)}
    )

    return Response(
        {
            "data": {
                "token": str(refresh.access_token),
                "refreshToken": str(refresh),
                "user": UserSerializer(user).data,
            }
        },
        status=status.HTTP_200_OK,
    )
