import logging

from django.conf import settings
from django.db import DatabaseError, connection
from django.db.migrations.executor import MigrationExecutor
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView
from rest_framework.response import Response

from apps.notifications.transports import build_sender

logger = logging.getLogger(__name__)


class LiveView(APIView):
    """Liveness probe: process is running. No DB or external deps."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"status": "alive"})


class ReadyView(APIView):
    """Readiness probe: DB, migrations, notification transport config."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        checks = {
            "database": self._check_database(),
            "migrations": self._check_migrations(),
            "notifications": self._check_notifications(),
        }
        ready = all(v == "ok" for v in checks.values())
        if not ready:
            logger.warning("readiness_check_failed", extra={"checks": checks})

        return Response(
            {"status": "ready" if ready else "not_ready", "checks": checks},
            status=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    def _check_database(self):
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1;")
        except DatabaseError:
            return "error"
        return "ok"

    def _check_migrations(self):
        try:
            executor = MigrationExecutor(connection)
            plan = executor.migration_plan(executor.loader.graph.leaf_nodes())
        except DatabaseError:
            return "error"
        return "ok" if not plan else "pending"

    def _check_notifications(self):
        try:
            sender = build_sender(settings)
        except ValueError:
            return "error"
        return "ok" if sender.check() else "unconfigured"
