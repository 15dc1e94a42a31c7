import logging
import uuid
from contextvars import ContextVar

# Gunicorn records carry no request object, so the id also lives in a contextvar.
_request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_current_request_id() -> str | None:
    """Return the correlation id of the request being served, if any."""
    return _request_id_ctx.get()


class RequestIDFilter(logging.Filter):
    """Injects request_id into log records for structured logging."""

    def filter(self, record):
        request = getattr(record, "request", None)
        record.request_id = (
            getattr(request, "request_id", None)
            or getattr(record, "request_id", None)
            or get_current_request_id()
        )
        return True


class RequestIDMiddleware:
    """
    Propagates X-Request-ID (or a fresh uuid4) into:
    - request.request_id
    - the response header
    - the logging context and audit entries
    """

    HEADER_NAME = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"
    MAX_LENGTH = 64

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = (request.META.get(self.HEADER_NAME) or "").strip()

        if not request_id or len(request_id) > self.MAX_LENGTH:
            request_id = str(uuid.uuid4())

        request.request_id = request_id
        token = _request_id_ctx.set(request_id)
        try:
            response = self.get_response(request)
        finally:
            _request_id_ctx.reset(token)

        response[self.RESPONSE_HEADER] = request_id
        return response
