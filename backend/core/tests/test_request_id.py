import logging

from django.test import RequestFactory, SimpleTestCase
from django.http import HttpResponse

from core.middleware import RequestIDFilter, RequestIDMiddleware, get_current_request_id


class RequestIDMiddlewareTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.seen = []

        def view(request):
            self.seen.append((request.request_id, get_current_request_id()))
            return HttpResponse("ok")

        self.middleware = RequestIDMiddleware(view)

    def test_propagates_incoming_header(self):
        response = self.middleware(self.factory.get("/", HTTP_X_REQUEST_ID="abc-123"))
        self.assertEqual(response["X-Request-ID"], "abc-123")
        self.assertEqual(self.seen, [("abc-123", "abc-123")])
        self.assertIsNone(get_current_request_id())

    def test_generates_id_when_missing_or_too_long(self):
        for header in ("", "x" * 65):
            with self.subTest(length=len(header)):
                response = self.middleware(
                    self.factory.get("/", HTTP_X_REQUEST_ID=header)
                )
                self.assertEqual(len(response["X-Request-ID"]), 36)

    def test_filter_injects_request_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        self.assertTrue(RequestIDFilter().filter(record))
        self.assertIsNone(record.request_id)
