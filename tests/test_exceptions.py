"""Tests for the API error format."""
from django.core.exceptions import ValidationError
from django.http import Http404
from django.test import SimpleTestCase

from core.exceptions import AccessDenied, AlreadyExists, StoreNotFound, api_exception_handler


class ExceptionHandlerTest(SimpleTestCase):
    def test_domain_error_body(self):
        response = api_exception_handler(AccessDenied(), {})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["code"], "FORBIDDEN")
        self.assertEqual(response.data["message"], AccessDenied.default_detail)
        self.assertIn("timestamp", response.data)

    def test_conflict_and_not_found(self):
        self.assertEqual(api_exception_handler(AlreadyExists(), {}).data["code"], "ALREADY_EXISTS")
        response = api_exception_handler(StoreNotFound(), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "NOT_FOUND")

    def test_django_http404(self):
        response = api_exception_handler(Http404("No Store matches the given query."), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "NOT_FOUND")
        self.assertIsInstance(response.data["message"], str)

    def test_django_validation_error(self):
        exc = ValidationError({"category": ["Category must belong to the same store as the product."]})
        response = api_exception_handler(exc, {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "VALIDATION_FAILED")
        self.assertIn("category", response.data["field_errors"])

    def test_unhandled_error_is_left_to_django(self):
        with self.assertLogs("core.exceptions", level="ERROR"):
            self.assertIsNone(api_exception_handler(RuntimeError("boom"), {}))

