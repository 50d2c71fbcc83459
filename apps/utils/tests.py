# apps/utils/tests.py
import json
import logging
from unittest.mock import patch

from django.db import OperationalError
from django.test import TestCase, SimpleTestCase
from rest_framework.exceptions import ValidationError

from .logging import JSONFormatter
from .utils import generate_password
from .validators import validate_phone


class ValidatorTests(SimpleTestCase):
    def test_phone_validator(self):
        self.assertEqual(validate_phone("+61299999999"), "+61299999999")
        self.assertEqual(validate_phone("555-0123"), "555-0123")
        self.assertEqual(validate_phone("(02) 9999 9999"), "(02) 9999 9999")
        with self.assertRaises(ValidationError):
            validate_phone("123")
        with self.assertRaises(ValidationError):
            validate_phone("call me")


class UtilsTests(SimpleTestCase):
    def test_generate_password_length_and_alphabet(self):
        pwd = generate_password(16)
        self.assertEqual(len(pwd), 16)
        self.assertTrue(pwd.isalnum())
        self.assertNotEqual(pwd, generate_password(16))


class JSONFormatterTests(SimpleTestCase):
    def _record(self, msg, **extra):
        record = logging.LogRecord("apps.test", logging.INFO, __file__, 1, msg, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_redacts_sensitive_keys(self):
        out = json.loads(JSONFormatter().format(self._record({"email": "a@b.co", "temp_password": "abc"})))
        self.assertIn("REDACTED", out["msg"])
        self.assertNotIn("abc", out["msg"])
        self.assertIn("a@b.co", out["msg"])

    def test_includes_context_fields(self):
        out = json.loads(JSONFormatter().format(self._record("checkout", order_number=1001)))
        self.assertEqual(out["order_number"], "1001")
        self.assertEqual(out["lvl"], "INFO")


class HealthCheckTests(TestCase):
    def test_health_reports_ok(self):
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_health_reports_database_failure(self):
        with patch("apps.utils.health.connection.cursor", side_effect=OperationalError("db down")):
            with self.assertLogs("apps.utils.health", level="ERROR") as logs:
                resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["status"], "error")
        self.assertIn("Health check failed: db down", logs.output[0])
