import os
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework.test import APIClient
from rest_framework import status

from apps.accounts.models import User


class UserManagerTests(TestCase):
    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email="Sam@Example.COM", password="pass12345")
        self.assertEqual(user.email, "Sam@example.com")
        self.assertFalse(user.is_staff)
        self.assertFalse(user.is_customer)

    def test_create_superuser(self):
        admin = User.objects.create_superuser(email="root@example.com", password="pass12345")
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)


class AuthAPITests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="buyer@example.com",
            password="temp-pass-123",
            must_change_password=True,
        )

    def test_login_returns_tokens(self):
        resp = self.client.post(
            "/api/v1/auth/token/",
            {"email": "buyer@example.com", "password": "temp-pass-123"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn("access", resp.data)
        self.assertIn("refresh", resp.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {resp.data['access']}")
        me = self.client.get("/api/v1/auth/me/")
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["email"], "buyer@example.com")
        self.assertTrue(me.data["must_change_password"])

    def test_login_wrong_password(self):
        resp = self.client.post(
            "/api/v1/auth/token/",
            {"email": "buyer@example.com", "password": "nope"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_auth(self):
        self.assertEqual(self.client.get("/api/v1/auth/me/").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_password_change_clears_flag(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(
            "/api/v1/auth/password/",
            {"current_password": "temp-pass-123", "new_password": "Fresh-Deck-2024!"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertFalse(self.user.must_change_password)
        self.assertTrue(self.user.check_password("Fresh-Deck-2024!"))

    def test_password_change_wrong_current(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(
            "/api/v1/auth/password/",
            {"current_password": "wrong", "new_password": "Fresh-Deck-2024!"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertTrue(self.user.must_change_password)


@override_settings(DEBUG=True)
class CreateAdminCommandTests(TestCase):

    @patch.dict(os.environ, {"ADMIN_EMAIL": "owner@example.com", "ADMIN_PASSWORD": "Owner-Pass-1"})
    def test_creates_staff_user(self):
        out = StringIO()
        call_command("create_admin", stdout=out)
        user = User.objects.get(email="owner@example.com")
        self.assertTrue(user.is_staff)
        self.assertTrue(user.check_password("Owner-Pass-1"))
        self.assertIn("Created admin", out.getvalue())
