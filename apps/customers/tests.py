# apps/customers/tests.py
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from apps.orders.models import Order
from apps.utils.exceptions import BusinessLogicException
from .models import Customer
from .services import CustomerService
from .tasks import send_welcome_email_task

User = get_user_model()

BUSINESS_INFO = {
    "email": "buyer@skatebarn.example",
    "business_name": "Skate Barn",
    "contact_name": "Sam Lee",
    "phone": "555-0123",
    "address": "1 Ramp Rd",
    "state": "NSW",
    "postcode": "2000",
    "country": "Australia",
}


@override_settings(
    EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend",
    PORTAL_NAME="Test Portal",
)
class ProvisionCustomerTests(TestCase):
    def test_creates_login_and_customer(self):
        with patch("apps.customers.services.send_welcome_email_task.delay") as delay:
            with self.captureOnCommitCallbacks(execute=True):
                customer = CustomerService.provision_customer(BUSINESS_INFO)

        self.assertEqual(customer.business_name, "Skate Barn")
        self.assertEqual(customer.user.email, "buyer@skatebarn.example")
        self.assertTrue(customer.user.must_change_password)
        self.assertTrue(customer.user.is_customer)
        self.assertFalse(customer.user.is_staff)

        delay.assert_called_once()
        email, business_name, temp_password = delay.call_args.args
        self.assertEqual(email, "buyer@skatebarn.example")
        self.assertEqual(len(temp_password), 16)
        self.assertTrue(customer.user.check_password(temp_password))

    def test_email_not_queued_before_commit(self):
        with patch("apps.customers.services.send_welcome_email_task.delay") as delay:
            with self.captureOnCommitCallbacks(execute=False) as callbacks:
                CustomerService.provision_customer(BUSINESS_INFO)
            delay.assert_not_called()
        self.assertEqual(len(callbacks), 1)

    def test_duplicate_email_rejected(self):
        User.objects.create_user(email="Buyer@SkateBarn.example", password="x")
        with self.assertRaises(BusinessLogicException):
            CustomerService.provision_customer(BUSINESS_INFO)
        self.assertEqual(Customer.objects.count(), 0)

    def test_queue_failure_is_swallowed(self):
        with patch("apps.customers.services.send_welcome_email_task.delay", side_effect=ConnectionError("broker down")):
            with self.assertLogs("apps.customers.services", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    customer = CustomerService.provision_customer(BUSINESS_INFO)
        self.assertTrue(Customer.objects.filter(pk=customer.pk).exists())


@override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend", PORTAL_NAME="Test Portal")
class WelcomeEmailTaskTests(TestCase):
    def test_sends_temporary_password(self):
        self.assertTrue(send_welcome_email_task.apply(args=("a@b.example", "Skate Barn", "temp1234")).get())
        self.assertEqual(len(mail.outbox), 1)
        msg = mail.outbox[0]
        self.assertEqual(msg.subject, "Welcome to Test Portal")
        self.assertEqual(msg.to, ["a@b.example"])
        self.assertIn("temp1234", msg.body)
        self.assertIn("change your password", msg.body)

    def test_send_failure_returns_false(self):
        with patch("apps.customers.tasks.send_mail", side_effect=OSError("smtp down")):
            with self.assertLogs("apps.customers.tasks", level="ERROR"):
                result = send_welcome_email_task.apply(args=("a@b.example", "Skate Barn", "temp1234")).get()
        self.assertFalse(result)


class CustomerServiceTests(TestCase):
    def setUp(self):
        with patch("apps.customers.services.send_welcome_email_task.delay"):
            self.customer = CustomerService.provision_customer(BUSINESS_INFO)

    def test_delete_removes_login(self):
        user_id = self.customer.user_id
        CustomerService.delete_customer(self.customer)
        self.assertFalse(Customer.objects.exists())
        self.assertFalse(User.objects.filter(pk=user_id).exists())

    def test_delete_refused_when_orders_exist(self):
        Order.objects.create(number=1001, customer=self.customer, total=Decimal("10.00"))
        with self.assertRaises(BusinessLogicException):
            CustomerService.delete_customer(self.customer)
        self.assertTrue(Customer.objects.filter(pk=self.customer.pk).exists())


class CustomerProvisionAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="admin@example.com", password="testpass123", is_staff=True)

    def test_staff_only(self):
        buyer = User.objects.create_user(email="someone@example.com", password="testpass123")
        self.client.force_authenticate(buyer)
        resp = self.client.post("/api/customers", BUSINESS_INFO, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    @patch("apps.customers.services.send_welcome_email_task.delay")
    def test_provision_returns_record(self, delay):
        self.client.force_authenticate(self.staff)
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post("/api/customers", BUSINESS_INFO, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["business_name"], "Skate Barn")
        self.assertNotIn("temp_password", resp.data)
        delay.assert_called_once()

    @patch("apps.customers.services.send_welcome_email_task.delay")
    def test_failure_shape(self, delay):
        self.client.force_authenticate(self.staff)
        self.client.post("/api/customers", BUSINESS_INFO, format="json")

        resp = self.client.post("/api/customers", BUSINESS_INFO, format="json")
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertIn("error", resp.data)

        resp = self.client.post("/api/customers", {"email": "not-an-email"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertIn("email", resp.data["error"])


class CustomerAdminAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="admin@example.com", password="testpass123", is_staff=True)
        with patch("apps.customers.services.send_welcome_email_task.delay"):
            self.zed = CustomerService.provision_customer(dict(BUSINESS_INFO, email="z@example.com", business_name="Zed Boards"))
            self.acme = CustomerService.provision_customer(dict(BUSINESS_INFO, email="a@example.com", business_name="Acme Skates"))
        self.client.force_authenticate(self.staff)

    def test_list_ordered_by_business_name(self):
        resp = self.client.get("/api/v1/customers/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([c["business_name"] for c in resp.data["results"]], ["Acme Skates", "Zed Boards"])

    def test_search(self):
        resp = self.client.get("/api/v1/customers/", {"search": "zed"})
        self.assertEqual([c["business_name"] for c in resp.data["results"]], ["Zed Boards"])

    def test_update(self):
        before = self.acme.updated_at
        resp = self.client.patch(f"/api/v1/customers/{self.acme.pk}/", {"state": "VIC"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.acme.refresh_from_db()
        self.assertEqual(self.acme.state, "VIC")
        self.assertGreater(self.acme.updated_at, before)

    def test_invalid_phone_rejected(self):
        resp = self.client.patch(f"/api/v1/customers/{self.acme.pk}/", {"phone": "12"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_with_orders_refused(self):
        Order.objects.create(number=1001, customer=self.acme, total=Decimal("1.00"))
        resp = self.client.delete(f"/api/v1/customers/{self.acme.pk}/")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "customer_has_orders")

        resp = self.client.delete(f"/api/v1/customers/{self.zed.pk}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)

    def test_profile_for_customer_only(self):
        resp = self.client.get("/api/v1/customers/profile/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.acme.user)
        resp = self.client.get("/api/v1/customers/profile/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["business_name"], "Acme Skates")
