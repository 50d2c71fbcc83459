# apps/orders/tests.py
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, SimpleTestCase

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from apps.catalog.models import Product
from apps.customers.models import Customer
from apps.utils.exceptions import BusinessLogicException
from .cart import Cart
from .models import Order, OrderItem
from .pricing import grand_total, items_subtotal, line_total
from .services import AdminOrderService, CheckoutService, format_shipping_address

User = get_user_model()

SHIPPING_FORM = {
    "business_name": "Skate Barn",
    "contact_name": "Sam Lee",
    "email": "sam@skatebarn.example",
    "phone": "555-0123",
    "address": "1 Ramp Rd",
    "state": "NSW",
    "postcode": "2000",
    "country": "Australia",
    "notes": "Leave at back door",
}


def make_customer(email="sam@skatebarn.example", business_name="Skate Barn"):
    user = User.objects.create_user(email=email, password="testpass123")
    return Customer.objects.create(user=user, business_name=business_name, contact_name="Sam Lee", email=email)


def make_products():
    a = Product.objects.create(title="NATIVE VERSA FORK BLACK", sku="NVF-BLK", unit_price=Decimal("29.99"))
    b = Product.objects.create(title="VERSATYL DECK PURPLE", sku="VDP", unit_price=Decimal("39.99"))
    return a, b


class PricingTests(SimpleTestCase):
    class Line:
        def __init__(self, quantity, unit_price):
            self.quantity = quantity
            self.unit_price = Decimal(unit_price)

    def test_line_and_subtotals(self):
        lines = [self.Line(2, "29.99"), self.Line(1, "39.99")]
        self.assertEqual(line_total(2, Decimal("29.99")), Decimal("59.98"))
        self.assertEqual(items_subtotal(lines), Decimal("99.97"))
        self.assertEqual(grand_total(lines, Decimal("5.00")), Decimal("104.97"))
        self.assertEqual(items_subtotal([]), Decimal("0.00"))


class CartTests(SimpleTestCase):
    def setUp(self):
        self.store = {}
        self.cart = Cart(self.store)

    def test_set_quantity_upserts_and_removes(self):
        self.cart.set_quantity("p1", 3)
        self.assertEqual(self.store["cart"], {"p1": 3})
        self.cart.set_quantity("p1", 1)
        self.assertEqual(self.cart.quantity("p1"), 1)
        self.cart.set_quantity("p1", 0)
        self.assertNotIn("p1", self.store["cart"])
        self.cart.set_quantity("p2", -4)
        self.assertEqual(self.store["cart"], {})

    def test_add_merges(self):
        self.cart.add("p1")
        self.cart.add("p1", 2)
        self.assertEqual(self.cart.quantity("p1"), 3)

    def test_remove_and_clear(self):
        self.cart.set_quantity("p1", 2)
        self.cart.set_quantity("p2", 1)
        self.cart.remove("p1")
        self.cart.remove("missing")
        self.assertEqual(self.cart.items, {"p2": 1})
        self.cart.clear()
        self.assertTrue(self.cart.is_empty())


class CartSubtotalTests(TestCase):
    def test_subtotal_uses_live_prices_and_skips_unknown(self):
        a, b = make_products()
        cart = Cart({})
        cart.set_quantity(a.pk, 2)
        cart.set_quantity(b.pk, 1)
        cart.set_quantity("00000000-0000-0000-0000-000000000000", 5)
        self.assertEqual(cart.subtotal(), Decimal("99.97"))

        Product.objects.filter(pk=a.pk).update(unit_price=Decimal("10.00"))
        self.assertEqual(cart.subtotal(), Decimal("59.99"))

    def test_prune_drops_unknown_entries(self):
        a, b = make_products()
        cart = Cart({})
        cart.set_quantity(a.pk, 2)
        cart.set_quantity("00000000-0000-0000-0000-000000000000", 5)
        cart.set_quantity("garbage", 1)
        self.assertEqual(
            sorted(cart.prune(cart.lines())),
            ["00000000-0000-0000-0000-000000000000", "garbage"],
        )
        self.assertEqual(cart.items, {str(a.pk): 2})
        self.assertEqual(cart.prune(cart.lines()), [])


class CheckoutServiceTests(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.a, self.b = make_products()
        self.cart = Cart({})

    def test_checkout_creates_order_and_items(self):
        self.cart.set_quantity(self.a.pk, 2)
        self.cart.set_quantity(self.b.pk, 1)

        order = CheckoutService.checkout(self.customer.user, self.cart, SHIPPING_FORM)

        self.assertEqual(order.total, Decimal("99.97"))
        self.assertEqual(order.status, Order.Status.NEW)
        self.assertEqual(order.payment_status, Order.PaymentStatus.UNPAID)
        self.assertEqual(order.shipping_cost, Decimal("0.00"))
        self.assertEqual(order.internal_notes, "Leave at back door")
        self.assertEqual(order.items.count(), 2)
        item = order.items.get(product=self.a)
        self.assertEqual(item.product_title, "NATIVE VERSA FORK BLACK")
        self.assertEqual(item.unit_price, Decimal("29.99"))
        self.assertEqual(item.quantity, 2)
        self.assertTrue(self.cart.is_empty())

    def test_shipping_address_format(self):
        self.assertEqual(
            format_shipping_address(SHIPPING_FORM),
            "Skate Barn\nSam Lee\nsam@skatebarn.example\n555-0123\n1 Ramp Rd\nNSW 2000\nAustralia",
        )

    def test_empty_cart_creates_nothing(self):
        self.cart.set_quantity(self.a.pk, 0)
        with self.assertRaisesMessage(BusinessLogicException, "Cart is empty."):
            CheckoutService.checkout(self.customer.user, self.cart, SHIPPING_FORM)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

    def test_unavailable_product_rolls_back(self):
        self.cart.set_quantity(self.a.pk, 1)
        self.cart.set_quantity(self.b.pk, 1)
        Product.objects.filter(pk=self.b.pk).update(is_available=False)

        with self.assertRaises(BusinessLogicException):
            CheckoutService.checkout(self.customer.user, self.cart, SHIPPING_FORM)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)
        self.assertFalse(self.cart.is_empty())

    def test_login_without_customer_rejected(self):
        staff = User.objects.create_user(email="staff@example.com", password="x", is_staff=True)
        self.cart.set_quantity(self.a.pk, 1)
        with self.assertRaises(BusinessLogicException):
            CheckoutService.checkout(staff, self.cart, SHIPPING_FORM)
        self.assertEqual(Order.objects.count(), 0)

    def test_order_numbers_are_sequential(self):
        self.cart.set_quantity(self.a.pk, 1)
        first = CheckoutService.checkout(self.customer.user, self.cart, SHIPPING_FORM)
        self.cart.set_quantity(self.a.pk, 1)
        second = CheckoutService.checkout(self.customer.user, self.cart, SHIPPING_FORM)
        self.assertEqual(second.number, first.number + 1)


class AdminOrderServiceTests(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.a, self.b = make_products()
        cart = Cart({})
        cart.set_quantity(self.a.pk, 2)
        cart.set_quantity(self.b.pk, 1)
        self.order = CheckoutService.checkout(self.customer.user, cart, SHIPPING_FORM)

    def test_shipping_cost_updates_total(self):
        order = AdminOrderService.set_shipping_cost(self.order.pk, Decimal("5.00"))
        self.assertEqual(order.total, Decimal("104.97"))
        self.assertEqual(order.grand_total, Decimal("104.97"))

    def test_status_axes_are_independent(self):
        AdminOrderService.set_status(self.order.pk, "dispatched")
        AdminOrderService.set_payment_status(self.order.pk, "unpaid")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "dispatched")
        self.assertEqual(self.order.payment_status, "unpaid")

        AdminOrderService.set_status(self.order.pk, "new")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "new")

    def test_item_edits_refresh_total(self):
        item = self.order.items.get(product=self.a)
        order = AdminOrderService.update_item(self.order.pk, item.pk, quantity=3, unit_price="20.00")
        self.assertEqual(order.total, Decimal("99.99"))

        order = AdminOrderService.add_item(self.order.pk, self.a.pk)
        self.assertEqual(order.items.count(), 3)
        self.assertEqual(order.total, Decimal("129.98"))

        order = AdminOrderService.remove_item(self.order.pk, item.pk)
        self.assertEqual(order.total, Decimal("69.98"))

    def test_invalid_item_values_rejected(self):
        item = self.order.items.first()
        with self.assertRaises(BusinessLogicException):
            AdminOrderService.update_item(self.order.pk, item.pk, quantity=0)
        with self.assertRaises(BusinessLogicException):
            AdminOrderService.update_item(self.order.pk, item.pk, unit_price="-1")
        with self.assertRaises(BusinessLogicException):
            AdminOrderService.set_shipping_cost(self.order.pk, "-0.01")

    def test_malformed_ids_rejected(self):
        with self.assertRaises(BusinessLogicException):
            AdminOrderService.remove_item(self.order.pk, "not-a-uuid")
        with self.assertRaises(BusinessLogicException):
            AdminOrderService.add_item(self.order.pk, "not-a-uuid")
        self.assertEqual(self.order.items.count(), 2)

    def test_deleted_product_falls_back_to_snapshot(self):
        self.a.delete()
        item = self.order.items.get(product_title="NATIVE VERSA FORK BLACK")
        self.assertIsNone(item.product)
        self.assertEqual(item.display_title, "NATIVE VERSA FORK BLACK")
        item.product_title = ""
        self.assertEqual(item.display_title, "Unknown Product")

    def test_soft_delete_keeps_row(self):
        AdminOrderService.soft_delete(self.order.pk)
        self.assertFalse(Order.objects.active().filter(pk=self.order.pk).exists())
        row = Order.objects.get(pk=self.order.pk)
        self.assertTrue(row.is_deleted)
        self.assertIsNotNone(row.deleted_at)
        with self.assertRaises(BusinessLogicException):
            AdminOrderService.set_status(self.order.pk, "invoiced")


class CartAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.a, self.b = make_products()

    def test_anonymous_cart_flow(self):
        resp = self.client.post("/api/v1/orders/cart/set-quantity/", {"product_id": str(self.a.pk), "quantity": 2}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.client.post("/api/v1/orders/cart/add/", {"product_id": str(self.b.pk)}, format="json")

        resp = self.client.get("/api/v1/orders/cart/")
        self.assertEqual(resp.data["subtotal"], "99.97")
        self.assertEqual(resp.data["count"], 2)

        self.client.post("/api/v1/orders/cart/remove/", {"product_id": str(self.b.pk)}, format="json")
        resp = self.client.get("/api/v1/orders/cart/")
        self.assertEqual(resp.data["subtotal"], "59.98")

        resp = self.client.post("/api/v1/orders/cart/clear/")
        self.assertEqual(resp.data["count"], 0)

    def test_unknown_or_unavailable_product_rejected(self):
        resp = self.client.post(
            "/api/v1/orders/cart/set-quantity/",
            {"product_id": "00000000-0000-0000-0000-000000000000", "quantity": 1},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        Product.objects.filter(pk=self.a.pk).update(is_available=False)
        resp = self.client.post("/api/v1/orders/cart/add/", {"product_id": str(self.a.pk)}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "product_unavailable")

    def test_zero_quantity_removes_without_lookup(self):
        pid = str(self.a.pk)
        self.client.post("/api/v1/orders/cart/set-quantity/", {"product_id": pid, "quantity": 2}, format="json")
        self.a.delete()
        resp = self.client.post("/api/v1/orders/cart/set-quantity/", {"product_id": pid, "quantity": 0}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["count"], 0)
        self.assertNotIn(pid, self.client.session.get("cart", {}))

    def test_deleted_products_dropped_from_cart(self):
        pid = str(self.a.pk)
        self.client.post("/api/v1/orders/cart/set-quantity/", {"product_id": pid, "quantity": 2}, format="json")
        self.client.post("/api/v1/orders/cart/add/", {"product_id": str(self.b.pk)}, format="json")
        self.a.delete()

        resp = self.client.get("/api/v1/orders/cart/")
        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(resp.data["subtotal"], "39.99")
        self.assertEqual(self.client.session["cart"], {str(self.b.pk): 1})


class CheckoutAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.customer = make_customer()
        self.a, self.b = make_products()

    def fill_cart(self):
        self.client.post("/api/v1/orders/cart/set-quantity/", {"product_id": str(self.a.pk), "quantity": 2}, format="json")
        self.client.post("/api/v1/orders/cart/set-quantity/", {"product_id": str(self.b.pk), "quantity": 1}, format="json")

    def test_unauthenticated_checkout_rejected(self):
        self.fill_cart()
        resp = self.client.post("/api/v1/orders/checkout/", SHIPPING_FORM, format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(Order.objects.count(), 0)

    def test_checkout_and_history(self):
        self.fill_cart()
        self.client.force_authenticate(self.customer.user)

        resp = self.client.post("/api/v1/orders/checkout/", SHIPPING_FORM, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["redirect"], "/orders")
        self.assertEqual(resp.data["order"]["total"], "99.97")
        self.assertNotIn("internal_notes", resp.data["order"])

        resp = self.client.get("/api/v1/orders/cart/")
        self.assertEqual(resp.data["count"], 0)

        resp = self.client.get("/api/v1/orders/orders/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data["results"]), 1)
        items = resp.data["results"][0]["items"]
        self.assertEqual({i["subtotal"] for i in items}, {"59.98", "39.99"})

    def test_empty_cart_checkout(self):
        self.client.force_authenticate(self.customer.user)
        resp = self.client.post("/api/v1/orders/checkout/", SHIPPING_FORM, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error"], "Cart is empty.")
        self.assertEqual(Order.objects.count(), 0)

    def test_customers_only_see_their_own_orders(self):
        other = make_customer(email="other@example.com", business_name="Other Co")
        cart = Cart({})
        cart.set_quantity(self.a.pk, 1)
        theirs = CheckoutService.checkout(other.user, cart, SHIPPING_FORM)

        self.client.force_authenticate(self.customer.user)
        resp = self.client.get(f"/api/v1/orders/orders/{theirs.pk}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_reorder_adds_available_products(self):
        cart = Cart({})
        cart.set_quantity(self.a.pk, 2)
        cart.set_quantity(self.b.pk, 1)
        order = CheckoutService.checkout(self.customer.user, cart, SHIPPING_FORM)
        Product.objects.filter(pk=self.b.pk).update(is_available=False)

        self.client.force_authenticate(self.customer.user)
        self.client.post("/api/v1/orders/cart/set-quantity/", {"product_id": str(self.a.pk), "quantity": 1}, format="json")
        resp = self.client.post(f"/api/v1/orders/orders/{order.pk}/reorder/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["added"], [str(self.a.pk)])
        self.assertEqual(resp.data["items"][0]["quantity"], 3)


class AdminOrderAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="admin@example.com", password="testpass123", is_staff=True)
        self.customer = make_customer()
        self.a, self.b = make_products()
        cart = Cart({})
        cart.set_quantity(self.a.pk, 2)
        cart.set_quantity(self.b.pk, 1)
        self.order = CheckoutService.checkout(self.customer.user, cart, SHIPPING_FORM)
        self.url = f"/api/v1/orders/admin/orders/{self.order.pk}/"
        self.client.force_authenticate(self.staff)

    def test_customer_cannot_access_console(self):
        self.client.force_authenticate(self.customer.user)
        resp = self.client.get("/api/v1/orders/admin/orders/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_shows_totals_and_notes(self):
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["items_subtotal"], "99.97")
        self.assertEqual(resp.data["grand_total"], "99.97")
        self.assertEqual(resp.data["internal_notes"], "Leave at back door")
        self.assertEqual(resp.data["business_name"], "Skate Barn")

    def test_shipping_and_status_updates(self):
        resp = self.client.post(f"{self.url}shipping-cost/", {"shipping_cost": "5.00"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["grand_total"], "104.97")
        self.assertEqual(resp.data["total"], "104.97")

        self.client.post(f"{self.url}status/", {"status": "dispatched"}, format="json")
        resp = self.client.post(f"{self.url}payment-status/", {"payment_status": "unpaid"}, format="json")
        self.assertEqual(resp.data["status"], "dispatched")
        self.assertEqual(resp.data["payment_status"], "unpaid")

        resp = self.client.post(f"{self.url}status/", {"status": "shipped"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_item_endpoints(self):
        item = self.order.items.get(product=self.b)
        resp = self.client.patch(f"{self.url}items/{item.pk}/", {"quantity": 2}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["total"], "139.96")

        resp = self.client.post(f"{self.url}items/", {"product_id": str(self.a.pk)}, format="json")
        self.assertEqual(len(resp.data["items"]), 3)

        resp = self.client.delete(f"{self.url}items/{item.pk}/")
        self.assertEqual(len(resp.data["items"]), 2)
        self.assertEqual(resp.data["total"], "89.97")

        resp = self.client.post(f"{self.url}internal-notes/", {"internal_notes": "Call first"}, format="json")
        self.assertEqual(resp.data["internal_notes"], "Call first")

    def test_malformed_item_id_not_found(self):
        resp = self.client.patch(f"{self.url}items/not-a-uuid/", {"quantity": 2}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "item_not_found")

        resp = self.client.delete(f"{self.url}items/not-a-uuid/")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "item_not_found")

    def test_filter_and_search(self):
        AdminOrderService.set_status(self.order.pk, "invoiced")
        resp = self.client.get("/api/v1/orders/admin/orders/", {"status": "invoiced"})
        self.assertEqual(len(resp.data["results"]), 1)
        resp = self.client.get("/api/v1/orders/admin/orders/", {"status": "new"})
        self.assertEqual(len(resp.data["results"]), 0)
        resp = self.client.get("/api/v1/orders/admin/orders/", {"search": "skate"})
        self.assertEqual(len(resp.data["results"]), 1)

    def test_delete_is_soft(self):
        resp = self.client.delete(self.url)
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(Order.objects.filter(pk=self.order.pk, is_deleted=True).exists())

        resp = self.client.get("/api/v1/orders/admin/orders/")
        self.assertEqual(len(resp.data["results"]), 0)

        self.client.force_authenticate(self.customer.user)
        resp = self.client.get("/api/v1/orders/orders/")
        self.assertEqual(len(resp.data["results"]), 0)
