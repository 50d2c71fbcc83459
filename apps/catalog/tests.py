# apps/catalog/tests.py
import os
import shutil
import tempfile
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase, override_settings

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from .models import Product, ProductImage
from .services import ProductImageService, ProductService, fuzzy_match, fuzzy_search

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()


def make_product(title="NATIVE VERSA FORK BLACK", sku="NVF-BLK", price="29.99", **kwargs):
    return Product.objects.create(title=title, sku=sku, unit_price=Decimal(price), **kwargs)


def fake_image(name="photo.png"):
    return SimpleUploadedFile(name, b"\x89PNG\r\n\x1a\n" + b"0" * 32, content_type="image/png")


class FuzzyMatchTests(SimpleTestCase):
    def test_in_order_subsequence_matches(self):
        self.assertTrue(fuzzy_match("nvf", "NATIVE VERSA FORK BLACK"))
        self.assertTrue(fuzzy_match("DECK", "Versatyl Deck Purple"))
        self.assertTrue(fuzzy_match("", "anything"))

    def test_out_of_order_does_not_match(self):
        self.assertFalse(fuzzy_match("fvn", "NATIVE VERSA FORK BLACK"))
        self.assertFalse(fuzzy_match("xyz", "ETHIC ERAWAN DECK"))


class FuzzySearchTests(TestCase):
    def test_filters_by_title(self):
        fork = make_product()
        make_product(title="ETHIC ERAWAN DECK", sku="EED", price="89.99")
        self.assertEqual(fuzzy_search("frk"), [fork])
        self.assertEqual(len(fuzzy_search("  ")), 2)


class ProductServiceTests(TestCase):
    def test_toggle_availability(self):
        product = make_product()
        ProductService.toggle_availability(product)
        product.refresh_from_db()
        self.assertFalse(product.is_available)
        ProductService.toggle_availability(product)
        product.refresh_from_db()
        self.assertTrue(product.is_available)

    def test_set_stock_status(self):
        product = make_product()
        ProductService.set_stock_status(product, Product.StockStatus.LOW_STOCK)
        product.refresh_from_db()
        self.assertEqual(product.stock_status, "low_stock")


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ProductImageServiceTests(TestCase):
    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def setUp(self):
        self.product = make_product()
        self.images = [ProductImageService.add_image(self.product, fake_image(f"{i}.png")) for i in range(3)]

    def orders(self):
        return list(self.product.images.order_by("display_order").values_list("id", "display_order"))

    def test_upload_appends_at_end(self):
        self.assertEqual([img.display_order for img in self.images], [0, 1, 2])
        self.assertTrue(self.images[0].image.name.startswith(f"product-images/{self.product.id}/"))

    def test_delete_resequences(self):
        ProductImageService.delete_image(self.product, self.images[0].id)
        self.assertEqual(self.orders(), [(self.images[1].id, 0), (self.images[2].id, 1)])

    def test_move_resequences(self):
        ProductImageService.move_image(self.product, self.images[2].id, 0)
        self.assertEqual(
            self.orders(),
            [(self.images[2].id, 0), (self.images[0].id, 1), (self.images[1].id, 2)],
        )

    def test_reorder_requires_permutation(self):
        from apps.utils.exceptions import BusinessLogicException

        with self.assertRaises(BusinessLogicException):
            ProductImageService.reorder_images(self.product, [self.images[0].id])

        ids = [self.images[1].id, self.images[2].id, self.images[0].id]
        ProductImageService.reorder_images(self.product, ids)
        self.assertEqual([i for i, _ in self.orders()], ids)


class StorefrontProductTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="testpass123")
        self.visible = make_product()
        self.hidden = make_product(title="Hidden", sku="HID", is_available=False)

    def test_requires_authentication(self):
        resp = self.client.get("/api/v1/catalog/products/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_lists_only_available_products(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get("/api/v1/catalog/products/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        skus = [p["sku"] for p in resp.data["results"]]
        self.assertEqual(skus, ["NVF-BLK"])


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class AdminProductAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="admin@example.com", password="testpass123", is_staff=True)
        self.normal = User.objects.create_user(email="buyer@example.com", password="testpass123")
        self.product = make_product()
        self.client.force_authenticate(self.staff)

    def test_non_staff_forbidden(self):
        self.client.force_authenticate(self.normal)
        resp = self.client.get("/api/v1/catalog/admin/products/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_product(self):
        resp = self.client.post(
            "/api/v1/catalog/admin/products/",
            {"title": "VERSATYL DECK PURPLE", "sku": "VDP", "unit_price": "39.99", "stock_quantity": 4},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Product.objects.filter(sku="VDP", is_available=True).exists())

    def test_negative_price_rejected(self):
        resp = self.client.post(
            "/api/v1/catalog/admin/products/",
            {"title": "Bad", "sku": "BAD", "unit_price": "-1.00"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_toggle_and_stock_status(self):
        resp = self.client.post(f"/api/v1/catalog/admin/products/{self.product.id}/toggle-availability/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(resp.data["is_available"])

        resp = self.client.post(
            f"/api/v1/catalog/admin/products/{self.product.id}/stock-status/",
            {"stock_status": "out_of_stock"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["stock_status"], "out_of_stock")

    def test_fuzzy_search_endpoint(self):
        make_product(title="ETHIC ERAWAN DECK", sku="EED", price="89.99")
        resp = self.client.get("/api/v1/catalog/admin/products/search/", {"q": "ethdk"})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([p["sku"] for p in resp.data], ["EED"])

    def test_image_upload_move_delete(self):
        url = f"/api/v1/catalog/admin/products/{self.product.id}/images/"
        first = self.client.post(url, {"image": fake_image("a.png")}, format="multipart")
        second = self.client.post(url, {"image": fake_image("b.png")}, format="multipart")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.data["display_order"], 1)

        resp = self.client.post(f"{url}{second.data['id']}/move/", {"position": 0}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data[0]["id"], second.data["id"])

        resp = self.client.delete(f"{url}{second.data['id']}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["display_order"], 0)
        self.assertEqual(ProductImage.objects.filter(product=self.product).count(), 1)

    def test_delete_product(self):
        resp = self.client.delete(f"/api/v1/catalog/admin/products/{self.product.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=self.product.pk).exists())


class CatalogCommandTests(TestCase):
    def test_seed_portal_is_idempotent(self):
        out = StringIO()
        call_command("seed_portal", stdout=out)
        call_command("seed_portal", stdout=out)
        self.assertEqual(Product.objects.count(), 4)
        self.assertTrue(User.objects.get(email="admin@example.com").is_staff)
        self.assertEqual(Product.objects.get(sku="VDP").unit_price, Decimal("39.99"))

    def test_import_catalog_upserts_by_sku(self):
        make_product()
        with tempfile.NamedTemporaryFile("w", suffix=".csv", delete=False, encoding="utf-8") as f:
            f.write("sku,title,unit_price,description,stock_quantity\n")
            f.write("NVF-BLK,NATIVE VERSA FORK BLACK,31.00,,5\n")
            f.write("EED,ETHIC ERAWAN DECK,89.99,Pro deck,2\n")
            f.write(",No sku,1.00,,1\n")
            path = f.name
        self.addCleanup(os.remove, path)

        out = StringIO()
        call_command("import_catalog", path, stdout=out)
        self.assertIn("Imported 1 new, 1 updated", out.getvalue())
        self.assertEqual(Product.objects.get(sku="NVF-BLK").unit_price, Decimal("31.00"))
        self.assertEqual(Product.objects.get(sku="EED").description, "Pro deck")
