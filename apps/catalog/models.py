# apps/catalog/models.py
import os
import uuid

from django.core.validators import MinValueValidator
from django.db import models

from apps.utils.models import TimestampedModel


def product_image_path(instance, filename):
    """
    product-images/<product id>/<random>.<ext>
    """
    ext = os.path.splitext(filename)[1].lower()
    return f"product-images/{instance.product_id}/{uuid.uuid4().hex}{ext}"


class Product(TimestampedModel):
    """
    Sellable item. Admin-managed, read-only to customers.
    """

    class StockStatus(models.TextChoices):
        IN_STOCK = "in_stock", "In Stock"
        LOW_STOCK = "low_stock", "Low Stock"
        OUT_OF_STOCK = "out_of_stock", "Out of Stock"

    title = models.CharField(max_length=255)
    sku = models.CharField(max_length=100, unique=True, db_index=True)
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
    )
    description = models.TextField(blank=True)
    stock_quantity = models.PositiveIntegerField(default=0)
    stock_status = models.CharField(
        max_length=20,
        choices=StockStatus.choices,
        default=StockStatus.IN_STOCK,
    )
    is_available = models.BooleanField(
        default=True,
        help_text="Only available products are shown on the storefront",
    )

    class Meta:
        db_table = "products"
        ordering = ["title"]
        indexes = [
            models.Index(fields=["is_available", "title"], name="products_avail_title_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.sku})"


class ProductImage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="images")
    image = models.FileField(upload_to=product_image_path)
    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "product_images"
        ordering = ["display_order", "created_at"]

    def __str__(self):
        return f"{self.product.sku} #{self.display_order}"
