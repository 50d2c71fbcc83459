import uuid

from django.core.validators import MinValueValidator
from django.db import models

from apps.catalog.models import Product
from apps.orders import pricing
from .order import Order

UNKNOWN_PRODUCT = "Unknown Product"


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        Product,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="order_items",
    )

    # Snapshot fields (kept when the product is edited or deleted)
    product_title = models.CharField(max_length=255, blank=True)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]

    @property
    def subtotal(self):
        return pricing.line_total(self.quantity, self.unit_price)

    @property
    def display_title(self):
        if self.product is not None:
            return self.product.title
        return self.product_title or UNKNOWN_PRODUCT

    def __str__(self):
        return f"{self.quantity}x {self.display_title}"
