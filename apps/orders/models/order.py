from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Max

from apps.utils.models import TimestampedModel, SoftDeleteModel, SoftDeleteQuerySet
from apps.orders import pricing

FIRST_ORDER_NUMBER = 1001


class OrderQuerySet(SoftDeleteQuerySet):
    def for_customer(self, customer):
        return self.active().filter(customer=customer)

    def next_number(self) -> int:
        # Call inside the creating transaction; the unique constraint catches races.
        current = self.aggregate(n=Max("number"))["n"]
        return (current or FIRST_ORDER_NUMBER - 1) + 1


class Order(TimestampedModel, SoftDeleteModel):
    class Status(models.TextChoices):
        NEW = "new", "New"
        INVOICED = "invoiced", "Invoiced"
        DISPATCHED = "dispatched", "Dispatched"

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", "Unpaid"
        PAID = "paid", "Paid"

    number = models.PositiveIntegerField(unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    # Cached; refreshed on every item or shipping change
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.NEW, db_index=True)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
        db_index=True,
    )
    shipping_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
    )

    # Snapshot of the checkout form, one field per line
    shipping_address = models.TextField(blank=True)
    internal_notes = models.TextField(blank=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]

    def __str__(self):
        return f"#{self.number} [{self.status}/{self.payment_status}]"

    @property
    def items_subtotal(self) -> Decimal:
        return pricing.items_subtotal(self.items.all())

    @property
    def grand_total(self) -> Decimal:
        return pricing.grand_total(self.items.all(), self.shipping_cost)

    def refresh_total(self):
        self.total = self.grand_total
        self.save(update_fields=["total", "updated_at"])
        return self.total
