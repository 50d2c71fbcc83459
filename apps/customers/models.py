# apps/customers/models.py

from django.conf import settings
from django.db import models

from apps.utils.models import TimestampedModel


class Customer(TimestampedModel):
    """
    Wholesale buyer. Exactly one login per customer.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="customer",
    )
    business_name = models.CharField(max_length=255, db_index=True)
    contact_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField()
    phone = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)
    state = models.CharField(max_length=100, blank=True)
    postcode = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, blank=True)

    class Meta:
        db_table = "customers"
        ordering = ["business_name"]

    def __str__(self):
        return self.business_name
