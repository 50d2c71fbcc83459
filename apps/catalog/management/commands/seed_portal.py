from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from apps.catalog.models import Product

SAMPLE_PRODUCTS = [
    ("NVF-BLK", "NATIVE VERSA FORK BLACK", "29.99", 40, Product.StockStatus.IN_STOCK),
    ("VDP", "VERSATYL DECK PURPLE", "39.99", 12, Product.StockStatus.IN_STOCK),
    ("EED", "ETHIC ERAWAN DECK", "89.99", 3, Product.StockStatus.LOW_STOCK),
    ("NBG-CHR", "NATIVE BARS GRIND CHROME", "54.50", 0, Product.StockStatus.OUT_OF_STOCK),
]


class Command(BaseCommand):
    help = "Seeds an admin login and sample products for local development"

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', default='admin@example.com')
        parser.add_argument('--admin-password', default='admin12345')

    def handle(self, *args, **options):
        User = get_user_model()

        admin, created = User.objects.get_or_create(
            email=options['admin_email'],
            defaults={'is_staff': True, 'is_superuser': True, 'full_name': 'Portal Admin'},
        )
        if created:
            admin.set_password(options['admin_password'])
            admin.save(update_fields=['password'])
            self.stdout.write(self.style.SUCCESS(f"Admin created: {admin.email}"))
        else:
            self.stdout.write(f"Admin exists: {admin.email}")

        for sku, title, price, stock, stock_status in SAMPLE_PRODUCTS:
            Product.objects.update_or_create(
                sku=sku,
                defaults={
                    'title': title,
                    'unit_price': Decimal(price),
                    'stock_quantity': stock,
                    'stock_status': stock_status,
                    'is_available': True,
                },
            )

        self.stdout.write(self.style.SUCCESS(f"Seeded {len(SAMPLE_PRODUCTS)} products."))
