import csv
import os
from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.catalog.models import Product


class Command(BaseCommand):
    help = 'Import products from CSV (columns: sku, title, unit_price, description, stock_quantity)'

    def add_arguments(self, parser):
        parser.add_argument('file_path', type=str, help='Path to CSV file')

    def handle(self, *args, **kwargs):
        file_path = kwargs['file_path']
        if not os.path.exists(file_path):
            raise CommandError(f'File not found: {file_path}')

        created = updated = 0
        with open(file_path, 'r', encoding='utf-8') as f:
            reader = csv.DictReader(f)
            with transaction.atomic():
                for line_no, row in enumerate(reader, start=2):
                    sku = (row.get('sku') or '').strip()
                    title = (row.get('title') or '').strip()
                    if not sku or not title:
                        self.stdout.write(self.style.WARNING(f'Line {line_no}: missing sku/title, skipped'))
                        continue

                    try:
                        price = Decimal((row.get('unit_price') or '0').strip())
                        stock = int((row.get('stock_quantity') or '0').strip())
                    except (InvalidOperation, ValueError):
                        raise CommandError(f'Line {line_no}: bad price or stock value')
                    if price < 0 or stock < 0:
                        raise CommandError(f'Line {line_no}: negative price or stock')

                    _, was_created = Product.objects.update_or_create(
                        sku=sku,
                        defaults={
                            'title': title,
                            'unit_price': price,
                            'description': (row.get('description') or '').strip(),
                            'stock_quantity': stock,
                        }
                    )
                    if was_created:
                        created += 1
                    else:
                        updated += 1

        self.stdout.write(self.style.SUCCESS(f'Imported {created} new, {updated} updated products.'))
