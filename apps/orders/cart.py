import uuid
from collections import namedtuple

from apps.catalog.models import Product
from . import pricing

CART_SESSION_KEY = "cart"

CartLine = namedtuple("CartLine", ["product", "quantity", "unit_price", "subtotal"])


class Cart:
    """
    Mapping of product id -> quantity, kept in any mutable mapping
    (the request session in production). Entries never hold a
    quantity below 1.
    """

    def __init__(self, store, key=CART_SESSION_KEY):
        self.store = store
        self.key = key

    @classmethod
    def from_request(cls, request):
        return cls(request.session)

    @property
    def items(self) -> dict:
        return dict(self.store.get(self.key) or {})

    def _save(self, items):
        self.store[self.key] = items
        # Sessions only notice top-level assignment
        if hasattr(self.store, "modified"):
            self.store.modified = True

    def quantity(self, product_id) -> int:
        return self.items.get(str(product_id), 0)

    def set_quantity(self, product_id, qty):
        qty = max(0, int(qty))
        items = self.items
        if qty == 0:
            items.pop(str(product_id), None)
        else:
            items[str(product_id)] = qty
        self._save(items)

    def add(self, product_id, qty=1):
        self.set_quantity(product_id, self.quantity(product_id) + int(qty))

    def remove(self, product_id):
        items = self.items
        items.pop(str(product_id), None)
        self._save(items)

    def clear(self):
        self._save({})

    def __len__(self):
        return sum(1 for q in self.items.values() if q > 0)

    def is_empty(self) -> bool:
        return len(self) == 0

    def lines(self, queryset=None):
        """
        Cart entries joined with live product rows. Unknown products are skipped.
        """
        items = {k: q for k, q in self.items.items() if q > 0}
        ids = []
        for key in items:
            try:
                ids.append(uuid.UUID(key))
            except ValueError:
                continue

        queryset = Product.objects.all() if queryset is None else queryset
        products = {str(p.pk): p for p in queryset.filter(pk__in=ids)}

        lines = []
        for key, qty in items.items():
            product = products.get(key)
            if product is None:
                continue
            lines.append(CartLine(
                product=product,
                quantity=qty,
                unit_price=product.unit_price,
                subtotal=pricing.line_total(qty, product.unit_price),
            ))
        return lines

    def prune(self, lines):
        """
        Drop entries with no matching line, e.g. products deleted since they
        were added. `lines` must come from the unfiltered product table.
        """
        known = {str(line.product.pk) for line in lines}
        items = self.items
        stale = [key for key in items if key not in known]
        if stale:
            for key in stale:
                items.pop(key)
            self._save(items)
        return stale

    def subtotal(self, lines=None):
        return pricing.items_subtotal(self.lines() if lines is None else lines)
