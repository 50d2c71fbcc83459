from decimal import Decimal

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def line_total(quantity, unit_price) -> Decimal:
    return (Decimal(str(unit_price)) * int(quantity)).quantize(CENT)


def items_subtotal(items) -> Decimal:
    """
    Sum of quantity x unit_price over anything with those two attributes.
    """
    total = ZERO
    for item in items:
        total += line_total(item.quantity, item.unit_price)
    return total


def grand_total(items, shipping_cost) -> Decimal:
    return (items_subtotal(items) + Decimal(str(shipping_cost or 0))).quantize(CENT)
