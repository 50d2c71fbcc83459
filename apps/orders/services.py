import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.catalog.models import Product
from apps.customers.models import Customer
from apps.utils.exceptions import BusinessLogicException
from .cart import Cart
from .models import Order, OrderItem

logger = logging.getLogger(__name__)

ORDERS_PAGE = "/orders"

SHIPPING_FIELDS = (
    "business_name", "contact_name", "email", "phone",
    "address", "state", "postcode", "country",
)


def format_shipping_address(form: dict) -> str:
    f = {k: (form.get(k) or "").strip() for k in SHIPPING_FIELDS}
    return "\n".join([
        f["business_name"],
        f["contact_name"],
        f["email"],
        f["phone"],
        f["address"],
        f"{f['state']} {f['postcode']}",
        f["country"],
    ])


class CheckoutService:

    @staticmethod
    def get_customer(user) -> Customer:
        if user is None or not user.is_authenticated:
            raise BusinessLogicException("Not authenticated", code="not_authenticated")
        try:
            return Customer.objects.get(user=user)
        except Customer.DoesNotExist:
            raise BusinessLogicException("No customer account is linked to this login.", code="no_customer")

    @staticmethod
    def checkout(user, cart: Cart, form: dict) -> Order:
        """
        Cart -> Order + OrderItems in one transaction.
        Prices and titles come from the database, never from the client.
        The cart is cleared only after the commit.
        """
        customer = CheckoutService.get_customer(user)

        entries = {pid: qty for pid, qty in cart.items.items() if qty > 0}
        if not entries:
            raise BusinessLogicException("Cart is empty.", code="cart_empty")

        with transaction.atomic():
            lines = cart.lines(Product.objects.select_for_update())
            if len(lines) != len(entries):
                raise BusinessLogicException(
                    "Some products in your cart no longer exist.",
                    code="product_missing",
                )
            for line in lines:
                if not line.product.is_available:
                    raise BusinessLogicException(
                        f"{line.product.title} is currently unavailable.",
                        code="product_unavailable",
                    )

            subtotal = cart.subtotal(lines)
            order = Order.objects.create(
                number=Order.objects.next_number(),
                customer=customer,
                total=subtotal,
                status=Order.Status.NEW,
                payment_status=Order.PaymentStatus.UNPAID,
                shipping_cost=Decimal("0.00"),
                shipping_address=format_shipping_address(form),
                internal_notes=(form.get("notes") or "").strip(),
            )
            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product=line.product,
                    product_title=line.product.title,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in lines
            ])

        cart.clear()
        logger.info(
            "Order #%s placed by customer %s (%s lines, %s)",
            order.number, customer.id, len(lines), subtotal,
            extra={"order_number": order.number, "customer_id": customer.id},
        )
        return order


class AdminOrderService:
    """
    Staff-side order edits. Status and payment are independent and have
    no transition rules. Every item or shipping change refreshes the
    cached total.
    """

    @staticmethod
    def _lock(order_id) -> Order:
        try:
            return Order.objects.select_for_update().active().get(pk=order_id)
        except Order.DoesNotExist:
            raise BusinessLogicException("Order not found.", code="order_not_found")

    @staticmethod
    def _get_item(order: Order, item_id) -> OrderItem:
        try:
            return order.items.get(pk=item_id)
        except (OrderItem.DoesNotExist, ValueError, ValidationError):
            raise BusinessLogicException("Item not found on this order.", code="item_not_found")

    @staticmethod
    @transaction.atomic
    def set_status(order_id, status: str) -> Order:
        if status not in Order.Status.values:
            raise BusinessLogicException(f"Invalid status '{status}'.", code="invalid_status")
        order = AdminOrderService._lock(order_id)
        order.status = status
        order.save(update_fields=["status", "updated_at"])
        logger.info("Order #%s status -> %s", order.number, status, extra={"order_number": order.number})
        return order

    @staticmethod
    @transaction.atomic
    def set_payment_status(order_id, payment_status: str) -> Order:
        if payment_status not in Order.PaymentStatus.values:
            raise BusinessLogicException(f"Invalid payment status '{payment_status}'.", code="invalid_payment_status")
        order = AdminOrderService._lock(order_id)
        order.payment_status = payment_status
        order.save(update_fields=["payment_status", "updated_at"])
        logger.info("Order #%s payment -> %s", order.number, payment_status, extra={"order_number": order.number})
        return order

    @staticmethod
    @transaction.atomic
    def set_shipping_cost(order_id, shipping_cost) -> Order:
        shipping_cost = Decimal(str(shipping_cost))
        if shipping_cost < 0:
            raise BusinessLogicException("Shipping cost cannot be negative.", code="invalid_shipping_cost")
        order = AdminOrderService._lock(order_id)
        order.shipping_cost = shipping_cost
        order.save(update_fields=["shipping_cost", "updated_at"])
        order.refresh_total()
        return order

    @staticmethod
    @transaction.atomic
    def set_internal_notes(order_id, notes: str) -> Order:
        order = AdminOrderService._lock(order_id)
        order.internal_notes = notes or ""
        order.save(update_fields=["internal_notes", "updated_at"])
        return order

    @staticmethod
    @transaction.atomic
    def update_item(order_id, item_id, quantity=None, unit_price=None) -> Order:
        order = AdminOrderService._lock(order_id)
        item = AdminOrderService._get_item(order, item_id)

        fields = []
        if quantity is not None:
            if int(quantity) < 1:
                raise BusinessLogicException("Quantity must be at least 1.", code="invalid_quantity")
            item.quantity = int(quantity)
            fields.append("quantity")
        if unit_price is not None:
            unit_price = Decimal(str(unit_price))
            if unit_price < 0:
                raise BusinessLogicException("Unit price cannot be negative.", code="invalid_price")
            item.unit_price = unit_price
            fields.append("unit_price")

        if fields:
            item.save(update_fields=fields)
            order.refresh_total()
        return order

    @staticmethod
    @transaction.atomic
    def add_item(order_id, product_id) -> Order:
        order = AdminOrderService._lock(order_id)
        try:
            product = Product.objects.get(pk=product_id)
        except (Product.DoesNotExist, ValueError, ValidationError):
            raise BusinessLogicException("Product not found.", code="product_not_found")

        OrderItem.objects.create(
            order=order,
            product=product,
            product_title=product.title,
            unit_price=product.unit_price,
            quantity=1,
        )
        order.refresh_total()
        logger.info("Added %s to order #%s", product.sku, order.number, extra={"order_number": order.number})
        return order

    @staticmethod
    @transaction.atomic
    def remove_item(order_id, item_id) -> Order:
        order = AdminOrderService._lock(order_id)
        AdminOrderService._get_item(order, item_id).delete()
        order.refresh_total()
        return order

    @staticmethod
    def soft_delete(order_id) -> int:
        """
        One UPDATE; no hard delete exists for orders.
        """
        count = Order.objects.filter(pk=order_id).soft_delete()
        if not count:
            raise BusinessLogicException("Order not found.", code="order_not_found")
        logger.info("Order %s soft-deleted", order_id, extra={"order_id": order_id})
        return count


class ReorderService:

    @staticmethod
    def reorder(order: Order, cart: Cart) -> list:
        """
        Adds the order's still-available products to the cart, merging
        quantities. Returns the product ids that were added.
        """
        added = []
        for item in order.items.select_related("product"):
            product = item.product
            if product is None or not product.is_available:
                continue
            cart.add(product.pk, item.quantity)
            added.append(str(product.pk))
        return added
