from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, mixins, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsAdminStaff, IsCustomer
from apps.catalog.models import Product
from apps.utils.exceptions import BusinessLogicException
from .cart import Cart
from .models import Order
from .serializers import (
    CartLineSerializer,
    CartQuantitySerializer,
    CartAddSerializer,
    CartRemoveSerializer,
    CheckoutSerializer,
    OrderSerializer,
    AdminOrderSerializer,
    StatusSerializer,
    PaymentStatusSerializer,
    ShippingCostSerializer,
    InternalNotesSerializer,
    ItemUpdateSerializer,
    ItemAddSerializer,
)
from .services import CheckoutService, AdminOrderService, ReorderService, ORDERS_PAGE


def cart_payload(cart, request=None):
    lines = cart.lines()
    cart.prune(lines)
    return {
        "items": CartLineSerializer(lines, many=True, context={"request": request}).data,
        "count": len(lines),
        "subtotal": str(cart.subtotal(lines)),
    }


class CartViewSet(viewsets.ViewSet):
    """
    Session cart. Works before login; not tied to the user.
    """
    permission_classes = [AllowAny]

    def list(self, request):
        return Response(cart_payload(Cart.from_request(request), request))

    def _require_product(self, product_id):
        product = get_object_or_404(Product, pk=product_id)
        if not product.is_available:
            raise BusinessLogicException(f"{product.title} is currently unavailable.", code="product_unavailable")
        return product

    @action(detail=False, methods=["post"], url_path="set-quantity")
    def set_quantity(self, request):
        serializer = CartQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product_id = serializer.validated_data["product_id"]
        qty = serializer.validated_data["quantity"]

        if qty > 0:
            self._require_product(product_id)

        cart = Cart.from_request(request)
        cart.set_quantity(product_id, qty)
        return Response(cart_payload(cart, request))

    @action(detail=False, methods=["post"])
    def add(self, request):
        serializer = CartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = self._require_product(serializer.validated_data["product_id"])

        cart = Cart.from_request(request)
        cart.add(product.pk, serializer.validated_data["quantity"])
        return Response(cart_payload(cart, request))

    @action(detail=False, methods=["post"])
    def remove(self, request):
        serializer = CartRemoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = Cart.from_request(request)
        cart.remove(serializer.validated_data["product_id"])
        return Response(cart_payload(cart, request))

    @action(detail=False, methods=["post"])
    def clear(self, request):
        cart = Cart.from_request(request)
        cart.clear()
        return Response(cart_payload(cart, request))


class CheckoutView(APIView):
    """
    POST /api/v1/orders/checkout/
    Turns the session cart into an order for the caller's customer account.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = CheckoutService.checkout(
            user=request.user,
            cart=Cart.from_request(request),
            form=serializer.validated_data,
        )
        return Response(
            {"order": OrderSerializer(order).data, "redirect": ORDERS_PAGE},
            status=status.HTTP_201_CREATED,
        )


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    The caller's own orders, newest first. Soft-deleted orders are hidden.
    """
    serializer_class = OrderSerializer
    permission_classes = [IsCustomer]

    def get_queryset(self):
        return (
            Order.objects.for_customer(self.request.user.customer)
            .prefetch_related("items__product")
        )

    @action(detail=True, methods=["post"])
    def reorder(self, request, pk=None):
        cart = Cart.from_request(request)
        added = ReorderService.reorder(self.get_object(), cart)
        payload = cart_payload(cart, request)
        payload["added"] = added
        return Response(payload)


class AdminOrderViewSet(mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        mixins.DestroyModelMixin,
                        viewsets.GenericViewSet):
    """
    Staff order console. DELETE is a soft delete.
    """
    serializer_class = AdminOrderSerializer
    permission_classes = [IsAdminStaff]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["status", "payment_status"]
    search_fields = ["customer__business_name"]

    def get_queryset(self):
        return (
            Order.objects.active()
            .select_related("customer")
            .prefetch_related("items__product")
        )

    def _respond(self, order):
        fresh = self.get_queryset().get(pk=order.pk)
        return Response(self.get_serializer(fresh).data)

    def destroy(self, request, *args, **kwargs):
        order = self.get_object()
        AdminOrderService.soft_delete(order.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = StatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = AdminOrderService.set_status(self.get_object().pk, serializer.validated_data["status"])
        return self._respond(order)

    @action(detail=True, methods=["post"], url_path="payment-status")
    def set_payment_status(self, request, pk=None):
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = AdminOrderService.set_payment_status(
            self.get_object().pk, serializer.validated_data["payment_status"]
        )
        return self._respond(order)

    @action(detail=True, methods=["post"], url_path="shipping-cost")
    def set_shipping_cost(self, request, pk=None):
        serializer = ShippingCostSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = AdminOrderService.set_shipping_cost(
            self.get_object().pk, serializer.validated_data["shipping_cost"]
        )
        return self._respond(order)

    @action(detail=True, methods=["post"], url_path="internal-notes")
    def set_internal_notes(self, request, pk=None):
        serializer = InternalNotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = AdminOrderService.set_internal_notes(
            self.get_object().pk, serializer.validated_data["internal_notes"]
        )
        return self._respond(order)

    @action(detail=True, methods=["post"])
    def items(self, request, pk=None):
        serializer = ItemAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = AdminOrderService.add_item(self.get_object().pk, serializer.validated_data["product_id"])
        return self._respond(order)

    @action(detail=True, methods=["patch", "delete"], url_path=r"items/(?P<item_id>[^/.]+)")
    def item(self, request, pk=None, item_id=None):
        order = self.get_object()
        if request.method == "DELETE":
            order = AdminOrderService.remove_item(order.pk, item_id)
            return self._respond(order)

        serializer = ItemUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = AdminOrderService.update_item(
            order.pk,
            item_id,
            quantity=serializer.validated_data.get("quantity"),
            unit_price=serializer.validated_data.get("unit_price"),
        )
        return self._respond(order)
