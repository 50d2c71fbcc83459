from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsAdminStaff
from .models import Product
from .serializers import (
    ProductSerializer,
    AdminProductSerializer,
    ProductImageSerializer,
    StockStatusSerializer,
    ImageUploadSerializer,
    ImageMoveSerializer,
    ImageReorderSerializer,
)
from .services import ProductService, ProductImageService, fuzzy_search


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Storefront product list. Unavailable products are hidden.
    """
    queryset = Product.objects.filter(is_available=True).prefetch_related("images")
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [filters.SearchFilter]
    search_fields = ["title", "sku"]


class AdminProductViewSet(viewsets.ModelViewSet):
    queryset = Product.objects.all().prefetch_related("images")
    serializer_class = AdminProductSerializer
    permission_classes = [IsAdminStaff]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    filter_backends = [filters.SearchFilter]
    search_fields = ["title", "sku"]

    def perform_destroy(self, instance):
        ProductService.delete_product(instance)

    def _images_response(self, product):
        images = product.images.order_by("display_order")
        return Response(ProductImageSerializer(images, many=True, context={"request": self.request}).data)

    @action(detail=True, methods=["post"], url_path="toggle-availability")
    def toggle_availability(self, request, pk=None):
        product = ProductService.toggle_availability(self.get_object())
        return Response(self.get_serializer(product).data)

    @action(detail=True, methods=["post"], url_path="stock-status")
    def stock_status(self, request, pk=None):
        serializer = StockStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = ProductService.set_stock_status(self.get_object(), serializer.validated_data["stock_status"])
        return Response(self.get_serializer(product).data)

    @action(detail=False, methods=["get"])
    def search(self, request):
        results = fuzzy_search(request.query_params.get("q", ""), self.get_queryset())
        return Response(self.get_serializer(results, many=True).data)

    @action(detail=True, methods=["post"])
    def images(self, request, pk=None):
        serializer = ImageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        image = ProductImageService.add_image(self.get_object(), serializer.validated_data["image"])
        return Response(
            ProductImageSerializer(image, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["delete"], url_path=r"images/(?P<image_id>[^/.]+)")
    def delete_image(self, request, pk=None, image_id=None):
        product = self.get_object()
        ProductImageService.delete_image(product, image_id)
        return self._images_response(product)

    @action(detail=True, methods=["post"], url_path=r"images/(?P<image_id>[^/.]+)/move")
    def move_image(self, request, pk=None, image_id=None):
        serializer = ImageMoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = self.get_object()
        ProductImageService.move_image(product, image_id, serializer.validated_data["position"])
        return self._images_response(product)

    @action(detail=True, methods=["post"], url_path="reorder-images")
    def reorder_images(self, request, pk=None):
        serializer = ImageReorderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = self.get_object()
        ProductImageService.reorder_images(product, serializer.validated_data["image_ids"])
        return self._images_response(product)
