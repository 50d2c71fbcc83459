from rest_framework import serializers

from .models import Product, ProductImage


class ProductImageSerializer(serializers.ModelSerializer):
    url = serializers.SerializerMethodField()

    class Meta:
        model = ProductImage
        fields = ["id", "url", "display_order", "created_at"]
        read_only_fields = fields

    def get_url(self, obj):
        if not obj.image:
            return None
        request = self.context.get("request")
        url = obj.image.url
        return request.build_absolute_uri(url) if request else url


class ProductSerializer(serializers.ModelSerializer):
    """
    Storefront view of a product.
    """
    images = ProductImageSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id", "title", "sku", "unit_price", "description",
            "stock_status", "images",
        ]
        read_only_fields = fields


class AdminProductSerializer(serializers.ModelSerializer):
    images = ProductImageSerializer(many=True, read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    class Meta:
        model = Product
        fields = [
            "id", "title", "sku", "unit_price", "description",
            "stock_quantity", "stock_status", "is_available",
            "images", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "images", "created_at", "updated_at"]


class StockStatusSerializer(serializers.Serializer):
    stock_status = serializers.ChoiceField(choices=Product.StockStatus.choices)


class ImageUploadSerializer(serializers.Serializer):
    image = serializers.FileField()


class ImageMoveSerializer(serializers.Serializer):
    position = serializers.IntegerField(min_value=0)


class ImageReorderSerializer(serializers.Serializer):
    image_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=True)
