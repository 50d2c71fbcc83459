import logging

from django.db import transaction

from apps.utils.exceptions import BusinessLogicException
from .models import Product, ProductImage

logger = logging.getLogger(__name__)


def fuzzy_match(query: str, text: str) -> bool:
    """
    True when every character of `query` appears in `text` in the same
    order (case-insensitive). "nvf" matches "NATIVE VERSA FORK".
    """
    text = (text or "").lower()
    pos = 0
    for ch in (query or "").lower():
        pos = text.find(ch, pos)
        if pos == -1:
            return False
        pos += 1
    return True


def fuzzy_search(query: str, queryset=None):
    queryset = Product.objects.all() if queryset is None else queryset
    query = (query or "").strip()
    if not query:
        return list(queryset)
    return [p for p in queryset if fuzzy_match(query, p.title)]


class ProductService:

    @staticmethod
    def toggle_availability(product: Product) -> Product:
        product.is_available = not product.is_available
        product.save(update_fields=["is_available", "updated_at"])
        logger.info("Product %s availability -> %s", product.sku, product.is_available)
        return product

    @staticmethod
    def set_stock_status(product: Product, stock_status: str) -> Product:
        if stock_status not in Product.StockStatus.values:
            raise BusinessLogicException(f"Invalid stock status '{stock_status}'.", code="invalid_stock_status")
        product.stock_status = stock_status
        product.save(update_fields=["stock_status", "updated_at"])
        return product

    @staticmethod
    def delete_product(product: Product):
        # Order items keep their title snapshot; the product link is nulled.
        files = [img.image for img in product.images.all()]
        product.delete()
        for f in files:
            ProductImageService.delete_file(f)
        logger.info("Product %s deleted", product.sku)


class ProductImageService:
    """
    Keeps each product's display_order contiguous (0..n-1).
    """

    @staticmethod
    def delete_file(field_file):
        try:
            field_file.delete(save=False)
        except OSError:
            logger.warning("Could not remove image file %s", field_file.name, exc_info=True)

    @staticmethod
    def _lock(product: Product):
        Product.objects.select_for_update().get(pk=product.pk)
        return list(product.images.order_by("display_order", "created_at"))

    @staticmethod
    def _resequence(images):
        changed = []
        for index, img in enumerate(images):
            if img.display_order != index:
                img.display_order = index
                changed.append(img)
        if changed:
            ProductImage.objects.bulk_update(changed, ["display_order"])
        return images

    @staticmethod
    @transaction.atomic
    def add_image(product: Product, upload) -> ProductImage:
        images = ProductImageService._lock(product)
        image = ProductImage(product=product, display_order=len(images))
        image.image.save(upload.name, upload, save=False)
        image.save()
        logger.info("Image %s added to product %s", image.id, product.sku, extra={"product_id": product.id})
        return image

    @staticmethod
    def _get(images, image_id):
        for img in images:
            if str(img.id) == str(image_id):
                return img
        raise BusinessLogicException("Image not found for this product.", code="image_not_found")

    @staticmethod
    @transaction.atomic
    def delete_image(product: Product, image_id):
        images = ProductImageService._lock(product)
        image = ProductImageService._get(images, image_id)
        images.remove(image)
        file = image.image
        image.delete()
        ProductImageService._resequence(images)
        transaction.on_commit(lambda: ProductImageService.delete_file(file))
        return images

    @staticmethod
    @transaction.atomic
    def move_image(product: Product, image_id, position: int):
        images = ProductImageService._lock(product)
        image = ProductImageService._get(images, image_id)
        position = max(0, min(int(position), len(images) - 1))
        images.remove(image)
        images.insert(position, image)
        return ProductImageService._resequence(images)

    @staticmethod
    @transaction.atomic
    def reorder_images(product: Product, image_ids):
        images = ProductImageService._lock(product)
        by_id = {str(img.id): img for img in images}
        wanted = [str(i) for i in image_ids]
        if len(wanted) != len(by_id) or set(wanted) != set(by_id):
            raise BusinessLogicException(
                "Image list must contain every image of the product exactly once.",
                code="invalid_image_order",
            )
        return ProductImageService._resequence([by_id[i] for i in wanted])
