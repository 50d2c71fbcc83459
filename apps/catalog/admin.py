from django.contrib import admin

from .models import Product, ProductImage


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0
    fields = ('image', 'display_order', 'created_at')
    readonly_fields = ('created_at',)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('title', 'sku', 'unit_price', 'stock_status', 'stock_quantity', 'is_available')
    list_filter = ('is_available', 'stock_status')
    search_fields = ('title', 'sku')
    list_editable = ('is_available',)
    inlines = [ProductImageInline]
