from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'product_title', 'unit_price', 'quantity', 'created_at')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        'number',
        'customer',
        'status',
        'payment_status',
        'total',
        'is_deleted',
        'created_at',
    )
    list_filter = ('status', 'payment_status', 'is_deleted', 'created_at')
    search_fields = ('number', 'customer__business_name', 'customer__email')
    inlines = [OrderItemInline]

    readonly_fields = (
        'id',
        'number',
        'customer',
        'total',
        'shipping_address',
        'created_at',
        'updated_at',
        'deleted_at',
    )

    fieldsets = (
        ('Order Details', {
            'fields': ('number', 'id', 'customer', 'status', 'payment_status')
        }),
        ('Financials', {
            'fields': ('shipping_cost', 'total')
        }),
        ('Shipping', {
            'fields': ('shipping_address', 'internal_notes')
        }),
        ('System Data', {
            'fields': ('is_deleted', 'deleted_at', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        # Orders are only ever soft-deleted
        return False
