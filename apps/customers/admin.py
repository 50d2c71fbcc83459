from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('business_name', 'contact_name', 'email', 'phone', 'state', 'created_at')
    list_filter = ('state', 'country')
    search_fields = ('business_name', 'contact_name', 'email')
    raw_id_fields = ('user',)
