from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from drf_spectacular.views import SpectacularAPIView

from apps.utils.health import health_check
from apps.customers.views import CustomerProvisionView

urlpatterns = [
    path("admin/", admin.site.urls),

    # Service endpoints
    path("api/health", health_check, name="health-check"),
    path("api/customers", CustomerProvisionView.as_view(), name="customer-provision"),

    # Core Apps
    path("api/v1/auth/", include("apps.accounts.urls")),
    path("api/v1/catalog/", include("apps.catalog.urls")),
    path("api/v1/customers/", include("apps.customers.urls")),
    path("api/v1/orders/", include("apps.orders.urls")),

    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
