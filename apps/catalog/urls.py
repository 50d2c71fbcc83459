from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ProductViewSet, AdminProductViewSet

router = DefaultRouter()
router.register(r'products', ProductViewSet, basename='product')
router.register(r'admin/products', AdminProductViewSet, basename='admin-product')

urlpatterns = [
    path('', include(router.urls)),
]
