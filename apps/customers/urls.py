from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import CustomerViewSet

router = SimpleRouter()
# /api/v1/customers/, /api/v1/customers/profile/, /api/v1/customers/{id}/
router.register(r'', CustomerViewSet, basename='customer')

urlpatterns = [
    path('', include(router.urls)),
]
