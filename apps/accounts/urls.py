from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, MeView, PasswordChangeView

urlpatterns = [
    path('token/', LoginView.as_view(), name='token-obtain'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('me/', MeView.as_view(), name='user-me'),
    path('password/', PasswordChangeView.as_view(), name='password-change'),
]
