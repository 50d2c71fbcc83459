from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.utils.throttle import BurstRateThrottle
from .services import AuthService
from .serializers import UserSerializer, PasswordChangeSerializer


class LoginView(TokenObtainPairView):
    """
    POST {email, password} -> {access, refresh}
    """
    throttle_classes = [BurstRateThrottle]


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class PasswordChangeView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [BurstRateThrottle]

    def post(self, request):
        serializer = PasswordChangeSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)

        AuthService.change_password(request.user, serializer.validated_data["new_password"])
        return Response({"message": "Password updated"}, status=status.HTTP_200_OK)
