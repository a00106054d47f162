from rest_framework import generics, permissions
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import MarketplaceTokenObtainPairSerializer, UserSerializer


class MarketplaceTokenObtainPairView(TokenObtainPairView):
    """
    JWT login returning the user profile alongside the token pair.
    """
    serializer_class = MarketplaceTokenObtainPairSerializer


class UserProfileView(generics.RetrieveUpdateAPIView):
    """
    GET/PATCH /api/auth/me/
    """
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ['get', 'patch', 'head', 'options']

    def get_object(self):
        return self.request.user
