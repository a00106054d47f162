from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import MarketplaceTokenObtainPairView, UserProfileView

app_name = 'accounts'

urlpatterns = [
    path('login/', MarketplaceTokenObtainPairView.as_view(), name='login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('me/', UserProfileView.as_view(), name='profile'),
]
