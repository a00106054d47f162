from rest_framework import generics
from rest_framework.permissions import AllowAny

from .models import GoodsCategory
from .serializers import GoodsCategorySerializer


class GoodsCategoryListView(generics.ListAPIView):
    """
    GET /api/catalog/

    Categories with their items nested.
    """
    permission_classes = [AllowAny]
    serializer_class = GoodsCategorySerializer
    queryset = GoodsCategory.objects.prefetch_related('items')
    pagination_class = None
