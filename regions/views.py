"""
Read-only region/village lookups for clients building announcement forms.
"""
from rest_framework import generics
from rest_framework.permissions import AllowAny

from .models import Region, Village
from .serializers import RegionSerializer, VillageSerializer


class RegionListView(generics.ListAPIView):
    """
    GET /api/regions/
    """
    permission_classes = [AllowAny]
    serializer_class = RegionSerializer
    queryset = Region.objects.all()
    pagination_class = None


class VillageListView(generics.ListAPIView):
    """
    GET /api/regions/<region_id>/villages/
    """
    permission_classes = [AllowAny]
    serializer_class = VillageSerializer
    pagination_class = None

    def get_queryset(self):
        return Village.objects.filter(region_id=self.kwargs['region_id'])
