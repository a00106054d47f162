from django.urls import path

from .views import RegionListView, VillageListView

app_name = 'regions'

urlpatterns = [
    path('', RegionListView.as_view(), name='list'),
    path('<int:region_id>/villages/', VillageListView.as_view(), name='villages'),
]
