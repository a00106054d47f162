from django.urls import path

from .views import GoodsCategoryListView

app_name = 'catalog'

urlpatterns = [
    path('', GoodsCategoryListView.as_view(), name='list'),
]
