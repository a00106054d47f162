"""
URL configuration for the marketplace lifecycle backend.
"""
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),  # JWT login + profile
    path('api/regions/', include('regions.urls')),  # Region / village reference data
    path('api/catalog/', include('catalog.urls')),  # Goods categories and items
    path('api/announcements/', include('announcements.urls')),
    path('api/applications/', include('applications.urls')),
    path('api/notifications/', include('notifications.urls')),  # In-app inbox
]
