from django.urls import path

from .views import (
    NotificationListView,
    UnreadCountView,
    MarkNotificationSeenView,
    MarkAllNotificationsSeenView,
)

app_name = 'notifications'

urlpatterns = [
    path('', NotificationListView.as_view(), name='list'),
    path('unread-count/', UnreadCountView.as_view(), name='unread-count'),
    path('seen-all/', MarkAllNotificationsSeenView.as_view(), name='seen-all'),
    path('<uuid:id>/seen/', MarkNotificationSeenView.as_view(), name='seen'),
]
