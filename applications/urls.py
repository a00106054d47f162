from django.urls import path

from .views import (
    ApplicationCreateView,
    MyApplicationListView,
    AnnouncementApplicationListView,
    ApplicationDetailView,
    ApproveApplicationView,
    RejectApplicationView,
    CloseApplicationView,
    ReopenApplicationView,
)

app_name = 'applications'

urlpatterns = [
    path('', ApplicationCreateView.as_view(), name='create'),
    path('me/', MyApplicationListView.as_view(), name='mine'),
    path(
        'announcement/<uuid:announcement_id>/',
        AnnouncementApplicationListView.as_view(),
        name='for-announcement'
    ),
    path('<uuid:id>/', ApplicationDetailView.as_view(), name='detail'),
    path('<uuid:id>/approve/', ApproveApplicationView.as_view(), name='approve'),
    path('<uuid:id>/reject/', RejectApplicationView.as_view(), name='reject'),
    path('<uuid:id>/close/', CloseApplicationView.as_view(), name='close'),
    path('<uuid:id>/reopen/', ReopenApplicationView.as_view(), name='reopen'),
]
