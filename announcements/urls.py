from django.urls import path

from .views import (
    AnnouncementListCreateView,
    MyAnnouncementListView,
    AnnouncementSearchView,
    AppliedAnnouncementListView,
    AnnouncementDetailView,
    RecordAnnouncementViewView,
    PublishAnnouncementView,
    BlockAnnouncementView,
    CloseAnnouncementView,
    CancelAnnouncementView,
    ExpirySweepView,
    FavoriteListCreateView,
    FavoriteDeleteView,
)

app_name = 'announcements'

urlpatterns = [
    path('', AnnouncementListCreateView.as_view(), name='list-create'),
    path('me/', MyAnnouncementListView.as_view(), name='mine'),
    path('search/', AnnouncementSearchView.as_view(), name='search'),
    path('applied/', AppliedAnnouncementListView.as_view(), name='applied'),
    path('expiry-sweep/', ExpirySweepView.as_view(), name='expiry-sweep'),
    path('favorites/', FavoriteListCreateView.as_view(), name='favorites'),
    path('favorites/<uuid:announcement_id>/', FavoriteDeleteView.as_view(), name='favorite-delete'),

    path('<uuid:id>/', AnnouncementDetailView.as_view(), name='detail'),
    path('<uuid:id>/view/', RecordAnnouncementViewView.as_view(), name='record-view'),
    path('<uuid:id>/publish/', PublishAnnouncementView.as_view(), name='publish'),
    path('<uuid:id>/block/', BlockAnnouncementView.as_view(), name='block'),
    path('<uuid:id>/close/', CloseAnnouncementView.as_view(), name='close'),
    path('<uuid:id>/cancel/', CancelAnnouncementView.as_view(), name='cancel'),
]
