from django.contrib import admin

from .models import Announcement, AnnouncementFavorite, AnnouncementView


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'type', 'category', 'item', 'owner', 'price',
        'count', 'available_quantity', 'status', 'expiry_date', 'created_at'
    )
    list_filter = ('status', 'category', 'type')
    search_fields = ('description', 'owner__full_name', 'owner__phone', 'item__name_en')
    raw_id_fields = ('owner', 'closed_by')
    filter_horizontal = ('regions', 'villages')
    # Lifecycle fields only move through the service layer
    readonly_fields = (
        'status', 'available_quantity', 'views_count', 'closed_by',
        'cancellation_kind', 'published_at', 'closed_at', 'created_at', 'updated_at'
    )


@admin.register(AnnouncementView)
class AnnouncementViewAdmin(admin.ModelAdmin):
    list_display = ('announcement', 'user', 'viewed_at')
    raw_id_fields = ('announcement', 'user')


@admin.register(AnnouncementFavorite)
class AnnouncementFavoriteAdmin(admin.ModelAdmin):
    list_display = ('announcement', 'user', 'created_at')
    raw_id_fields = ('announcement', 'user')
