from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('title', 'user', 'type', 'is_seen', 'created_at')
    list_filter = ('type', 'is_seen')
    search_fields = ('title', 'body', 'user__phone', 'user__full_name')
    readonly_fields = ('created_at', 'seen_at')
