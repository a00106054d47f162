from django.contrib import admin

from .models import Application


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ('id', 'announcement', 'applicant', 'count', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('applicant__full_name', 'applicant__phone', 'notes')
    raw_id_fields = ('announcement', 'applicant')
    readonly_fields = ('status', 'decided_at', 'closed_at', 'created_at', 'updated_at')
