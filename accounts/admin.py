from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth import get_user_model

User = get_user_model()


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for the custom User model."""

    list_display = (
        'username', 'full_name', 'phone', 'role', 'region',
        'is_verified', 'is_locked', 'account_status', 'date_joined'
    )
    list_filter = ('role', 'is_verified', 'is_locked', 'account_status', 'region')
    search_fields = ('username', 'full_name', 'phone')
    ordering = ('-date_joined',)

    fieldsets = (
        (None, {'fields': ('username', 'password')}),
        ('Personal Info', {'fields': ('full_name', 'phone', 'email')}),
        ('Role & Location', {'fields': ('role', 'region', 'village')}),
        ('Status', {'fields': ('is_verified', 'is_locked', 'account_status', 'is_active')}),
        ('Permissions', {'fields': ('is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Important Dates', {'fields': ('last_login', 'last_active_at', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('username', 'phone', 'role', 'password1', 'password2'),
        }),
    )
