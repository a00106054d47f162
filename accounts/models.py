from django.contrib.auth.models import AbstractUser
from django.db import models
from phonenumber_field.modelfields import PhoneNumberField
import uuid


class User(AbstractUser):
    """
    Marketplace user.

    Farmers and companies post announcements and apply to each other's
    announcements; admins moderate (publish/block) and may edit anything.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class UserRole(models.TextChoices):
        FARMER = 'FARMER', 'Farmer'
        COMPANY = 'COMPANY', 'Company'
        ADMIN = 'ADMIN', 'Administrator'

    class AccountStatus(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        ACTIVE = 'ACTIVE', 'Active'
        BLOCKED = 'BLOCKED', 'Blocked'

    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.FARMER,
        db_index=True,
        help_text="User's role in the marketplace"
    )

    full_name = models.CharField(max_length=255, blank=True, default='')

    phone = PhoneNumberField(
        unique=True,
        db_index=True,
        help_text="Phone number in international format"
    )

    # Account status
    is_verified = models.BooleanField(
        default=False,
        help_text="Phone number confirmed; required to post or apply"
    )

    is_locked = models.BooleanField(
        default=False,
        help_text="Temporarily locked (e.g. failed OTP attempts)"
    )

    account_status = models.CharField(
        max_length=20,
        choices=AccountStatus.choices,
        default=AccountStatus.PENDING,
        db_index=True
    )

    # Home location, used for publish fan-out
    region = models.ForeignKey(
        'regions.Region',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users'
    )

    village = models.ForeignKey(
        'regions.Village',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users'
    )

    last_active_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        ordering = ['-date_joined']
        indexes = [
            models.Index(fields=['region', 'is_verified'], name='users_region_verified_idx'),
        ]

    def __str__(self):
        return f"{self.get_display_name()} ({self.role})"

    def get_display_name(self):
        return self.full_name or self.get_full_name() or self.username

    @property
    def is_admin(self):
        return self.role == self.UserRole.ADMIN or self.is_superuser

    @property
    def is_blocked(self):
        return self.account_status == self.AccountStatus.BLOCKED

