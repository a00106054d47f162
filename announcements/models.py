"""
Announcement Models

Sell/buy listings for goods, rent and services, plus the per-user view log.
"""
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q, F

from .state_machine import TERMINAL_STATUSES


class Announcement(models.Model):
    """
    A marketplace listing.

    Goods listings carry a finite quantity (count) from which approved
    applications are allocated; available_quantity is maintained by the
    quantity ledger and is never client-supplied. Rows are never deleted:
    terminal statuses are the soft end of the lifecycle.
    """

    class Type(models.TextChoices):
        SELL = 'sell', 'Sell'
        BUY = 'buy', 'Buy'

    class Category(models.TextChoices):
        GOODS = 'goods', 'Goods'
        RENT = 'rent', 'Rent'
        SERVICE = 'service', 'Service'

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending Review'
        PUBLISHED = 'published', 'Published'
        CLOSED = 'closed', 'Closed'
        CANCELED = 'canceled', 'Canceled'
        BLOCKED = 'blocked', 'Blocked'

    class Unit(models.TextChoices):
        KG = 'kg', 'Kilogram'
        TON = 'ton', 'Ton'
        PCS = 'pcs', 'Pieces'
        LITER = 'liter', 'Liter'
        BAG = 'bag', 'Bag'
        M2 = 'm2', 'Square meter'
        HA = 'ha', 'Hectare'

    class CancellationKind(models.TextChoices):
        CANCELED = 'canceled', 'Canceled by owner'
        DELETED = 'deleted', 'Deleted by owner'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    type = models.CharField(max_length=10, choices=Type.choices)
    category = models.CharField(max_length=10, choices=Category.choices, db_index=True)

    group = models.ForeignKey(
        'catalog.GoodsCategory',
        on_delete=models.PROTECT,
        related_name='announcements',
        help_text="Catalog category"
    )
    item = models.ForeignKey(
        'catalog.GoodsItem',
        on_delete=models.PROTECT,
        related_name='announcements'
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='announcements'
    )

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    description = models.TextField(blank=True, default='', max_length=2000)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    # Goods
    count = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    daily_limit = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    available_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="count minus approved applications (goods only)"
    )
    unit = models.CharField(max_length=10, choices=Unit.choices, null=True, blank=True)

    # Rent
    date_from = models.DateField(null=True, blank=True)
    date_to = models.DateField(null=True, blank=True)
    min_area = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    expiry_date = models.DateField(null=True, blank=True, db_index=True)

    images = models.JSONField(default=list, blank=True, help_text="Storage keys, at most 3")

    regions = models.ManyToManyField('regions.Region', related_name='announcements', blank=True)
    villages = models.ManyToManyField('regions.Village', related_name='announcements', blank=True)

    views_count = models.PositiveIntegerField(default=0)

    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='closed_announcements',
        help_text="Admin/owner who closed or blocked; empty for system closes"
    )
    cancellation_kind = models.CharField(
        max_length=10,
        choices=CancellationKind.choices,
        null=True,
        blank=True
    )

    published_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'announcements'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'expiry_date'], name='ann_status_expiry_idx'),
            models.Index(fields=['owner', 'status'], name='ann_owner_status_idx'),
            models.Index(fields=['category', 'status'], name='ann_category_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name='ann_price_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(available_quantity__isnull=True) | (
                    Q(available_quantity__gte=0) & Q(available_quantity__lte=F('count'))
                ),
                name='ann_available_within_count',
            ),
        ]

    def __str__(self):
        return f"{self.get_type_display()} {self.get_category_display()} {self.item_id} ({self.status})"

    @property
    def is_goods(self):
        return self.category == self.Category.GOODS

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    @property
    def is_deleted(self):
        return self.cancellation_kind == self.CancellationKind.DELETED

    def is_owned_by(self, user):
        return user is not None and self.owner_id == user.id

    def summary_text(self):
        """One-line summary used in notification bodies."""
        parts = [f"{self.get_type_display()} {self.get_category_display()}", self.item.name_en]
        if self.is_goods and self.count is not None:
            unit = f" {self.unit}" if self.unit else ''
            parts.append(f"{self.count.normalize():f}{unit}")
        parts.append(f"{self.price} AMD")
        if self.description:
            snippet = self.description[:50]
            if len(self.description) > 50:
                snippet += '...'
            parts.append(snippet)
        return ' - '.join(parts)


class AnnouncementView(models.Model):
    """One row per (announcement, viewer); backs the views_count counter."""

    announcement = models.ForeignKey(
        Announcement,
        on_delete=models.CASCADE,
        related_name='view_records'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='announcement_views'
    )
    viewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'announcement_views'
        constraints = [
            models.UniqueConstraint(
                fields=['announcement', 'user'],
                name='unique_announcement_view_per_user',
            ),
        ]

    def __str__(self):
        return f"{self.user_id} viewed {self.announcement_id}"


class AnnouncementFavorite(models.Model):
    """A user's saved announcement. Only published listings can be saved."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    announcement = models.ForeignKey(
        Announcement,
        on_delete=models.CASCADE,
        related_name='favorites'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='favorite_announcements'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'announcement_favorites'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['announcement', 'user'],
                name='unique_announcement_favorite_per_user',
            ),
        ]

    def __str__(self):
        return f"{self.user_id} saved {self.announcement_id}"
