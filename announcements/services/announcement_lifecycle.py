"""
Announcement Lifecycle Service

Owns the announcement state machine:
- Creation with category-conditional validation and auto-publish
- Moderation (publish, block)
- Owner/admin/system close, owner cancel and soft delete
- Field updates with per-status edit rules and image replacement
- Per-user view counting

Every transition locks the announcement row, validates against the
transition table, writes, and emits its notification event through the
dispatcher, all inside one transaction.
"""
from datetime import timedelta
import logging

from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from accounts.services import get_user_directory
from announcements.models import Announcement, AnnouncementView
from announcements.services.quantity_ledger import get_quantity_ledger
from announcements.state_machine import validate_announcement_transition
from catalog.services import get_catalog_gate
from core.exceptions import Forbidden, NotFound, ValidationError
from core.lifecycle_config import get_lifecycle_config
from core.storage_service import get_image_store
from notifications.dispatcher import get_notification_dispatcher
from notifications.events import (
    AnnouncementBlocked,
    AnnouncementClosed,
    AnnouncementPublished,
)
from regions.services import get_region_directory

logger = logging.getLogger(__name__)

Status = Announcement.Status
Category = Announcement.Category

# Fields whose applicability depends on the category
GOODS_FIELDS = ('count', 'daily_limit')
RENT_FIELDS = ('date_from', 'date_to', 'min_area')

# Plain columns an update may touch (relations are handled separately)
UPDATABLE_FIELDS = (
    'type', 'category', 'price', 'description', 'unit',
    'count', 'daily_limit', 'date_from', 'date_to', 'min_area', 'expiry_date',
)

# What an owner may still change once the announcement is published
OWNER_EDITABLE_WHEN_PUBLISHED = frozenset(['expiry_date'])

STATUS_ENDPOINTS_HINT = (
    'Status cannot be updated via this endpoint. '
    'Use dedicated endpoints: /publish, /block, /close, /cancel'
)


class AnnouncementLifecycleService:
    """Service for the announcement lifecycle"""

    def __init__(self, config=None, ledger=None, catalog_gate=None, region_directory=None,
                 user_directory=None, image_store=None, dispatcher=None):
        self.config = config or get_lifecycle_config()
        self.ledger = ledger or get_quantity_ledger()
        self.catalog_gate = catalog_gate or get_catalog_gate()
        self.region_directory = region_directory or get_region_directory()
        self.user_directory = user_directory or get_user_directory()
        self.image_store = image_store or get_image_store()
        self.dispatcher = dispatcher or get_notification_dispatcher()

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def validate_category_fields(self, category, fields):
        """
        Check the category-conditional fields and return them with every
        field that does not apply to the category nulled out.

        Args:
            category: goods, rent or service
            fields: dict holding any of count/daily_limit/date_from/date_to/min_area

        Returns:
            dict with all five keys
        """
        cleaned = {name: fields.get(name) for name in GOODS_FIELDS + RENT_FIELDS}

        if category == Category.GOODS:
            count = cleaned['count']
            if count is None:
                raise ValidationError('count is required for goods announcements', field='count')
            if count <= 0:
                raise ValidationError('count must be greater than 0', field='count')
            daily_limit = cleaned['daily_limit']
            if daily_limit is not None:
                if daily_limit <= 0:
                    raise ValidationError('daily_limit must be greater than 0', field='daily_limit')
                if daily_limit > count:
                    raise ValidationError('daily_limit cannot exceed count', field='daily_limit')
            for name in RENT_FIELDS:
                cleaned[name] = None

        elif category == Category.RENT:
            date_from, date_to = cleaned['date_from'], cleaned['date_to']
            if date_from is None or date_to is None:
                raise ValidationError(
                    'date_from and date_to are required for rent announcements',
                    field='date_from' if date_from is None else 'date_to',
                )
            if date_from >= date_to:
                raise ValidationError('date_from must be before date_to', field='date_from')
            if cleaned['min_area'] is not None and cleaned['min_area'] <= 0:
                raise ValidationError('min_area must be greater than 0', field='min_area')
            for name in GOODS_FIELDS:
                cleaned[name] = None

        elif category == Category.SERVICE:
            for name in GOODS_FIELDS + RENT_FIELDS:
                cleaned[name] = None

        else:
            raise ValidationError(f'Unknown category: {category}', field='category')

        return cleaned

    def _validate_catalog(self, group_id, item_id):
        group = self.catalog_gate.get_category(group_id)
        item = self.catalog_gate.get_item(item_id)
        if item.category_id != group.id:
            raise ValidationError(
                f'Item {item_id} does not belong to catalog category {group_id}',
                field='item_id',
            )
        return group, item

    def _validate_locations(self, region_ids, village_ids):
        region_ids = sorted(set(region_ids or []))
        village_ids = sorted(set(village_ids or []))

        if region_ids and not self.region_directory.regions_exist(region_ids):
            raise ValidationError('One or more regions do not exist', field='regions')
        if village_ids:
            if not region_ids:
                raise ValidationError('Villages require at least one region', field='villages')
            outside = self.region_directory.villages_outside_regions(village_ids, region_ids)
            if outside:
                raise ValidationError(
                    f'Villages {outside} do not belong to the selected regions',
                    field='villages',
                )
        return region_ids, village_ids

    def _ensure_image_limit(self, total):
        if total > self.config.max_images:
            raise ValidationError(
                f'An announcement can have at most {self.config.max_images} images',
                field='images',
            )

    def _validate_expiry(self, expiry_date):
        if expiry_date is not None and expiry_date < timezone.localdate():
            raise ValidationError('expiry_date cannot be in the past', field='expiry_date')

    def default_expiry(self, date_to=None):
        if date_to:
            return date_to
        return timezone.localdate() + timedelta(days=self.config.default_expiry_days)

    def _ensure_admin(self, actor, action):
        if actor is None or not actor.is_admin:
            raise Forbidden(f'Only administrators can {action} announcements')

    def _keys_held_elsewhere(self, keys, exclude_pk=None):
        """Storage keys from keys that another announcement still references."""
        keys = set(keys)
        if not keys:
            return set()

        query = Q()
        for key in keys:
            query |= Q(images__icontains=key)
        candidates = Announcement.objects.filter(query)
        if exclude_pk is not None:
            candidates = candidates.exclude(pk=exclude_pk)

        held = set()
        for images in candidates.values_list('images', flat=True):
            held.update(key for key in images or [] if key in keys)
        return held

    def _schedule_image_cleanup(self, keys, announcement):
        # Shared keys stay on disk
        shared = self._keys_held_elsewhere(keys, exclude_pk=announcement.pk)
        if shared:
            logger.warning(
                f"Announcement {announcement.pk} dropped image(s) still referenced elsewhere: "
                f"{', '.join(sorted(shared))}"
            )
        keys = [key for key in keys if key not in shared]
        if not keys:
            return

        def _enqueue():
            from core.tasks import delete_images_async
            try:
                delete_images_async.delay(list(keys))
            except Exception as e:
                logger.warning(f"Failed to schedule removal of {len(keys)} image(s): {e}")

        transaction.on_commit(_enqueue)

    def _announce_to_regions(self, announcement):
        region_ids = list(announcement.regions.values_list('id', flat=True))
        if region_ids:
            self.dispatcher.emit(AnnouncementPublished.for_regions(announcement, region_ids))

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, owner, data, uploaded_files=None):
        """
        Create an announcement.

        Goods announcements without description and images are published
        immediately; everything else waits for admin review.

        Args:
            owner: User posting the announcement
            data: validated fields (type, category, group_id, item_id, price, ...)
            uploaded_files: image files to store and append to data['images']

        Returns:
            Announcement instance
        """
        self.user_directory.ensure_can_create(owner)

        category = data['category']
        category_fields = self.validate_category_fields(category, data)
        group, item = self._validate_catalog(data['group_id'], data['item_id'])
        region_ids, village_ids = self._validate_locations(data.get('regions'), data.get('villages'))

        image_keys = list(dict.fromkeys(data.get('images') or []))
        uploaded_files = list(uploaded_files or [])
        self._ensure_image_limit(len(image_keys) + len(uploaded_files))
        claimed = self._keys_held_elsewhere(image_keys)
        if claimed:
            raise ValidationError(
                f'Image keys belong to another announcement: {", ".join(sorted(claimed))}',
                field='images',
            )

        expiry_date = data.get('expiry_date')
        self._validate_expiry(expiry_date)
        if expiry_date is None:
            expiry_date = self.default_expiry(category_fields['date_to'])

        description = (data.get('description') or '').strip()

        new_keys = []
        try:
            with transaction.atomic():
                if uploaded_files:
                    new_keys = self.image_store.upload(uploaded_files, prefix=self.config.image_prefix)
                    image_keys.extend(new_keys)

                auto_publish = category == Category.GOODS and not description and not image_keys
                status = Status.PUBLISHED if auto_publish else Status.PENDING

                announcement = Announcement.objects.create(
                    type=data['type'],
                    category=category,
                    group=group,
                    item=item,
                    owner=owner,
                    price=data['price'],
                    description=description,
                    status=status,
                    unit=data.get('unit'),
                    expiry_date=expiry_date,
                    images=image_keys,
                    available_quantity=category_fields['count'] if category == Category.GOODS else None,
                    published_at=timezone.now() if auto_publish else None,
                    **category_fields
                )
                announcement.regions.set(region_ids)
                announcement.villages.set(village_ids)

                if auto_publish:
                    self._announce_to_regions(announcement)
        except Exception:
            if new_keys:
                self.image_store.delete(new_keys)
            raise

        logger.info(
            f"Announcement {announcement.id} created by {owner.id} "
            f"({category}, status={announcement.status})"
        )
        return announcement

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @transaction.atomic
    def publish(self, announcement_id, actor):
        """
        Publish a pending announcement (admin only).

        Notifies the owner and broadcasts to verified users in the
        announcement's regions.
        """
        self._ensure_admin(actor, 'publish')
        announcement = self.ledger.lock(announcement_id)
        validate_announcement_transition(announcement.status, Status.PUBLISHED)

        announcement.status = Status.PUBLISHED
        announcement.published_at = timezone.now()
        announcement.save(update_fields=['status', 'published_at', 'updated_at'])

        self.dispatcher.emit(AnnouncementPublished.for_owner(announcement))
        self._announce_to_regions(announcement)

        logger.info(f"Announcement {announcement.id} published by {actor.id}")
        return announcement

    @transaction.atomic
    def block(self, announcement_id, actor):
        """Block a pending or published announcement (admin only)."""
        self._ensure_admin(actor, 'block')
        announcement = self.ledger.lock(announcement_id)
        validate_announcement_transition(announcement.status, Status.BLOCKED)

        announcement.status = Status.BLOCKED
        announcement.closed_by = actor
        announcement.closed_at = timezone.now()
        announcement.save(update_fields=['status', 'closed_by', 'closed_at', 'updated_at'])

        self.dispatcher.emit(AnnouncementBlocked.for_owner(announcement))

        logger.info(f"Announcement {announcement.id} blocked by {actor.id}")
        return announcement

    @transaction.atomic
    def close(self, announcement_id, actor=None):
        """
        Close a published announcement.

        Args:
            actor: owner or admin; None for system closes (expiry sweep),
                which leave closed_by empty
        """
        announcement = self.ledger.lock(announcement_id)
        if actor is not None and not actor.is_admin and not announcement.is_owned_by(actor):
            raise Forbidden('You can only close your own announcements')

        validate_announcement_transition(announcement.status, Status.CLOSED)

        announcement.status = Status.CLOSED
        announcement.closed_by = actor
        announcement.closed_at = timezone.now()
        announcement.save(update_fields=['status', 'closed_by', 'closed_at', 'updated_at'])

        # Owners closing their own listing already know about it
        if actor is None or not announcement.is_owned_by(actor):
            self.dispatcher.emit(AnnouncementClosed.for_owner(announcement, system=actor is None))

        closed_by = actor.id if actor is not None else 'system'
        logger.info(f"Announcement {announcement.id} closed by {closed_by}")
        return announcement

    @transaction.atomic
    def cancel(self, announcement_id, actor):
        """Cancel a pending or published announcement (owner only)."""
        announcement = self.ledger.lock(announcement_id)
        if not announcement.is_owned_by(actor):
            raise Forbidden('You can only cancel your own announcements')

        was_published = announcement.status == Status.PUBLISHED
        validate_announcement_transition(announcement.status, Status.CANCELED)

        announcement.status = Status.CANCELED
        announcement.cancellation_kind = Announcement.CancellationKind.CANCELED
        announcement.closed_at = timezone.now()
        announcement.save(update_fields=['status', 'cancellation_kind', 'closed_at', 'updated_at'])

        if was_published:
            logger.info(f"Published announcement {announcement.id} was canceled by owner")
        else:
            logger.info(f"Announcement {announcement.id} canceled by owner")
        return announcement

    @transaction.atomic
    def delete(self, announcement_id, actor):
        """
        Soft delete (owner only): the announcement becomes CANCELED with the
        'deleted' tag. Published announcements must be canceled first.
        """
        announcement = self.ledger.lock(announcement_id)
        if not announcement.is_owned_by(actor):
            raise Forbidden('You can only delete your own announcements')

        if announcement.status == Status.PUBLISHED:
            raise Forbidden('Cannot delete published announcements. Please cancel it first.')

        if announcement.status != Status.CANCELED:
            validate_announcement_transition(announcement.status, Status.CANCELED)
            announcement.status = Status.CANCELED
            announcement.closed_at = timezone.now()

        announcement.cancellation_kind = Announcement.CancellationKind.DELETED
        announcement.save(update_fields=['status', 'cancellation_kind', 'closed_at', 'updated_at'])

        logger.info(f"Announcement {announcement.id} deleted by owner")
        return announcement

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def _changed_fields(self, announcement, data, uploaded_files):
        changed = set()
        for name in UPDATABLE_FIELDS:
            if name in data and data[name] != getattr(announcement, name):
                changed.add(name)
        if 'group_id' in data and data['group_id'] != announcement.group_id:
            changed.add('group_id')
        if 'item_id' in data and data['item_id'] != announcement.item_id:
            changed.add('item_id')
        if 'regions' in data:
            current = set(announcement.regions.values_list('id', flat=True))
            if set(data['regions'] or []) != current:
                changed.add('regions')
        if 'villages' in data:
            current = set(announcement.villages.values_list('id', flat=True))
            if set(data['villages'] or []) != current:
                changed.add('villages')
        if uploaded_files or ('images' in data and list(data['images'] or []) != list(announcement.images)):
            changed.add('images')
        return changed

    def _check_edit_rights(self, announcement, actor, data, uploaded_files):
        if actor.is_admin:
            return
        if not announcement.is_owned_by(actor):
            raise Forbidden('You can only update your own announcements')
        if announcement.is_terminal:
            raise Forbidden(f'Cannot update {announcement.status} announcements')
        if announcement.status == Status.PUBLISHED:
            blocked = sorted(self._changed_fields(announcement, data, uploaded_files) - OWNER_EDITABLE_WHEN_PUBLISHED)
            if blocked:
                raise Forbidden(
                    f'Published announcements can only have their expiry date changed. '
                    f'Attempted to change: {", ".join(blocked)}',
                    fields=blocked,
                )

    def update(self, announcement_id, actor, data, uploaded_files=None):
        """
        Update announcement fields.

        Rules:
        - status is never settable here (use the dedicated transitions)
        - admins may always edit
        - owners edit freely while pending; once published only expiry_date
        - an images list replaces the stored set; uploads are appended

        Returns:
            Announcement instance
        """
        if 'status' in data:
            raise ValidationError(STATUS_ENDPOINTS_HINT, field='status')

        data = dict(data)
        if 'description' in data:
            data['description'] = (data['description'] or '').strip()
        uploaded_files = list(uploaded_files or [])
        new_keys = []
        try:
            with transaction.atomic():
                announcement = self.ledger.lock(announcement_id)
                self._check_edit_rights(announcement, actor, data, uploaded_files)
                new_keys = self._apply_update(announcement, data, uploaded_files)
        except Exception:
            if new_keys:
                self.image_store.delete(new_keys)
            raise

        logger.info(f"Announcement {announcement.id} updated by {actor.id}")
        return announcement

    def _apply_update(self, announcement, data, uploaded_files):
        """Apply a permitted update to a locked announcement. Returns newly uploaded keys."""
        old_category = announcement.category
        category = data.get('category', old_category)
        if category != old_category and announcement.applications.exists():
            raise ValidationError(
                'Category cannot be changed once applications exist', field='category'
            )

        merged = {
            name: data[name] if name in data else getattr(announcement, name)
            for name in GOODS_FIELDS + RENT_FIELDS
        }
        category_fields = self.validate_category_fields(category, merged)

        if 'group_id' in data or 'item_id' in data:
            group, item = self._validate_catalog(
                data.get('group_id', announcement.group_id),
                data.get('item_id', announcement.item_id),
            )
            announcement.group = group
            announcement.item = item

        region_ids = village_ids = None
        if 'regions' in data or 'villages' in data:
            region_ids, village_ids = self._validate_locations(
                data['regions'] if 'regions' in data else announcement.regions.values_list('id', flat=True),
                data['villages'] if 'villages' in data else announcement.villages.values_list('id', flat=True),
            )

        if 'expiry_date' in data:
            self._validate_expiry(data['expiry_date'])
            announcement.expiry_date = data['expiry_date']
        elif category == Category.RENT and category_fields['date_to'] != announcement.date_to:
            announcement.expiry_date = self.default_expiry(category_fields['date_to'])

        for name in ('type', 'price', 'unit'):
            if name in data:
                setattr(announcement, name, data[name])
        if 'description' in data:
            announcement.description = (data['description'] or '').strip()

        # Quantity: keep the ledger consistent with the (possibly new) count
        announcement.category = category
        if category == Category.GOODS:
            if old_category == Category.GOODS:
                self.ledger.resize(announcement, category_fields['count'])
            else:
                announcement.count = category_fields['count']
                announcement.available_quantity = category_fields['count']
        else:
            announcement.available_quantity = None
        for name, value in category_fields.items():
            setattr(announcement, name, value)

        new_keys = []
        if 'images' in data or uploaded_files:
            new_keys = self._replace_images(announcement, data, uploaded_files)

        announcement.save()

        if region_ids is not None:
            announcement.regions.set(region_ids)
            announcement.villages.set(village_ids)

        return new_keys

    def _replace_images(self, announcement, data, uploaded_files):
        current = list(announcement.images or [])
        if 'images' in data:
            kept = list(dict.fromkeys(data['images'] or []))
            unknown = [key for key in kept if key not in current]
            if unknown:
                raise ValidationError(
                    f'Unknown image keys: {", ".join(unknown)}', field='images'
                )
        else:
            kept = current

        self._ensure_image_limit(len(kept) + len(uploaded_files))

        new_keys = []
        if uploaded_files:
            new_keys = self.image_store.upload(uploaded_files, prefix=self.config.image_prefix)

        announcement.images = kept + new_keys
        self._schedule_image_cleanup(
            [key for key in current if key not in announcement.images], announcement
        )
        return new_keys

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def record_view(self, announcement_id, user):
        """
        Count a view once per user. Owner views are not counted.

        Returns:
            dict: {'viewed': bool, 'views_count': int}
        """
        try:
            announcement = Announcement.objects.only('id', 'status', 'owner_id', 'views_count').get(
                pk=announcement_id
            )
        except (Announcement.DoesNotExist, ValueError):
            raise NotFound(f'Announcement with ID {announcement_id} not found')

        if announcement.status != Status.PUBLISHED:
            raise ValidationError('Only published announcements can be viewed')

        if announcement.is_owned_by(user):
            return {'viewed': False, 'views_count': announcement.views_count}

        try:
            with transaction.atomic():
                AnnouncementView.objects.create(announcement=announcement, user=user)
                Announcement.objects.filter(pk=announcement.pk).update(views_count=F('views_count') + 1)
            viewed = True
        except IntegrityError:
            # Already viewed (unique per announcement/user)
            viewed = False

        views_count = Announcement.objects.filter(pk=announcement.pk).values_list(
            'views_count', flat=True
        ).get()
        return {'viewed': viewed, 'views_count': views_count}


# Singleton instance
_announcement_service = None


def get_announcement_service() -> AnnouncementLifecycleService:
    """Get or create singleton announcement lifecycle service instance."""
    global _announcement_service
    if _announcement_service is None:
        _announcement_service = AnnouncementLifecycleService()
    return _announcement_service
