"""
Announcement lifecycle tests

Tests cover:
1. Creation rules (auto-publish, category-conditional fields, catalog/region checks)
2. Moderation transitions (publish, block) and the terminal states
3. Owner close / cancel / soft delete
4. Update rules per status, including the status-field guard
5. Image upload, replacement and cleanup
6. Per-user view counting

Run with: pytest tests/integration/test_announcement_lifecycle.py -v
"""
from datetime import timedelta
from decimal import Decimal
import uuid

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework import status

from announcements.models import Announcement
from core.exceptions import Forbidden, InvalidTransition, NotFound, ValidationError


def image_file(name='photo.png'):
    return SimpleUploadedFile(name, b'\x89PNG\r\n\x1a\n' + b'0' * 64, content_type='image/png')


# =============================================================================
# CREATE
# =============================================================================

@pytest.mark.django_db
class TestAnnouncementCreation:

    def test_goods_without_description_or_images_auto_publishes(self, published_goods):
        assert published_goods.status == Announcement.Status.PUBLISHED
        assert published_goods.published_at is not None
        assert published_goods.available_quantity == Decimal('100')

    def test_goods_with_description_waits_for_review(self, farmer, announcement_data, announcement_service):
        announcement_data['description'] = 'Fresh apricots from Ararat valley'
        announcement = announcement_service.create(farmer, announcement_data)

        assert announcement.status == Announcement.Status.PENDING
        assert announcement.published_at is None

    def test_service_announcement_never_auto_publishes(self, farmer, announcement_data, announcement_service):
        announcement_data.update(category='service', count=None)
        announcement = announcement_service.create(farmer, announcement_data)

        assert announcement.status == Announcement.Status.PENDING
        assert announcement.count is None
        assert announcement.available_quantity is None

    def test_goods_requires_count(self, farmer, announcement_data, announcement_service):
        announcement_data.pop('count')
        with pytest.raises(ValidationError) as exc_info:
            announcement_service.create(farmer, announcement_data)
        assert exc_info.value.extra['field'] == 'count'

    def test_daily_limit_cannot_exceed_count(self, farmer, announcement_data, announcement_service):
        announcement_data['daily_limit'] = Decimal('150')
        with pytest.raises(ValidationError):
            announcement_service.create(farmer, announcement_data)

    def test_goods_fields_are_dropped_for_rent(self, farmer, announcement_data, announcement_service):
        today = timezone.localdate()
        announcement_data.update(
            category='rent',
            date_from=today + timedelta(days=1),
            date_to=today + timedelta(days=10),
        )
        announcement = announcement_service.create(farmer, announcement_data)

        assert announcement.count is None
        assert announcement.daily_limit is None
        # Rent listings expire with their rental period
        assert announcement.expiry_date == today + timedelta(days=10)

    def test_default_expiry_is_applied(self, published_goods):
        assert published_goods.expiry_date == timezone.localdate() + timedelta(days=30)

    def test_past_expiry_date_is_rejected(self, farmer, announcement_data, announcement_service):
        announcement_data['expiry_date'] = timezone.localdate() - timedelta(days=1)
        with pytest.raises(ValidationError):
            announcement_service.create(farmer, announcement_data)

    def test_item_must_belong_to_group(self, farmer, announcement_data, announcement_service):
        from catalog.models import GoodsCategory, GoodsItem
        other_group = GoodsCategory.objects.create(name_am='Բանջարեղեն', name_en='Vegetables', name_ru='Овощи')
        tomato = GoodsItem.objects.create(
            category=other_group, name_am='Լոլիկ', name_en='Tomato', name_ru='Помидор'
        )
        announcement_data['item_id'] = tomato.id

        with pytest.raises(ValidationError) as exc_info:
            announcement_service.create(farmer, announcement_data)
        assert exc_info.value.extra['field'] == 'item_id'

    def test_unknown_catalog_category(self, farmer, announcement_data, announcement_service):
        announcement_data['group_id'] = 99999
        with pytest.raises(NotFound):
            announcement_service.create(farmer, announcement_data)

    def test_village_must_be_in_selected_regions(
        self, farmer, announcement_data, announcement_service, village, other_region
    ):
        announcement_data.update(regions=[other_region.id], villages=[village.id])
        with pytest.raises(ValidationError) as exc_info:
            announcement_service.create(farmer, announcement_data)
        assert exc_info.value.extra['field'] == 'villages'

    def test_unverified_user_cannot_create(self, farmer, announcement_data, announcement_service):
        farmer.is_verified = False
        farmer.save()
        with pytest.raises(Forbidden):
            announcement_service.create(farmer, announcement_data)

    def test_blocked_user_cannot_create(self, farmer, announcement_data, announcement_service):
        farmer.account_status = 'BLOCKED'
        farmer.save()
        with pytest.raises(Forbidden):
            announcement_service.create(farmer, announcement_data)

    def test_admin_cannot_post_announcements(self, admin_user, announcement_data, announcement_service):
        with pytest.raises(Forbidden):
            announcement_service.create(admin_user, announcement_data)


@pytest.mark.django_db
class TestAnnouncementCreateAPI:

    def test_create_goods_returns_published(self, api_client, farmer, goods_category, goods_item, region):
        api_client.force_authenticate(user=farmer)
        response = api_client.post('/api/announcements/', {
            'type': 'sell',
            'category': 'goods',
            'group_id': goods_category.id,
            'item_id': goods_item.id,
            'price': '350.00',
            'count': '100',
            'unit': 'kg',
            'regions': [region.id],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['announcement']['status'] == 'published'
        assert response.data['announcement']['available_quantity'] == '100.00'
        assert response.data['announcement']['regions'] == [region.id]

    def test_rent_with_reversed_dates_is_rejected(self, api_client, farmer, goods_category, goods_item):
        api_client.force_authenticate(user=farmer)
        today = timezone.localdate()
        response = api_client.post('/api/announcements/', {
            'type': 'sell',
            'category': 'rent',
            'group_id': goods_category.id,
            'item_id': goods_item.id,
            'price': '5000',
            'date_from': (today + timedelta(days=10)).isoformat(),
            'date_to': (today + timedelta(days=2)).isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'validation_error'
        assert response.data['field'] == 'date_from'
        assert not Announcement.objects.exists()

    def test_rent_with_impossible_calendar_date_is_rejected(
        self, api_client, farmer, goods_category, goods_item
    ):
        api_client.force_authenticate(user=farmer)
        response = api_client.post('/api/announcements/', {
            'type': 'sell',
            'category': 'rent',
            'group_id': goods_category.id,
            'item_id': goods_item.id,
            'price': '5000',
            'date_from': '2031-02-30',
            'date_to': '2031-03-10',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'date_from' in response.data

    def test_anonymous_user_cannot_create(self, api_client, goods_category, goods_item):
        response = api_client.post('/api/announcements/', {'type': 'sell'}, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# TRANSITIONS
# =============================================================================

@pytest.mark.django_db
class TestAnnouncementTransitions:

    @pytest.fixture
    def pending_goods(self, farmer, announcement_data, announcement_service):
        announcement_data['description'] = 'Needs review'
        return announcement_service.create(farmer, announcement_data)

    def test_admin_publishes_pending(self, api_client, admin_user, pending_goods):
        api_client.force_authenticate(user=admin_user)
        response = api_client.post(f'/api/announcements/{pending_goods.id}/publish/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'published'
        assert response.data['published_at'] is not None

    def test_non_admin_cannot_publish(self, api_client, farmer, pending_goods):
        api_client.force_authenticate(user=farmer)
        response = api_client.post(f'/api/announcements/{pending_goods.id}/publish/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_publish_on_published_reports_allowed_transitions(self, api_client, admin_user, published_goods):
        api_client.force_authenticate(user=admin_user)
        response = api_client.post(f'/api/announcements/{published_goods.id}/publish/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_transition'
        assert response.data['current_status'] == 'published'
        assert response.data['allowed'] == ['closed', 'canceled', 'blocked']

    def test_block_records_actor(self, admin_user, published_goods, announcement_service):
        announcement = announcement_service.block(published_goods.id, admin_user)

        assert announcement.status == Announcement.Status.BLOCKED
        assert announcement.closed_by == admin_user
        assert announcement.closed_at is not None

    def test_owner_closes_published(self, farmer, published_goods, announcement_service):
        announcement = announcement_service.close(published_goods.id, farmer)
        assert announcement.status == Announcement.Status.CLOSED
        assert announcement.closed_by == farmer

    def test_stranger_cannot_close(self, company, published_goods, announcement_service):
        with pytest.raises(Forbidden):
            announcement_service.close(published_goods.id, company)

    def test_pending_cannot_be_closed(self, farmer, pending_goods, announcement_service):
        with pytest.raises(InvalidTransition):
            announcement_service.close(pending_goods.id, farmer)

    @pytest.mark.parametrize('action', ['publish', 'block', 'close', 'cancel'])
    def test_closed_is_terminal(self, action, farmer, admin_user, published_goods, announcement_service):
        announcement_service.close(published_goods.id, farmer)
        actor = farmer if action == 'cancel' else admin_user

        with pytest.raises(InvalidTransition) as exc_info:
            getattr(announcement_service, action)(published_goods.id, actor)

        assert exc_info.value.current_status == 'closed'
        assert exc_info.value.allowed == []

    def test_owner_cancels_pending(self, farmer, pending_goods, announcement_service):
        announcement = announcement_service.cancel(pending_goods.id, farmer)
        assert announcement.status == Announcement.Status.CANCELED
        assert announcement.cancellation_kind == Announcement.CancellationKind.CANCELED

    def test_admin_cannot_cancel_for_owner(self, admin_user, pending_goods, announcement_service):
        with pytest.raises(Forbidden):
            announcement_service.cancel(pending_goods.id, admin_user)

    def test_delete_is_soft(self, api_client, farmer, pending_goods):
        api_client.force_authenticate(user=farmer)
        response = api_client.delete(f'/api/announcements/{pending_goods.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        pending_goods.refresh_from_db()
        assert pending_goods.status == Announcement.Status.CANCELED
        assert pending_goods.is_deleted

        my_list = api_client.get('/api/announcements/me/')
        assert my_list.data['count'] == 0

    def test_published_must_be_canceled_before_delete(self, farmer, published_goods, announcement_service):
        with pytest.raises(Forbidden):
            announcement_service.delete(published_goods.id, farmer)

        announcement_service.cancel(published_goods.id, farmer)
        announcement = announcement_service.delete(published_goods.id, farmer)
        assert announcement.is_deleted


# =============================================================================
# UPDATE
# =============================================================================

@pytest.mark.django_db
class TestAnnouncementUpdate:

    def test_status_field_is_rejected(self, api_client, farmer, published_goods):
        api_client.force_authenticate(user=farmer)
        response = api_client.patch(
            f'/api/announcements/{published_goods.id}/', {'status': 'closed'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert '/publish' in response.data['error']
        published_goods.refresh_from_db()
        assert published_goods.status == Announcement.Status.PUBLISHED

    def test_owner_can_only_extend_published_expiry(self, api_client, farmer, published_goods):
        api_client.force_authenticate(user=farmer)
        new_expiry = (timezone.localdate() + timedelta(days=60)).isoformat()

        response = api_client.patch(
            f'/api/announcements/{published_goods.id}/', {'expiry_date': new_expiry}, format='json'
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data['expiry_date'] == new_expiry

        response = api_client.patch(
            f'/api/announcements/{published_goods.id}/', {'price': '999.00'}, format='json'
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['fields'] == ['price']

    def test_unchanged_values_do_not_count_as_edits(self, farmer, published_goods, announcement_service):
        announcement = announcement_service.update(
            published_goods.id, farmer, {'price': published_goods.price, 'count': published_goods.count}
        )
        assert announcement.price == published_goods.price

    def test_owner_edits_pending_freely(self, farmer, announcement_data, announcement_service):
        announcement_data['description'] = 'First draft'
        announcement = announcement_service.create(farmer, announcement_data)

        updated = announcement_service.update(
            announcement.id, farmer, {'description': 'Second draft', 'count': Decimal('80')}
        )
        assert updated.description == 'Second draft'
        assert updated.count == Decimal('80')
        assert updated.available_quantity == Decimal('80')

    def test_admin_may_edit_published(self, admin_user, published_goods, announcement_service):
        updated = announcement_service.update(published_goods.id, admin_user, {'price': Decimal('400')})
        assert updated.price == Decimal('400')

    def test_terminal_announcement_is_read_only_for_owner(self, farmer, published_goods, announcement_service):
        announcement_service.close(published_goods.id, farmer)
        with pytest.raises(Forbidden):
            announcement_service.update(published_goods.id, farmer, {'description': 'late edit'})

    def test_stranger_cannot_update(self, company, published_goods, announcement_service):
        with pytest.raises(Forbidden):
            announcement_service.update(published_goods.id, company, {'expiry_date': timezone.localdate()})

    def test_count_cannot_drop_below_approved(
        self, admin_user, company, published_goods, delivery_dates,
        announcement_service, application_service
    ):
        application = application_service.create(company, published_goods.id, {
            'count': Decimal('40'), 'delivery_dates': delivery_dates,
        })
        application_service.approve(application.id, published_goods.owner)

        with pytest.raises(ValidationError):
            announcement_service.update(published_goods.id, admin_user, {'count': Decimal('30')})

        updated = announcement_service.update(published_goods.id, admin_user, {'count': Decimal('50')})
        assert updated.available_quantity == Decimal('10')

    def test_category_is_fixed_once_applications_exist(
        self, admin_user, company, published_goods, delivery_dates,
        announcement_service, application_service
    ):
        application_service.create(company, published_goods.id, {
            'count': Decimal('5'), 'delivery_dates': delivery_dates,
        })
        with pytest.raises(ValidationError) as exc_info:
            announcement_service.update(published_goods.id, admin_user, {'category': 'service'})
        assert exc_info.value.extra['field'] == 'category'


# =============================================================================
# IMAGES
# =============================================================================

@pytest.mark.django_db
class TestAnnouncementImages:

    def _create_with_images(self, api_client, announcement_data, count):
        payload = dict(announcement_data)
        payload['uploads'] = [image_file(f'photo{i}.png') for i in range(count)]
        return api_client.post('/api/announcements/', payload, format='multipart')

    def test_upload_makes_goods_pending(self, api_client, farmer, announcement_data):
        api_client.force_authenticate(user=farmer)
        response = self._create_with_images(api_client, announcement_data, 2)

        assert response.status_code == status.HTTP_201_CREATED
        announcement = response.data['announcement']
        assert announcement['status'] == 'pending'
        assert len(announcement['images']) == 2
        assert len(announcement['image_urls']) == 2
        assert all(default_storage.exists(key) for key in announcement['images'])

    def test_more_than_three_images_rejected(self, api_client, farmer, announcement_data):
        api_client.force_authenticate(user=farmer)
        response = self._create_with_images(api_client, announcement_data, 4)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['field'] == 'images'
        assert not Announcement.objects.exists()

    def test_replacing_images_removes_dropped_files(
        self, api_client, farmer, announcement_data, django_capture_on_commit_callbacks
    ):
        api_client.force_authenticate(user=farmer)
        created = self._create_with_images(api_client, announcement_data, 2).data['announcement']
        kept, dropped = created['images']

        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.patch(
                f"/api/announcements/{created['id']}/", {'images': [kept]}, format='json'
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['images'] == [kept]
        assert default_storage.exists(kept)
        assert not default_storage.exists(dropped)

    def test_cannot_claim_image_of_another_announcement(
        self, api_client, farmer, company, announcement_data, announcement_service
    ):
        api_client.force_authenticate(user=farmer)
        key = self._create_with_images(api_client, announcement_data, 1).data['announcement']['images'][0]

        with pytest.raises(ValidationError) as exc_info:
            announcement_service.create(company, dict(announcement_data, images=[key]))
        assert exc_info.value.extra['field'] == 'images'

        api_client.force_authenticate(user=company)
        response = api_client.post(
            '/api/announcements/', dict(announcement_data, images=[key]), format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['field'] == 'images'
        assert default_storage.exists(key)

    def test_dropping_shared_image_keeps_the_file(
        self, api_client, farmer, company, announcement_data, announcement_service,
        django_capture_on_commit_callbacks
    ):
        api_client.force_authenticate(user=farmer)
        key = self._create_with_images(api_client, announcement_data, 1).data['announcement']['images'][0]
        # Legacy row already pointing at the same file
        other = announcement_service.create(company, dict(announcement_data, description='copy'))
        Announcement.objects.filter(pk=other.pk).update(images=[key])

        with django_capture_on_commit_callbacks(execute=True):
            announcement_service.update(other.id, company, {'images': []})

        other.refresh_from_db()
        assert other.images == []
        assert default_storage.exists(key)

    def test_unknown_image_key_rejected(self, farmer, announcement_data, announcement_service):
        announcement_data['description'] = 'with photos later'
        announcement = announcement_service.create(farmer, announcement_data)

        with pytest.raises(ValidationError):
            announcement_service.update(announcement.id, farmer, {'images': ['announcements/forged.jpg']})


# =============================================================================
# VIEWS
# =============================================================================

@pytest.mark.django_db
class TestRecordView:

    def test_each_user_counts_once(self, api_client, company, published_goods):
        api_client.force_authenticate(user=company)
        url = f'/api/announcements/{published_goods.id}/view/'

        first = api_client.post(url)
        second = api_client.post(url)

        assert first.data == {'viewed': True, 'views_count': 1}
        assert second.data == {'viewed': False, 'views_count': 1}

    def test_owner_views_are_not_counted(self, farmer, published_goods, announcement_service):
        result = announcement_service.record_view(published_goods.id, farmer)
        assert result == {'viewed': False, 'views_count': 0}

    def test_only_published_can_be_viewed(self, company, farmer, published_goods, announcement_service):
        announcement_service.close(published_goods.id, farmer)
        with pytest.raises(ValidationError):
            announcement_service.record_view(published_goods.id, company)

    def test_unknown_announcement(self, company, announcement_service):
        with pytest.raises(NotFound):
            announcement_service.record_view(uuid.uuid4(), company)
