"""
Notification tests

Tests cover:
1. Who is notified for each lifecycle transition
2. Region fan-out on publish
3. Delivery failures never break the transition
4. Inbox endpoints

Run with: pytest tests/integration/test_notifications.py -v
"""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch
import uuid

import pytest
from django.utils import timezone
from rest_framework import status

from announcements.models import Announcement
from core.exceptions import InvalidTransition
from notifications.dispatcher import NotificationDispatcher
from notifications.events import ApplicationApproved
from notifications.models import Notification
from notifications.tasks import cleanup_old_notifications


@pytest.fixture
def pending_goods(farmer, announcement_data, announcement_service):
    announcement_data['description'] = 'Sweet apricots, hand picked'
    return announcement_service.create(farmer, announcement_data)


@pytest.mark.django_db
class TestLifecycleNotifications:

    def test_publish_notifies_owner_and_region(
        self, farmer, company, second_company, admin_user, region, other_region, user_factory,
        pending_goods, announcement_service, django_capture_on_commit_callbacks
    ):
        user_factory('unverified_farmer', '+37491000011', region=region, is_verified=False)
        user_factory('blocked_company', '+37491000012', role='COMPANY', region=region, account_status='BLOCKED')
        user_factory('far_away_farmer', '+37491000013', region=other_region)

        with django_capture_on_commit_callbacks(execute=True):
            announcement_service.publish(pending_goods.id, admin_user)

        published = Notification.objects.filter(type='announcement_published')
        assert published.count() == 3
        assert set(published.values_list('user_id', flat=True)) == {farmer.id, company.id, second_company.id}
        assert published.get(user=farmer).title == 'Announcement Published'
        assert published.get(user=company).title == 'New Announcement in Your Region'

    def test_auto_publish_broadcasts_to_region_only(
        self, farmer, company, announcement_data, announcement_service, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            announcement_service.create(farmer, announcement_data)

        assert not Notification.objects.filter(user=farmer).exists()
        assert Notification.objects.filter(user=company, type='announcement_published').count() == 1

    def test_block_notifies_owner(
        self, farmer, admin_user, pending_goods, announcement_service, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            announcement_service.block(pending_goods.id, admin_user)

        assert Notification.objects.filter(user=farmer, type='announcement_blocked').count() == 1

    def test_owner_close_is_silent_admin_close_is_not(
        self, farmer, admin_user, announcement_data, announcement_service, django_capture_on_commit_callbacks
    ):
        own = announcement_service.create(farmer, dict(announcement_data))
        other = announcement_service.create(farmer, dict(announcement_data))

        with django_capture_on_commit_callbacks(execute=True):
            announcement_service.close(own.id, farmer)
            announcement_service.close(other.id, admin_user)

        closed = Notification.objects.filter(user=farmer, type='announcement_closed')
        assert closed.count() == 1
        assert closed.get().data['announcement_id'] == str(other.id)

    def test_application_flow_notifications(
        self, farmer, company, published_goods, delivery_dates,
        application_service, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            application = application_service.create(company, published_goods.id, {
                'count': Decimal('10'), 'delivery_dates': delivery_dates,
            })
            application_service.approve(application.id, farmer)
            application_service.close(application.id, farmer)

        assert Notification.objects.filter(user=farmer, type='application_created').count() == 1
        assert Notification.objects.filter(user=company, type='application_approved').count() == 1
        assert Notification.objects.filter(user=company, type='application_closed').count() == 1

        created = Notification.objects.get(user=farmer, type='application_created')
        assert created.data == {
            'announcement_id': str(published_goods.id),
            'application_id': str(application.id),
        }

    def test_applicant_self_close_is_silent(
        self, farmer, company, published_goods, delivery_dates,
        application_service, django_capture_on_commit_callbacks
    ):
        application = application_service.create(company, published_goods.id, {
            'count': Decimal('10'), 'delivery_dates': delivery_dates,
        })
        with django_capture_on_commit_callbacks(execute=True):
            application_service.close(application.id, company)

        assert not Notification.objects.filter(type='application_closed').exists()

    def test_rejected_and_reopened(
        self, farmer, company, published_goods, delivery_dates,
        application_service, django_capture_on_commit_callbacks
    ):
        application = application_service.create(company, published_goods.id, {
            'count': Decimal('10'), 'delivery_dates': delivery_dates,
        })
        with django_capture_on_commit_callbacks(execute=True):
            application_service.reject(application.id, farmer)
            application_service.reopen(application.id, company)

        assert Notification.objects.filter(user=company, type='application_rejected').count() == 1
        assert Notification.objects.filter(user=farmer, type='application_created').count() == 1

    def test_nothing_is_sent_when_transition_fails(
        self, farmer, published_goods, admin_user, announcement_service, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(InvalidTransition):
                announcement_service.publish(published_goods.id, admin_user)

        assert callbacks == []
        assert not Notification.objects.exists()


@pytest.mark.django_db
class TestDispatcherFailures:

    def test_enqueue_failure_does_not_fail_transition(
        self, admin_user, pending_goods, announcement_service, django_capture_on_commit_callbacks
    ):
        with patch(
            'notifications.tasks.deliver_notification_event.delay',
            side_effect=ConnectionError('broker unavailable')
        ):
            with django_capture_on_commit_callbacks(execute=True):
                announcement = announcement_service.publish(pending_goods.id, admin_user)

        assert announcement.status == Announcement.Status.PUBLISHED
        pending_goods.refresh_from_db()
        assert pending_goods.status == Announcement.Status.PUBLISHED
        assert not Notification.objects.exists()

    def test_one_bad_recipient_does_not_block_others(self, farmer, company, region):
        dispatcher = NotificationDispatcher(enabled=True)
        payload = {
            'type': 'announcement_published',
            'title': 'New Announcement in Your Region',
            'body': 'New announcement',
            'data': {},
            'recipient_id': None,
            'region_ids': [region.id],
            'exclude_user_ids': [],
        }
        original_create = Notification.objects.create

        def create(**kwargs):
            if str(kwargs["user_id"]) == str(farmer.id):
                raise RuntimeError('disk full')
            return original_create(**kwargs)

        with patch.object(Notification.objects, 'create', side_effect=create):
            result = dispatcher.deliver(payload)

        assert result == {'delivered': 1, 'failed': 1}
        assert Notification.objects.filter(user=company).count() == 1

    def test_disabled_dispatcher_emits_nothing(
        self, company, published_goods, delivery_dates, django_capture_on_commit_callbacks
    ):
        from applications.models import Application

        application = Application.objects.create(
            announcement=published_goods,
            applicant=company,
            count=Decimal('5'),
            delivery_dates=[day.isoformat() for day in delivery_dates],
        )
        dispatcher = NotificationDispatcher(enabled=False)

        with django_capture_on_commit_callbacks() as callbacks:
            dispatcher.emit(ApplicationApproved.for_applicant(application))

        assert callbacks == []


@pytest.mark.django_db
class TestNotificationInbox:

    @pytest.fixture
    def notifications(self, company):
        return [
            Notification.objects.create(
                user=company,
                type='application_approved',
                title=f'Application Approved {i}',
                body='Your application has been approved.',
                data={'application_id': str(uuid.uuid4())},
            )
            for i in range(3)
        ]

    def test_list_includes_unread_count(self, api_client, company, notifications):
        api_client.force_authenticate(user=company)
        response = api_client.get('/api/notifications/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3
        assert response.data['unread_count'] == 3

    def test_mark_one_seen(self, api_client, company, notifications):
        api_client.force_authenticate(user=company)
        response = api_client.post(f'/api/notifications/{notifications[0].id}/seen/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_seen'] is True
        assert api_client.get('/api/notifications/unread-count/').data == {'unread_count': 2}
        assert api_client.get('/api/notifications/?is_seen=false').data['count'] == 2

    def test_mark_all_seen(self, api_client, company, notifications):
        api_client.force_authenticate(user=company)
        response = api_client.post('/api/notifications/seen-all/')

        assert response.data == {'updated': 3}
        assert api_client.get('/api/notifications/unread-count/').data == {'unread_count': 0}

    def test_cannot_touch_other_users_notifications(self, api_client, farmer, notifications):
        api_client.force_authenticate(user=farmer)
        response = api_client.post(f'/api/notifications/{notifications[0].id}/seen/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_cleanup_removes_old_seen_notifications(self, company, notifications):
        old_seen, old_unseen, _recent = notifications
        cutoff = timezone.now() - timedelta(days=120)
        old_seen.mark_seen()
        Notification.objects.filter(pk__in=[old_seen.pk, old_unseen.pk]).update(created_at=cutoff)

        result = cleanup_old_notifications(days_old=90)

        assert result['deleted'] == 1
        assert not Notification.objects.filter(pk=old_seen.pk).exists()
        assert Notification.objects.filter(pk=old_unseen.pk).exists()
