"""
Shared pytest fixtures for the marketplace lifecycle tests.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear cache before and after each test (sweep lock lives there)."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def region(db):
    from regions.models import Region
    return Region.objects.create(name_am='Արարատ', name_en='Ararat', name_ru='Арарат')


@pytest.fixture
def other_region(db):
    from regions.models import Region
    return Region.objects.create(name_am='Շիրակ', name_en='Shirak', name_ru='Ширак')


@pytest.fixture
def village(db, region):
    from regions.models import Village
    return Village.objects.create(region=region, name_am='Վեդի', name_en='Vedi', name_ru='Веди')


@pytest.fixture
def goods_category(db):
    from catalog.models import GoodsCategory
    return GoodsCategory.objects.create(name_am='Միրգ', name_en='Fruit', name_ru='Фрукты')


@pytest.fixture
def goods_item(db, goods_category):
    from catalog.models import GoodsItem
    return GoodsItem.objects.create(
        category=goods_category,
        name_am='Ծիրան',
        name_en='Apricot',
        name_ru='Абрикос',
        measurements='kg'
    )


def make_user(username, phone, role='FARMER', region=None, **extra):
    defaults = {
        'is_verified': True,
        'account_status': 'ACTIVE',
        'full_name': username.replace('_', ' ').title(),
    }
    defaults.update(extra)
    return User.objects.create_user(
        username=username,
        password='testpass123',
        phone=phone,
        role=role,
        region=region,
        **defaults
    )


@pytest.fixture
def farmer(db, region):
    """Verified farmer who owns announcements."""
    return make_user('test_farmer', '+37491000001', role='FARMER', region=region)


@pytest.fixture
def company(db, region):
    """Verified company that applies to announcements."""
    return make_user('test_company', '+37491000002', role='COMPANY', region=region)


@pytest.fixture
def second_company(db, region):
    return make_user('second_company', '+37491000003', role='COMPANY', region=region)


@pytest.fixture
def admin_user(db):
    return make_user('test_admin', '+37491000009', role='ADMIN')


@pytest.fixture
def announcement_data(goods_category, goods_item, region):
    """Payload for a goods sell announcement of 100 kg (auto-publishes)."""
    return {
        'type': 'sell',
        'category': 'goods',
        'group_id': goods_category.id,
        'item_id': goods_item.id,
        'price': Decimal('350.00'),
        'count': Decimal('100'),
        'unit': 'kg',
        'regions': [region.id],
    }


@pytest.fixture
def announcement_service():
    from announcements.services.announcement_lifecycle import get_announcement_service
    return get_announcement_service()


@pytest.fixture
def application_service():
    from applications.services.application_lifecycle import get_application_service
    return get_application_service()


@pytest.fixture
def published_goods(db, farmer, announcement_data, announcement_service):
    """Published goods announcement with count 100."""
    announcement = announcement_service.create(farmer, announcement_data)
    assert announcement.status == 'published'
    return announcement


@pytest.fixture
def delivery_dates():
    today = timezone.localdate()
    return [today + timedelta(days=3), today + timedelta(days=5)]


@pytest.fixture
def user_factory(db):
    """Create extra users: user_factory(username, phone, role=..., region=..., **fields)."""
    return make_user
