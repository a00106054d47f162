"""
Favorites tests

Tests cover:
1. Saving published announcements only
2. Duplicate saves
3. Removal
4. Listing hides announcements that left PUBLISHED

Run with: pytest tests/integration/test_favorites.py -v
"""
import uuid

import pytest
from rest_framework import status

from announcements.models import AnnouncementFavorite
from announcements.services.favorites import get_favorites_service
from core.exceptions import Conflict, NotFound, ValidationError


@pytest.fixture
def favorites_service():
    return get_favorites_service()


@pytest.mark.django_db
class TestFavoritesService:

    def test_save_published(self, company, published_goods, favorites_service):
        favorite = favorites_service.add(company, published_goods.id)

        assert favorite.announcement_id == published_goods.id
        assert favorite.user_id == company.id

    def test_pending_cannot_be_saved(self, company, farmer, announcement_data, announcement_service,
                                     favorites_service):
        announcement_data['description'] = 'waiting for moderation'
        pending = announcement_service.create(farmer, announcement_data)

        with pytest.raises(ValidationError):
            favorites_service.add(company, pending.id)

    def test_duplicate_save_conflicts(self, company, published_goods, favorites_service):
        favorites_service.add(company, published_goods.id)
        with pytest.raises(Conflict):
            favorites_service.add(company, published_goods.id)
        assert AnnouncementFavorite.objects.filter(user=company).count() == 1

    def test_unknown_announcement(self, company, favorites_service):
        with pytest.raises(NotFound):
            favorites_service.add(company, uuid.uuid4())

    def test_remove_missing_favorite(self, company, published_goods, favorites_service):
        with pytest.raises(NotFound):
            favorites_service.remove(company, published_goods.id)

    def test_closed_announcement_drops_out_of_list(
        self, farmer, company, published_goods, announcement_service, favorites_service
    ):
        favorites_service.add(company, published_goods.id)
        announcement_service.close(published_goods.id, farmer)

        assert favorites_service.list_mine(company).count() == 0
        # The saved row itself is kept
        assert AnnouncementFavorite.objects.filter(user=company).exists()


@pytest.mark.django_db
class TestFavoritesAPI:

    def test_add_list_remove(self, api_client, company, published_goods):
        api_client.force_authenticate(user=company)

        response = api_client.post(
            '/api/announcements/favorites/', {'announcement_id': str(published_goods.id)}, format='json'
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['announcement']['id'] == str(published_goods.id)

        listing = api_client.get('/api/announcements/favorites/')
        assert listing.status_code == status.HTTP_200_OK
        assert listing.data['count'] == 1
        assert listing.data['results'][0]['announcement_id'] == str(published_goods.id)

        response = api_client.delete(f'/api/announcements/favorites/{published_goods.id}/')
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert api_client.get('/api/announcements/favorites/').data['count'] == 0

    def test_duplicate_returns_409(self, api_client, company, published_goods):
        api_client.force_authenticate(user=company)
        payload = {'announcement_id': str(published_goods.id)}

        api_client.post('/api/announcements/favorites/', payload, format='json')
        response = api_client.post('/api/announcements/favorites/', payload, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'conflict'

    def test_invalid_announcement_id(self, api_client, company):
        api_client.force_authenticate(user=company)
        response = api_client.post(
            '/api/announcements/favorites/', {'announcement_id': 'not-a-uuid'}, format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_favorites_are_per_user(self, api_client, company, second_company, published_goods):
        get_favorites_service().add(company, published_goods.id)

        api_client.force_authenticate(user=second_company)
        assert api_client.get('/api/announcements/favorites/').data['count'] == 0
        response = api_client.delete(f'/api/announcements/favorites/{published_goods.id}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_requires_authentication(self, api_client):
        response = api_client.get('/api/announcements/favorites/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
