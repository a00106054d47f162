"""
Favorites Service

Users bookmark published announcements and list them later. Saved listings
that have since left PUBLISHED stay stored but drop out of the list.
"""
import logging

from django.db import IntegrityError, transaction

from announcements.models import Announcement, AnnouncementFavorite
from core.exceptions import Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)


class FavoritesService:

    def add(self, user, announcement_id):
        """
        Save a published announcement for user.

        Raises:
            NotFound: unknown announcement
            ValidationError: announcement is not published
            Conflict: already saved
        """
        try:
            announcement = Announcement.objects.get(pk=announcement_id)
        except (Announcement.DoesNotExist, ValueError):
            raise NotFound(f'Announcement with ID {announcement_id} not found')

        if announcement.status != Announcement.Status.PUBLISHED:
            raise ValidationError(
                'Only published announcements can be added to favorites',
                field='announcement_id',
            )

        try:
            with transaction.atomic():
                favorite = AnnouncementFavorite.objects.create(announcement=announcement, user=user)
        except IntegrityError:
            raise Conflict('Announcement is already in your favorites')

        logger.info(f"User {user.id} saved announcement {announcement.id}")
        return favorite

    def remove(self, user, announcement_id):
        deleted, _ = AnnouncementFavorite.objects.filter(
            announcement_id=announcement_id, user=user
        ).delete()
        if not deleted:
            raise NotFound('Favorite not found')
        logger.info(f"User {user.id} removed announcement {announcement_id} from favorites")

    def list_mine(self, user):
        return AnnouncementFavorite.objects.filter(
            user=user,
            announcement__status=Announcement.Status.PUBLISHED,
        ).select_related(
            'announcement', 'announcement__owner', 'announcement__group', 'announcement__item'
        ).prefetch_related('announcement__regions', 'announcement__villages')


# Singleton instance
_favorites_service = None


def get_favorites_service() -> FavoritesService:
    """Get or create singleton favorites service instance."""
    global _favorites_service
    if _favorites_service is None:
        _favorites_service = FavoritesService()
    return _favorites_service
