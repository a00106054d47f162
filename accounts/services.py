"""
UserDirectory: user lookups and the eligibility gates used by the
announcement and application lifecycles.
"""
import logging

from django.contrib.auth import get_user_model

from core.exceptions import Forbidden, NotFound

logger = logging.getLogger(__name__)

User = get_user_model()


class UserDirectory:

    POSTING_ROLES = (User.UserRole.FARMER, User.UserRole.COMPANY)

    def get_user(self, user_id):
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, ValueError):
            raise NotFound(f"User with ID {user_id} not found")

    def _ensure_in_good_standing(self, user, action):
        if user.is_blocked:
            raise Forbidden(f"Your account is blocked and cannot {action}")
        if user.is_locked:
            raise Forbidden(f"Your account is locked and cannot {action}")
        if not user.is_verified:
            raise Forbidden(f"Only verified users can {action}")

    def ensure_can_create(self, user):
        """
        Gate for posting announcements: verified, unlocked, not blocked,
        and a farmer or company.
        """
        self._ensure_in_good_standing(user, 'create announcements')
        if user.role not in self.POSTING_ROLES:
            raise Forbidden("Only farmers and companies can create announcements")

    def ensure_can_apply(self, user):
        self._ensure_in_good_standing(user, 'apply to announcements')


# Singleton instance
_user_directory = None


def get_user_directory() -> UserDirectory:
    """Get or create singleton user directory instance."""
    global _user_directory
    if _user_directory is None:
        _user_directory = UserDirectory()
    return _user_directory
