"""
RegionDirectory: region/village lookups used by the lifecycle services.
"""
from django.contrib.auth import get_user_model

from regions.models import Region, Village


class RegionDirectory:
    """Read-only queries over regions, villages and the users living in them."""

    def regions_exist(self, region_ids) -> bool:
        ids = set(region_ids)
        return Region.objects.filter(id__in=ids).count() == len(ids)

    def village_belongs_to_region(self, village_id, region_id) -> bool:
        return Village.objects.filter(id=village_id, region_id=region_id).exists()

    def villages_outside_regions(self, village_ids, region_ids):
        """
        Return the ids of villages that do not belong to any of region_ids
        (unknown village ids are included).
        """
        village_ids = set(village_ids)
        inside = set(
            Village.objects.filter(id__in=village_ids, region_id__in=region_ids)
            .values_list('id', flat=True)
        )
        return sorted(village_ids - inside)

    def users_in_regions(self, region_ids, verified_only=True, exclude_locked=True):
        """
        Ids of users whose home region is any of region_ids.

        Blocked accounts never receive region broadcasts.
        """
        User = get_user_model()
        if not region_ids:
            return []

        users = User.objects.filter(region_id__in=region_ids, is_active=True).exclude(
            account_status=User.AccountStatus.BLOCKED
        )
        if verified_only:
            users = users.filter(is_verified=True)
        if exclude_locked:
            users = users.filter(is_locked=False)
        return list(users.values_list('id', flat=True))


# Singleton instance
_region_directory = None


def get_region_directory() -> RegionDirectory:
    """Get or create singleton region directory instance."""
    global _region_directory
    if _region_directory is None:
        _region_directory = RegionDirectory()
    return _region_directory
