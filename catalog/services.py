"""
CatalogGate: existence checks for the catalog references on an announcement.
"""
from catalog.models import GoodsCategory, GoodsItem
from core.exceptions import NotFound


class CatalogGate:

    def category_exists(self, category_id) -> bool:
        return GoodsCategory.objects.filter(id=category_id).exists()

    def item_exists(self, item_id) -> bool:
        return GoodsItem.objects.filter(id=item_id).exists()

    def get_category(self, category_id):
        try:
            return GoodsCategory.objects.get(id=category_id)
        except (GoodsCategory.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Catalog category with ID {category_id} not found")

    def get_item(self, item_id):
        try:
            return GoodsItem.objects.select_related('category').get(id=item_id)
        except (GoodsItem.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Catalog item with ID {item_id} not found")


# Singleton instance
_catalog_gate = None


def get_catalog_gate() -> CatalogGate:
    """Get or create singleton catalog gate instance."""
    global _catalog_gate
    if _catalog_gate is None:
        _catalog_gate = CatalogGate()
    return _catalog_gate
