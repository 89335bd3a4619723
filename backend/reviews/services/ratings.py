from django.db.models import Avg, Count

from catalog.models import CatalogItem

from ..models import Review


def recalculate_item_ratings(item_id) -> CatalogItem | None:
    """Refresh the cached rating summary for a catalog item from its reviews."""
    item = CatalogItem.objects.filter(pk=item_id).first()
    if item is None:
        return None
    summary = Review.objects.filter(item_id=item_id).aggregate(average=Avg("rating"), quantity=Count("id"))
    item.set_ratings(summary["average"], summary["quantity"] or 0)
    return item
