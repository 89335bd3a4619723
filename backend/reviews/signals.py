from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Review
from .services.ratings import recalculate_item_ratings


@receiver(post_save, sender=Review)
def refresh_ratings_on_save(sender, instance: Review, **kwargs):
    recalculate_item_ratings(instance.item_id)


@receiver(post_delete, sender=Review)
def refresh_ratings_on_delete(sender, instance: Review, **kwargs):
    recalculate_item_ratings(instance.item_id)
