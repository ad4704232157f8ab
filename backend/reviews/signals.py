from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from .models import Review
from .services.ratings import recalculate_trip_rating


@receiver(pre_save, sender=Review)
def remember_previous_status(sender, instance: Review, **kwargs):
    if instance.pk:
        instance._previous_status = (
            Review.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
        )
    else:
        instance._previous_status = None


@receiver(post_save, sender=Review)
def refresh_rating_on_save(sender, instance: Review, raw=False, **kwargs):
    if raw:
        return
    previous = getattr(instance, "_previous_status", None)
    if Review.APPROVED in {instance.status, previous}:
        recalculate_trip_rating(instance.trip_id)


@receiver(post_delete, sender=Review)
def refresh_rating_on_delete(sender, instance: Review, **kwargs):
    if instance.status == Review.APPROVED:
        recalculate_trip_rating(instance.trip_id)
