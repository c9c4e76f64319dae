"""
Signals pushing opportunity changes to the live feed.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .consumers import broadcast_opportunity_deleted, broadcast_opportunity_saved
from .models import Opportunity


@receiver(post_save, sender=Opportunity)
def opportunity_saved(sender, instance, created, **kwargs):
    broadcast_opportunity_saved(instance, created)


@receiver(post_delete, sender=Opportunity)
def opportunity_deleted(sender, instance, **kwargs):
    broadcast_opportunity_deleted(instance.pk)
