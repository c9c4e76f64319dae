"""
Messaging Filters.
"""

import django_filters
from django.db.models import Q

from .models import Message


class MessageFilter(django_filters.FilterSet):
    """Filter the current user's messages."""
    with_user = django_filters.UUIDFilter(method='filter_with_user')
    read = django_filters.BooleanFilter()

    class Meta:
        model = Message
        fields = ['with_user', 'read']

    def filter_with_user(self, queryset, name, value):
        return queryset.filter(Q(sender_id=value) | Q(receiver_id=value))
