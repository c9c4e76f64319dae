"""
Opportunities Filters - Django Filter classes for REST API filtering

This module provides filtering for:
- Opportunities (search, causes, location, cause type, status, own posts)
- Applications (status, opportunity)
"""

import django_filters
from django.db.models import Q

from .models import AdminApproval, Application, Opportunity


def _split_csv(value):
    return [part.strip() for part in (value or '').split(',') if part.strip()]


# ==================== OPPORTUNITY FILTERS ====================

class OpportunityFilter(django_filters.FilterSet):
    """Filter for opportunities."""
    search = django_filters.CharFilter(method='filter_search')
    causes = django_filters.CharFilter(method='filter_causes')
    location = django_filters.CharFilter(lookup_expr='icontains')
    cause_type = django_filters.CharFilter(lookup_expr='exact')
    status = django_filters.ChoiceFilter(choices=Opportunity.Status.choices)
    mine = django_filters.BooleanFilter(method='filter_mine')
    created_after = django_filters.DateTimeFilter(
        field_name='created_at',
        lookup_expr='gte'
    )

    class Meta:
        model = Opportunity
        fields = ['search', 'causes', 'location', 'cause_type', 'status', 'mine']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) |
            Q(description__icontains=value) |
            Q(location__icontains=value)
        )

    def filter_causes(self, queryset, name, value):
        causes = _split_csv(value)
        if not causes:
            return queryset
        return queryset.matching_causes(causes)

    def filter_mine(self, queryset, name, value):
        user = getattr(self.request, 'user', None)
        if not value or user is None or not user.is_authenticated:
            return queryset
        return queryset.filter(created_by=user)


# ==================== APPLICATION FILTERS ====================

class ApplicationFilter(django_filters.FilterSet):
    """Filter for applications."""
    status = django_filters.ChoiceFilter(choices=Application.ApplicationStatus.choices)
    opportunity = django_filters.UUIDFilter(field_name='opportunity_id')

    class Meta:
        model = Application
        fields = ['status', 'opportunity']


class AdminApprovalFilter(django_filters.FilterSet):
    """Filter for admin approval records."""
    status = django_filters.ChoiceFilter(choices=AdminApproval.ApprovalStatus.choices)
    opportunity = django_filters.UUIDFilter(field_name='opportunity_id')

    class Meta:
        model = AdminApproval
        fields = ['status', 'opportunity']
