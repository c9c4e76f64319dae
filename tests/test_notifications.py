"""
Tests for notifications.

This module tests:
- NotificationService and link resolution
- The notifications API
- The cleanup task
"""

from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from conftest import NotificationFactory, OpportunityFactory, OrganizationFactory, VolunteerFactory
from notifications.models import Notification
from notifications.services import get_notification_link, notification_service, send_notification
from notifications.tasks import cleanup_old_notifications


# =============================================================================
# SERVICE
# =============================================================================

class TestNotificationService:

    @pytest.mark.django_db
    def test_notify_persists_and_pushes(self, volunteer):
        result = notification_service.notify(volunteer, 'system', 'Welcome aboard')

        assert result.success is True
        notification = Notification.objects.get(pk=result.notification_id)
        assert notification.user == volunteer
        assert notification.is_read is False

    @pytest.mark.django_db
    def test_push_failure_keeps_row(self, volunteer, monkeypatch):
        monkeypatch.setattr('notifications.services.get_channel_layer', lambda: None)

        result = send_notification(volunteer, 'system', 'Still stored')

        assert result.success is False
        assert Notification.objects.filter(user=volunteer, message='Still stored').exists()

    @pytest.mark.django_db
    def test_insert_failure_is_reported_not_raised(self, volunteer, broken_notification_table):
        result = notification_service.notify(volunteer, 'system', 'Lost')

        assert result.success is False
        assert result.notification_id is None
        assert result.error_message
        assert not Notification.objects.exists()

    @pytest.mark.django_db
    def test_mark_all_as_read(self, volunteer):
        NotificationFactory.create_batch(3, user=volunteer)
        NotificationFactory()

        assert notification_service.mark_all_as_read(volunteer) == 3
        assert notification_service.unread_count(volunteer) == 0
        assert Notification.objects.filter(is_read=False).count() == 1

    @pytest.mark.django_db
    def test_mark_as_read_other_users_notification(self, volunteer):
        other = NotificationFactory()

        assert notification_service.mark_as_read(volunteer, other.id) is False
        other.refresh_from_db()
        assert other.is_read is False


class TestNotificationLinks:

    @pytest.mark.django_db
    def test_message_link(self):
        notification = NotificationFactory(notification_type='message')
        assert get_notification_link(notification) == '/messages'

    @pytest.mark.django_db
    def test_application_link_depends_on_viewer(self):
        org = OrganizationFactory()
        opportunity = OpportunityFactory(created_by=org)
        notification = NotificationFactory(
            user=org, notification_type='application', opportunity=opportunity
        )

        assert get_notification_link(notification, org) == '/dashboard/organization'
        assert get_notification_link(notification, VolunteerFactory()) == f'/opportunities/{opportunity.id}'

    @pytest.mark.django_db
    def test_decision_links(self):
        opportunity = OpportunityFactory()
        for ntype in ('application_accepted', 'application_rejected'):
            notification = NotificationFactory(notification_type=ntype, opportunity=opportunity)
            assert get_notification_link(notification) == f'/opportunities/{opportunity.id}'

    @pytest.mark.django_db
    def test_system_link(self):
        assert get_notification_link(NotificationFactory()) is None
        opportunity = OpportunityFactory()
        with_opportunity = NotificationFactory(opportunity=opportunity)
        assert get_notification_link(with_opportunity) == f'/opportunities/{opportunity.id}'


# =============================================================================
# API
# =============================================================================

class TestNotificationAPI:

    @pytest.mark.django_db
    def test_list_latest_with_unread_count(self, volunteer_client, volunteer, settings):
        settings.NOTIFICATION_FETCH_LIMIT = 2
        oldest = NotificationFactory(user=volunteer)
        NotificationFactory(user=volunteer, is_read=True)
        NotificationFactory(user=volunteer)
        Notification.objects.filter(pk=oldest.pk).update(created_at=timezone.now() - timedelta(days=1))
        NotificationFactory()

        response = volunteer_client.get(reverse('api_v1:notifications:notification-list'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['data']) == 2
        assert str(oldest.id) not in {str(n['id']) for n in response.data['data']}
        assert response.data['meta']['unread_count'] == 2
        assert 'link' in response.data['data'][0]

    @pytest.mark.django_db
    def test_unread_count(self, volunteer_client, volunteer):
        NotificationFactory.create_batch(2, user=volunteer)

        response = volunteer_client.get(reverse('api_v1:notifications:notification-unread-count'))

        assert response.data['data']['unread_count'] == 2

    @pytest.mark.django_db
    def test_mark_read(self, volunteer_client, volunteer):
        notification = NotificationFactory(user=volunteer)
        url = reverse('api_v1:notifications:notification-mark-read', args=[notification.id])

        response = volunteer_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        notification.refresh_from_db()
        assert notification.is_read is True
        assert notification.read_at is not None

    @pytest.mark.django_db
    def test_mark_read_other_user_404(self, volunteer_client):
        notification = NotificationFactory()
        url = reverse('api_v1:notifications:notification-mark-read', args=[notification.id])

        response = volunteer_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.django_db
    def test_mark_all_read(self, volunteer_client, volunteer):
        NotificationFactory.create_batch(3, user=volunteer)

        response = volunteer_client.post(reverse('api_v1:notifications:notification-mark-all-read'))

        assert response.data['data']['marked'] == 3
        assert not Notification.objects.filter(user=volunteer, is_read=False).exists()

    @pytest.mark.django_db
    def test_delete(self, volunteer_client, volunteer):
        notification = NotificationFactory(user=volunteer)
        url = reverse('api_v1:notifications:notification-detail', args=[notification.id])

        response = volunteer_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Notification.objects.filter(pk=notification.pk).exists()


# =============================================================================
# TASKS
# =============================================================================

class TestCleanupTask:

    @pytest.mark.django_db
    def test_deletes_only_old_read(self, settings):
        settings.NOTIFICATION_RETENTION_DAYS = 30
        old_read = NotificationFactory(is_read=True)
        old_unread = NotificationFactory()
        recent_read = NotificationFactory(is_read=True)
        Notification.objects.filter(pk__in=[old_read.pk, old_unread.pk]).update(
            created_at=timezone.now() - timedelta(days=45)
        )

        result = cleanup_old_notifications(batch_size=1)

        assert result == {'deleted': 1}
        remaining = set(Notification.objects.values_list('pk', flat=True))
        assert remaining == {old_unread.pk, recent_read.pk}
