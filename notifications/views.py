"""
Notification API views.

GET    /notifications/                  latest notifications + unread count
GET    /notifications/unread-count/     unread count only
POST   /notifications/{id}/mark-read/   mark one read
POST   /notifications/mark-all-read/    mark all read
DELETE /notifications/{id}/             delete one
"""

from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action

from api.base import APIResponse

from .models import Notification
from .serializers import NotificationSerializer
from .services import notification_service


class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet
):
    """
    The current user's notifications.

    The list is not paginated: it returns the most recent
    NOTIFICATION_FETCH_LIMIT entries, newest first.
    """
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        return Notification.objects.for_user(self.request.user).select_related('opportunity')

    def list(self, request, *args, **kwargs):
        notifications = notification_service.latest_for(request.user)
        serializer = self.get_serializer(notifications, many=True)
        return APIResponse.success(
            data=serializer.data,
            meta={'unread_count': notification_service.unread_count(request.user)}
        )

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return APIResponse.success(
            data={'unread_count': notification_service.unread_count(request.user)}
        )

    @action(detail=True, methods=['post'], url_path='mark-read')
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_as_read()
        return APIResponse.success(
            data=self.get_serializer(notification).data,
            meta={'unread_count': notification_service.unread_count(request.user)}
        )

    @action(detail=False, methods=['post'], url_path='mark-all-read')
    def mark_all_read(self, request):
        count = notification_service.mark_all_as_read(request.user)
        return APIResponse.success(
            data={'marked': count, 'unread_count': 0},
            message=f"{count} notifications marked as read"
        )
