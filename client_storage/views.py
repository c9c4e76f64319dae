"""
Client storage REST endpoints.

GET    /storage/{key}/    value or null
PUT    /storage/{key}/    {"value": <json>}
DELETE /storage/{key}/
"""

from drf_spectacular.utils import extend_schema
from rest_framework import permissions, serializers, views

from api.base import APIResponse
from api.exceptions import InvalidInputError

from .services import client_store


class StorageValueSerializer(serializers.Serializer):
    value = serializers.JSONField(allow_null=True)


class StorageKeyView(views.APIView):
    """Read, write or remove one key in the current user's store."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, key):
        return APIResponse.success(data={'key': key, 'value': client_store.get(request.user.pk, key)})

    @extend_schema(request=StorageValueSerializer)
    def put(self, request, key):
        if 'value' not in request.data:
            raise InvalidInputError("value is required")
        value = client_store.set(request.user.pk, key, request.data['value'])
        return APIResponse.updated(data={'key': key, 'value': value}, message="Saved")

    def delete(self, request, key):
        client_store.remove(request.user.pk, key)
        return APIResponse.deleted()
