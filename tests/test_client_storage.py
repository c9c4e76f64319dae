"""
Tests for the client key-value store.
"""

import pytest
from django.urls import reverse
from rest_framework import status

from client_storage.services import cache_key, client_store, is_valid_key
from conftest import VolunteerFactory


class TestClientStore:

    @pytest.mark.parametrize('key,valid', [
        ('theme', True),
        ('window.bounds:main_1-a', True),
        ('a' * 200, True),
        ('a' * 201, False),
        ('', False),
        ('has space', False),
        ('slash/key', False),
        (None, False),
    ])
    def test_key_rules(self, key, valid):
        assert is_valid_key(key) is valid

    def test_cache_key_layout(self):
        assert cache_key('42', 'theme') == 'client_storage:42:theme'

    def test_values_are_per_user(self):
        client_store.set('user-a', 'theme', 'dark')

        assert client_store.get('user-a', 'theme') == 'dark'
        assert client_store.get('user-b', 'theme') is None

    def test_remove(self):
        client_store.set('user-a', 'draft', {'title': 'x'})
        client_store.remove('user-a', 'draft')

        assert client_store.get('user-a', 'draft') is None


class TestStorageAPI:

    @pytest.mark.django_db
    def test_put_get_delete(self, volunteer_client):
        url = reverse('api_v1:client_storage:key', args=['layout'])

        put = volunteer_client.put(url, {'value': [1, 2, {'a': True}]}, format='json')
        assert put.status_code == status.HTTP_200_OK

        get = volunteer_client.get(url)
        assert get.data['data'] == {'key': 'layout', 'value': [1, 2, {'a': True}]}

        delete = volunteer_client.delete(url)
        assert delete.status_code == status.HTTP_204_NO_CONTENT
        assert volunteer_client.get(url).data['data']['value'] is None

    @pytest.mark.django_db
    def test_missing_key_is_null(self, volunteer_client):
        response = volunteer_client.get(reverse('api_v1:client_storage:key', args=['nothing']))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['value'] is None

    @pytest.mark.django_db
    def test_isolated_between_users(self, api_client, volunteer):
        url = reverse('api_v1:client_storage:key', args=['theme'])
        api_client.force_authenticate(user=volunteer)
        api_client.put(url, {'value': 'dark'}, format='json')

        api_client.force_authenticate(user=VolunteerFactory())
        assert api_client.get(url).data['data']['value'] is None

    @pytest.mark.django_db
    def test_put_requires_value(self, volunteer_client):
        url = reverse('api_v1:client_storage:key', args=['theme'])

        response = volunteer_client.put(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.django_db
    def test_invalid_key(self, volunteer_client):
        url = reverse('api_v1:client_storage:key', args=['bad key'])

        response = volunteer_client.get(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.django_db
    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('api_v1:client_storage:key', args=['theme']))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
