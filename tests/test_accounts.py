"""
Tests for the accounts API.

This module tests:
- Registration and login
- Role profile upserts and the current user
- Email/password changes and account deletion
- Password reset
- Profile pictures and public profiles
"""

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core import mail
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode
from rest_framework import status

from conftest import OpportunityFactory, VolunteerProfileFactory

User = get_user_model()

STRONG_PASSWORD = 'Harbor!Lantern42'


# =============================================================================
# REGISTRATION / LOGIN
# =============================================================================

class TestRegistration:

    @pytest.mark.django_db
    def test_register_volunteer(self, api_client):
        url = reverse('api_v1:accounts:register')
        response = api_client.post(url, {
            'email': 'Jane@Example.com',
            'name': 'Jane',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
            'role': 'volunteer',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        assert response.data['message'] == "Welcome, Jane! Please complete your profile."
        assert response.data['data']['tokens']['access']
        assert response.data['data']['user']['profile_complete'] is False

        user = User.objects.get(email='jane@example.com')
        assert user.role == 'volunteer'
        assert user.check_password(STRONG_PASSWORD)

    @pytest.mark.django_db
    def test_register_password_mismatch(self, api_client):
        url = reverse('api_v1:accounts:register')
        response = api_client.post(url, {
            'email': 'jane@example.com',
            'name': 'Jane',
            'password': STRONG_PASSWORD,
            'password_confirm': 'something-else',
            'role': 'volunteer',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error_code'] == 'VALIDATION_ERROR'
        fields = [e['field'] for e in response.data['errors']]
        assert 'password_confirm' in fields

    @pytest.mark.django_db
    def test_register_duplicate_email(self, api_client, volunteer):
        url = reverse('api_v1:accounts:register')
        response = api_client.post(url, {
            'email': volunteer.email.upper(),
            'name': 'Copy',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
            'role': 'organization',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.django_db
    def test_cannot_self_register_as_admin(self, api_client):
        url = reverse('api_v1:accounts:register')
        response = api_client.post(url, {
            'email': 'boss@example.com',
            'name': 'Boss',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
            'role': 'admin',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not User.objects.filter(email='boss@example.com').exists()


class TestLogin:

    @pytest.mark.django_db
    def test_login_success(self, api_client, volunteer):
        url = reverse('api_v1:accounts:login')
        response = api_client.post(url, {
            'email': volunteer.email,
            'password': 'testpass123',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['tokens']['refresh']
        assert response.data['data']['user']['email'] == volunteer.email

    @pytest.mark.django_db
    def test_login_wrong_password(self, api_client, volunteer):
        url = reverse('api_v1:accounts:login')
        response = api_client.post(url, {
            'email': volunteer.email,
            'password': 'wrong',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['errors'][0]['messages'] == ["Invalid email or password."]

    @pytest.mark.django_db
    def test_logout_blacklists_refresh(self, api_client, volunteer):
        login = api_client.post(reverse('api_v1:accounts:login'), {
            'email': volunteer.email,
            'password': 'testpass123',
        }, format='json')
        refresh = login.data['data']['tokens']['refresh']

        api_client.force_authenticate(user=volunteer)
        response = api_client.post(reverse('api_v1:accounts:logout'), {'refresh': refresh}, format='json')
        assert response.status_code == status.HTTP_200_OK

        api_client.force_authenticate(user=None)
        refreshed = api_client.post(reverse('api_v1:token_refresh'), {'refresh': refresh}, format='json')
        assert refreshed.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# PROFILES
# =============================================================================

class TestProfiles:

    @pytest.mark.django_db
    def test_me_hides_profile_until_complete(self, api_client, user_factory):
        user = user_factory(profile_complete=False)
        api_client.force_authenticate(user=user)

        response = api_client.get(reverse('api_v1:accounts:me'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['volunteer_profile'] is None

    @pytest.mark.django_db
    def test_volunteer_profile_upsert_marks_complete(self, api_client, user_factory):
        user = user_factory(profile_complete=False)
        api_client.force_authenticate(user=user)

        response = api_client.put(reverse('api_v1:accounts:volunteer-profile'), {
            'skills': [' Teaching ', '', 'Cooking'],
            'interests': ['Education'],
            'bio': 'Hi',
            'location': 'Austin',
            'availability': ['Weekends'],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['profile']['skills'] == ['Teaching', 'Cooking']
        assert response.data['data']['user']['profile_complete'] is True
        user.refresh_from_db()
        assert user.profile_complete is True
        assert user.volunteer_profile.location == 'Austin'

    @pytest.mark.django_db
    def test_volunteer_profile_update_keeps_single_row(self, volunteer_client, volunteer):
        VolunteerProfileFactory(user=volunteer)
        url = reverse('api_v1:accounts:volunteer-profile')

        response = volunteer_client.patch(url, {'bio': 'Updated'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        volunteer.refresh_from_db()
        assert volunteer.volunteer_profile.bio == 'Updated'

    @pytest.mark.django_db
    def test_organization_cannot_save_volunteer_profile(self, organization_client):
        response = organization_client.put(reverse('api_v1:accounts:volunteer-profile'), {
            'skills': ['x'],
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.django_db
    def test_organization_profile_upsert(self, organization_client, organization):
        response = organization_client.put(reverse('api_v1:accounts:organization-profile'), {
            'description': 'We plant trees',
            'location': 'Denver',
            'website': 'https://trees.example.org',
            'causes': ['Environment', ' '],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        organization.refresh_from_db()
        assert organization.organization_profile.causes == ['Environment']

    @pytest.mark.django_db
    def test_update_name(self, volunteer_client):
        response = volunteer_client.patch(reverse('api_v1:accounts:me'), {'name': '  Sam  '}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['name'] == 'Sam'

    @pytest.mark.django_db
    def test_public_profile(self, volunteer_client, organization):
        url = reverse('api_v1:accounts:user-detail', args=[organization.pk])
        response = volunteer_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['role'] == 'organization'
        assert 'email' not in response.data


# =============================================================================
# ACCOUNT MANAGEMENT
# =============================================================================

class TestAccountManagement:

    @pytest.mark.django_db
    def test_update_email_requires_password(self, volunteer_client, volunteer):
        url = reverse('api_v1:accounts:email-update')
        response = volunteer_client.post(url, {
            'new_email': 'new@example.com',
            'password': 'nope',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['errors'][0]['messages'] == ["Incorrect password"]
        volunteer.refresh_from_db()
        assert volunteer.email != 'new@example.com'

    @pytest.mark.django_db
    def test_update_email(self, volunteer_client, volunteer):
        url = reverse('api_v1:accounts:email-update')
        response = volunteer_client.post(url, {
            'new_email': 'New@Example.com',
            'password': 'testpass123',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        volunteer.refresh_from_db()
        assert volunteer.email == 'new@example.com'

    @pytest.mark.django_db
    def test_change_password(self, volunteer_client, volunteer):
        url = reverse('api_v1:accounts:password-change')
        response = volunteer_client.post(url, {
            'current_password': 'testpass123',
            'new_password': STRONG_PASSWORD,
            'new_password_confirm': STRONG_PASSWORD,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        volunteer.refresh_from_db()
        assert volunteer.check_password(STRONG_PASSWORD)

    @pytest.mark.django_db
    def test_change_password_wrong_current(self, volunteer_client):
        url = reverse('api_v1:accounts:password-change')
        response = volunteer_client.post(url, {
            'current_password': 'wrong',
            'new_password': STRONG_PASSWORD,
            'new_password_confirm': STRONG_PASSWORD,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.django_db
    def test_delete_account_cascades(self, organization_client, organization):
        OpportunityFactory(created_by=organization)

        response = organization_client.post(
            reverse('api_v1:accounts:account-delete'),
            {'password': 'testpass123'},
            format='json'
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not User.objects.filter(pk=organization.pk).exists()
        from opportunities.models import Opportunity
        assert not Opportunity.objects.filter(created_by_id=organization.pk).exists()


# =============================================================================
# PASSWORD RESET
# =============================================================================

class TestPasswordReset:

    @pytest.mark.django_db
    def test_request_sends_email(self, api_client, volunteer):
        response = api_client.post(
            reverse('api_v1:accounts:password-reset'),
            {'email': volunteer.email},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(mail.outbox) == 1
        assert volunteer.email in mail.outbox[0].to
        assert 'reset-password?uid=' in mail.outbox[0].body

    @pytest.mark.django_db
    def test_request_unknown_email_still_ok(self, api_client):
        response = api_client.post(
            reverse('api_v1:accounts:password-reset'),
            {'email': 'nobody@example.com'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(mail.outbox) == 0

    @pytest.mark.django_db
    def test_request_is_throttled_for_signed_in_users(self, volunteer_client, volunteer):
        url = reverse('api_v1:accounts:password-reset')

        for _ in range(5):
            response = volunteer_client.post(url, {'email': volunteer.email}, format='json')
            assert response.status_code == status.HTTP_200_OK

        response = volunteer_client.post(url, {'email': volunteer.email}, format='json')
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    @pytest.mark.django_db
    def test_confirm_sets_password(self, api_client, volunteer):
        uid = urlsafe_base64_encode(force_bytes(volunteer.pk))
        token = default_token_generator.make_token(volunteer)

        response = api_client.post(reverse('api_v1:accounts:password-reset-confirm'), {
            'uid': uid,
            'token': token,
            'new_password': STRONG_PASSWORD,
            'new_password_confirm': STRONG_PASSWORD,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        volunteer.refresh_from_db()
        assert volunteer.check_password(STRONG_PASSWORD)

    @pytest.mark.django_db
    def test_confirm_bad_token(self, api_client, volunteer):
        uid = urlsafe_base64_encode(force_bytes(volunteer.pk))

        response = api_client.post(reverse('api_v1:accounts:password-reset-confirm'), {
            'uid': uid,
            'token': 'bad-token',
            'new_password': STRONG_PASSWORD,
            'new_password_confirm': STRONG_PASSWORD,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# PROFILE PICTURE
# =============================================================================

class TestProfilePicture:

    @pytest.mark.django_db
    def test_upload_and_remove(self, volunteer_client, volunteer, image_file):
        url = reverse('api_v1:accounts:profile-picture')
        response = volunteer_client.post(url, {'image': image_file()}, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        assert 'profile-pictures/' in response.data['data']['profile_picture_url']

        response = volunteer_client.delete(url)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        volunteer.refresh_from_db()
        assert not volunteer.profile_picture

    @pytest.mark.django_db
    def test_rejects_non_image(self, volunteer_client):
        from django.core.files.uploadedfile import SimpleUploadedFile

        url = reverse('api_v1:accounts:profile-picture')
        bogus = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        response = volunteer_client.post(url, {'image': bogus}, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
