"""
Tests for shared core plumbing.

This module tests:
- Role permissions
- Image upload validation
- Storage paths
- The API exception handler
"""

import io
import re

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image
from rest_framework.test import APIRequestFactory

from api.exceptions import ResourceNotFoundError, volunteermatch_exception_handler
from conftest import AdminUserFactory, OrganizationFactory, UserFactory, VolunteerFactory
from core.permissions import IsOrganization, IsPlatformAdmin, IsVolunteer
from core.storage import build_opportunity_image_path, build_profile_picture_path, delete_stored_file
from core.validators import validate_image_upload


def _png(name='pic.png', size=(5, 5)):
    buffer = io.BytesIO()
    Image.new('RGB', size).save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


# =============================================================================
# PERMISSIONS
# =============================================================================

class TestRolePermissions:

    def _request(self, user):
        request = APIRequestFactory().get('/')
        request.user = user
        return request

    @pytest.mark.django_db
    def test_role_checks(self):
        volunteer = VolunteerFactory()
        organization = OrganizationFactory()

        assert IsVolunteer().has_permission(self._request(volunteer), None)
        assert not IsVolunteer().has_permission(self._request(organization), None)
        assert IsOrganization().has_permission(self._request(organization), None)
        assert not IsOrganization().has_permission(self._request(volunteer), None)

    @pytest.mark.django_db
    def test_platform_admin(self):
        assert IsPlatformAdmin().has_permission(self._request(AdminUserFactory()), None)
        assert IsPlatformAdmin().has_permission(
            self._request(UserFactory(is_superuser=True, is_staff=True)), None
        )
        assert not IsPlatformAdmin().has_permission(self._request(VolunteerFactory()), None)


# =============================================================================
# VALIDATORS
# =============================================================================

class TestImageValidation:

    def test_valid_png(self):
        assert validate_image_upload(_png()) == (True, None)

    def test_too_large(self, settings):
        settings.MAX_IMAGE_UPLOAD_SIZE = 10
        is_valid, error = validate_image_upload(_png())

        assert is_valid is False
        assert 'exceeds' in error

    def test_wrong_extension(self):
        is_valid, error = validate_image_upload(_png(name='pic.exe'))

        assert is_valid is False

    def test_garbage_content(self):
        fake = SimpleUploadedFile('pic.png', b'not really a png', content_type='image/png')

        assert validate_image_upload(fake) == (False, "Uploaded file is not a valid image")


# =============================================================================
# STORAGE
# =============================================================================

class TestStoragePaths:

    def test_opportunity_image_path(self):
        path = build_opportunity_image_path('org-1', 'opp-2', 'Photo.JPEG')

        assert re.fullmatch(r'opportunity_images/org-1/opp-2-\d{13}\.jpeg', path)

    def test_profile_picture_path(self):
        path = build_profile_picture_path('user-1', 'me.png')

        assert re.fullmatch(r'profile-pictures/user-1-[0-9a-f]{12}\.png', path)

    def test_delete_missing_file(self):
        assert delete_stored_file('profile-pictures/does-not-exist.png') is False
        assert delete_stored_file(None) is False

    def test_delete_backend_failure_is_logged(self, monkeypatch):
        def _fail(name):
            raise OSError("bucket unreachable")

        monkeypatch.setattr('core.storage.default_storage.exists', lambda name: True)
        monkeypatch.setattr('core.storage.default_storage.delete', _fail)

        assert delete_stored_file('opportunity_images/org/opp-1.png') is False


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

class TestExceptionHandler:

    def test_api_exception_envelope(self):
        response = volunteermatch_exception_handler(
            ResourceNotFoundError("Opportunity not found", resource_type='Opportunity', resource_id='abc'),
            {}
        )

        assert response.status_code == 404
        assert response.data['success'] is False
        assert response.data['message'] == "Opportunity not found"
        assert response.data['error_code'] == 'NOT_FOUND'
        assert response.data['meta']['resource_type'] == 'Opportunity'

    def test_django_validation_error_is_400(self):
        response = volunteermatch_exception_handler(
            DjangoValidationError("Only pending applications can be accepted."), {}
        )

        assert response.status_code == 400
        assert response.data['message'] == "Only pending applications can be accepted."

    def test_unhandled_error_is_500_envelope(self):
        response = volunteermatch_exception_handler(RuntimeError("boom"), {})

        assert response.status_code == 500
        assert response.data['success'] is False
        assert response.data['data'] is None
        assert response.data['error_code'] == 'INTERNAL_ERROR'
        assert response.data['message'] == "An unexpected error occurred."
        assert 'timestamp' in response.data['meta']
