"""
VolunteerMatch Test Configuration - pytest fixtures and factories

This module provides:
- pytest-django configuration
- factory_boy factories for users, profiles, opportunities, applications,
  messages and notifications
- Shared API client fixtures

RUNNING TESTS:
# Run all tests
pytest tests/ -v

# Run by module
pytest tests/test_opportunities.py -v
pytest tests/test_consumers.py -v
"""

import io

import factory
import pytest
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from factory.django import DjangoModelFactory
from PIL import Image
from rest_framework.test import APIClient


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for accounts.User (volunteer by default)."""

    class Meta:
        model = 'accounts.User'

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Faker('name')
    role = 'volunteer'
    profile_complete = True
    is_active = True
    password = 'testpass123'

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Create through the manager so the password is hashed."""
        manager = cls._get_manager(model_class)
        return manager.create_user(*args, **kwargs)


class VolunteerFactory(UserFactory):
    role = 'volunteer'


class OrganizationFactory(UserFactory):
    name = factory.Faker('company')
    role = 'organization'


class AdminUserFactory(UserFactory):
    """Platform admin (role admin, not a Django superuser)."""
    role = 'admin'
    is_staff = True


class VolunteerProfileFactory(DjangoModelFactory):

    class Meta:
        model = 'accounts.VolunteerProfile'

    user = factory.SubFactory(VolunteerFactory)
    skills = factory.LazyFunction(lambda: ['Teaching', 'First Aid'])
    interests = factory.LazyFunction(lambda: ['Education'])
    bio = factory.Faker('sentence')
    location = factory.Faker('city')
    availability = factory.LazyFunction(lambda: ['Weekends'])


class OrganizationProfileFactory(DjangoModelFactory):

    class Meta:
        model = 'accounts.OrganizationProfile'

    user = factory.SubFactory(OrganizationFactory)
    description = factory.Faker('paragraph')
    location = factory.Faker('city')
    website = factory.Faker('url')
    causes = factory.LazyFunction(lambda: ['Education'])


# ============================================================================
# OPPORTUNITY FACTORIES
# ============================================================================

class OpportunityFactory(DjangoModelFactory):

    class Meta:
        model = 'opportunities.Opportunity'

    title = factory.Sequence(lambda n: f"Opportunity {n}")
    description = factory.Faker('paragraph')
    location = factory.Faker('city')
    created_by = factory.SubFactory(OrganizationFactory)
    cause_type = 'Education'
    causes = factory.LazyFunction(lambda: ['Education'])
    status = 'active'


class ApplicationFactory(DjangoModelFactory):

    class Meta:
        model = 'opportunities.Application'

    opportunity = factory.SubFactory(OpportunityFactory)
    volunteer = factory.SubFactory(VolunteerFactory)
    status = 'pending'
    message = factory.Faker('sentence')


# ============================================================================
# MESSAGING / NOTIFICATION FACTORIES
# ============================================================================

class MessageFactory(DjangoModelFactory):

    class Meta:
        model = 'messaging.Message'

    sender = factory.SubFactory(VolunteerFactory)
    receiver = factory.SubFactory(OrganizationFactory)
    content = factory.Faker('sentence')
    read = False


class NotificationFactory(DjangoModelFactory):

    class Meta:
        model = 'notifications.Notification'

    user = factory.SubFactory(UserFactory)
    notification_type = 'system'
    message = factory.Faker('sentence')
    is_read = False


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache():
    """Throttle counters and the client store live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Return API client."""
    return APIClient()


@pytest.fixture
def user_factory(db):
    """Provide UserFactory for tests."""
    return UserFactory


@pytest.fixture
def volunteer(db):
    return VolunteerFactory()


@pytest.fixture
def organization(db):
    return OrganizationFactory()


@pytest.fixture
def platform_admin(db):
    return AdminUserFactory()


@pytest.fixture
def opportunity(db, organization):
    return OpportunityFactory(created_by=organization)


@pytest.fixture
def volunteer_client(api_client, volunteer):
    api_client.force_authenticate(user=volunteer)
    return api_client


@pytest.fixture
def organization_client(api_client, organization):
    api_client.force_authenticate(user=organization)
    return api_client


@pytest.fixture
def admin_client(api_client, platform_admin):
    api_client.force_authenticate(user=platform_admin)
    return api_client


@pytest.fixture
def image_file():
    """A small valid PNG upload."""
    def _make(name='test.png', size=(10, 10)):
        buffer = io.BytesIO()
        Image.new('RGB', size, color='red').save(buffer, format='PNG')
        return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')
    return _make


@pytest.fixture
def broken_notification_table(monkeypatch):
    """Make every Notification insert fail with a database error."""
    from notifications.models import Notification

    def _fail(*args, **kwargs):
        raise DatabaseError("relation \"notifications_notification\" is unavailable")

    monkeypatch.setattr(Notification.objects, 'create', _fail)
