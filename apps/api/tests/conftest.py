"""
Global test fixtures for pytest.

Provides reusable fixtures for API and service testing:
- Users by role, system actors, authenticated API clients
- Slot and consultation request factories
"""
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.authz.models import RoleChoices, User, assign_role
from apps.authz.system_actors import SMS_SERVICE, get_system_actor
from apps.consultations.services import create_consultation_request
from apps.scheduling.models import Slot


def create_user_with_role(email, role_name, **extra_fields):
    """Helper function to create user with role"""
    user = User.objects.create_user(
        email=email,
        password='test123',
        is_active=True,
        **extra_fields
    )
    assign_role(user, role_name)
    return user


# ============================================================================
# Users
# ============================================================================

@pytest.fixture
def admin_user(db):
    """Admin without availability (never assigned consultations)."""
    return create_user_with_role(
        'admin@test.com',
        RoleChoices.ADMIN,
        name='Admin',
        is_staff=True,
        can_have_availability=False,
    )


@pytest.fixture
def clinician(db):
    return create_user_with_role('clinician@test.com', RoleChoices.CLINICIAN, name='Dr. A')


@pytest.fixture
def other_clinician(db):
    return create_user_with_role('other@test.com', RoleChoices.CLINICIAN, name='Dr. B')


@pytest.fixture
def sms_actor(db):
    return get_system_actor(SMS_SERVICE)


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def clinician_client(clinician):
    client = APIClient()
    client.force_authenticate(user=clinician)
    return client


# ============================================================================
# Domain objects
# ============================================================================

@pytest.fixture
def now():
    return timezone.now().replace(microsecond=0)


@pytest.fixture
def make_slot(db):
    """Create a slot owned by ``owner`` starting at ``start``."""
    def _make_slot(owner, start, minutes=30):
        return Slot.objects.create(
            owner=owner,
            start_datetime=start,
            end_datetime=start + timedelta(minutes=minutes),
            audit_actor=owner,
        )
    return _make_slot


@pytest.fixture
def make_request(sms_actor):
    """Create a pending consultation request attributed to the SMS service."""
    counter = {'n': 0}

    def _make_request(description='Fever since yesterday'):
        counter['n'] += 1
        return create_consultation_request(
            phone_number=f'+24381000{counter["n"]:04d}',
            description=description,
            actor=sms_actor,
        )
    return _make_request
