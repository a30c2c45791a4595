"""
Common test fixtures for the API and service tests.

Provides users in the different membership states, JWT-authenticated
clients and a factory for events.
"""
from datetime import timedelta

import pytest
from django.contrib.auth.models import User
from django.test import Client
from django.utils import timezone

from events.models import Event
from points.ledger import LedgerStore
from users.auth_context import AuthContext
from users.membership import set_membership_status
from users.models import MemberProfile

PASSWORD = "pass12345"


def make_user(email, status=MemberProfile.STATUS_PENDING, role=MemberProfile.ROLE_USER, **extra):
    user = User.objects.create_user(username=email, email=email, password=PASSWORD, **extra)
    MemberProfile.objects.filter(user=user).update(role=role)
    if status != MemberProfile.STATUS_PENDING:
        set_membership_status(user.pk, status)
    return user


@pytest.fixture
def user(db):
    """A registered user who has not paid yet."""
    return make_user("u1@example.com")


@pytest.fixture
def member(db):
    """A user with an active membership."""
    return make_user("member@example.com", status=MemberProfile.STATUS_ACTIVE_MEMBER)


@pytest.fixture
def club_admin(db):
    return make_user("admin@example.com", status=MemberProfile.STATUS_ACTIVE_MEMBER, role=MemberProfile.ROLE_ADMIN)


@pytest.fixture
def ledger():
    return LedgerStore()


@pytest.fixture
def fund(ledger):
    """Credit a user with points: ``fund(user, 500)``."""
    def _fund(user, amount):
        return ledger.credit(user.pk, amount, "Test credit")
    return _fund


@pytest.fixture
def auth_for():
    def _auth(user):
        return AuthContext.from_user(user)
    return _auth


@pytest.fixture
def login(db):
    """Return a Django test client authenticated as the given user with a JWT."""
    def _login(user):
        client = Client()
        resp = client.post(
            "/api/auth/token/",
            {"email": user.email, "password": PASSWORD},
            content_type="application/json",
        )
        assert resp.status_code == 200, resp.content
        client.defaults["HTTP_AUTHORIZATION"] = f"Bearer {resp.json()['access']}"
        return client
    return _login


@pytest.fixture
def auth_client(login, member):
    """Client authenticated as the active `member`."""
    return login(member)


@pytest.fixture
def admin_client_jwt(login, club_admin):
    return login(club_admin)


@pytest.fixture
def event_factory(db):
    def _create(**kwargs):
        defaults = {
            "title": "Members' Gala",
            "location": "Club House",
            "event_date": timezone.now() + timedelta(days=7),
            "points_cost": 100,
            "max_attendees": 10,
        }
        defaults.update(kwargs)
        return Event.objects.create(**defaults)
    return _create
