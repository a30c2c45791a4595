"""
Django admin for member profiles: status and role only change through the
audited back-office endpoints.
"""
import pytest
from django.contrib.auth.models import User

from users.models import MemberProfile


@pytest.mark.django_db
def test_profile_admin_keeps_status_and_role_read_only(client, user):
    superuser = User.objects.create_superuser("root", "root@example.com", "pass12345")
    client.force_login(superuser)
    profile = MemberProfile.objects.get(user=user)

    resp = client.post(
        f"/django-admin/users/memberprofile/{profile.pk}/change/",
        {
            "user": user.pk,
            "full_name": "Renamed Member",
            "phone": "",
            "address": "",
            "birth_date": "",
            "membership_status": MemberProfile.STATUS_ACTIVE_MEMBER,
            "role": MemberProfile.ROLE_ADMIN,
            "_save": "Save",
        },
    )

    assert resp.status_code == 302
    profile.refresh_from_db()
    assert profile.full_name == "Renamed Member"
    assert profile.membership_status == MemberProfile.STATUS_PENDING
    assert profile.role == MemberProfile.ROLE_USER


@pytest.mark.django_db
def test_users_cannot_be_deleted_from_admin(client, member):
    superuser = User.objects.create_superuser("root", "root@example.com", "pass12345")
    client.force_login(superuser)

    resp = client.post(f"/django-admin/auth/user/{member.pk}/delete/", {"post": "yes"})

    assert resp.status_code == 403
    assert User.objects.filter(pk=member.pk).exists()
