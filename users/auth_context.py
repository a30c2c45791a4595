"""
The capability handed to the points and redemption core.

Views build an `AuthContext` from the authenticated Django user once per
request; the core trusts it and never looks at the request again.
"""
from dataclasses import dataclass

from .models import MemberProfile


@dataclass(frozen=True)
class AuthContext:
    user_id: int
    role: str = MemberProfile.ROLE_USER
    membership_status: str = MemberProfile.STATUS_PENDING
    is_staff: bool = False

    @classmethod
    def from_user(cls, user) -> "AuthContext":
        profile = MemberProfile.objects.filter(user_id=user.pk).only("role", "membership_status").first()
        role = profile.role if profile else MemberProfile.ROLE_USER
        membership_status = profile.membership_status if profile else MemberProfile.STATUS_PENDING
        return cls(
            user_id=user.pk,
            role=role,
            membership_status=membership_status,
            is_staff=bool(user.is_staff or user.is_superuser),
        )

    @property
    def is_active_member(self) -> bool:
        return self.membership_status == MemberProfile.STATUS_ACTIVE_MEMBER

    @property
    def is_admin(self) -> bool:
        return self.is_staff or self.role in MemberProfile.ADMIN_ROLES
