"""
Back-office operations.

Every change an administrator makes goes through `AdminAdjustmentService`
so that the change and its `AdminActionLog` row commit together or not at
all.
"""
import logging
from typing import List

from django.contrib.auth import get_user_model
from django.db import transaction

from points.ledger import LedgerStore
from users.exceptions import MemberNotFound
from users.membership import set_membership_status

from .models import AdminActionLog

logger = logging.getLogger(__name__)

TARGET_USER = "User"

User = get_user_model()


class AdminAdjustmentService:
    def __init__(self, ledger: LedgerStore = None):
        self.ledger = ledger or LedgerStore()

    def adjust(self, target_user_id: int, amount: int, reason: str, admin_id: int) -> int:
        """Apply a signed correction to a member's balance and audit it."""
        if not User.objects.filter(pk=target_user_id).exists():
            raise MemberNotFound()
        with transaction.atomic():
            new_balance = self.ledger.adjust(target_user_id, amount, reason, admin_id)
            AdminActionLog.objects.create(
                admin_id=admin_id,
                action=AdminActionLog.ACTION_ADJUST_POINTS,
                target_type=TARGET_USER,
                target_id=str(target_user_id),
                details={"amount": amount, "reason": reason, "resulting_balance": new_balance},
            )
        logger.info("Admin %s adjusted user %s by %+d (%s)", admin_id, target_user_id, amount, reason)
        return new_balance

    def set_membership_status(self, target_user_id: int, status: str, admin_id: int):
        with transaction.atomic():
            profile = set_membership_status(target_user_id, status)
            AdminActionLog.objects.create(
                admin_id=admin_id,
                action=AdminActionLog.ACTION_UPDATE_MEMBERSHIP,
                target_type=TARGET_USER,
                target_id=str(target_user_id),
                details={"membership_status": status},
            )
        logger.info("Admin %s set membership of user %s to %s", admin_id, target_user_id, status)
        return profile

    def recent_actions(self, limit: int = 100) -> List[AdminActionLog]:
        return list(AdminActionLog.objects.select_related("admin").order_by("-created_at", "-id")[:limit])
