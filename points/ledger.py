"""
Points ledger store.

Single source of truth for a member's point balance.  Every mutation is one
conditional UPDATE on the balance row plus one INSERT into the history,
wrapped in a transaction; application code never reads a balance and
writes it back.  The UPDATE's WHERE clause carries the guard
(``balance >= amount``) so concurrent debits serialize on the row lock and
the loser sees zero affected rows instead of a negative balance.
"""
import logging
from typing import List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .exceptions import InsufficientFunds, InvalidAmount
from .models import AccountBalance, LedgerEntry

logger = logging.getLogger(__name__)


def _is_whole_number(amount) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool)


def _require_positive(amount) -> None:
    if not _is_whole_number(amount) or amount <= 0:
        raise InvalidAmount()


class LedgerStore:
    """Balances and their append-only history."""

    def open_account(self, user_id: int) -> AccountBalance:
        account, _ = AccountBalance.objects.get_or_create(user_id=user_id)
        return account

    def get_balance(self, user_id: int) -> int:
        """Current balance; users without a balance row have zero points."""
        balance = (
            AccountBalance.objects.filter(user_id=user_id)
            .values_list("balance", flat=True)
            .first()
        )
        return balance or 0

    def get_account(self, user_id: int) -> AccountBalance:
        account = AccountBalance.objects.filter(user_id=user_id).first()
        if account is None:
            # Unsaved placeholder so callers can render zeros.
            account = AccountBalance(user_id=user_id, last_updated=None)
        return account

    def history(self, user_id: int, limit: Optional[int] = None) -> List[LedgerEntry]:
        limit = limit or settings.POINTS_HISTORY_DEFAULT_LIMIT
        return list(LedgerEntry.objects.filter(user_id=user_id).order_by("-created_at", "-id")[:limit])

    def credit(self, user_id: int, amount: int, description: str, reference_id: Optional[str] = None) -> int:
        _require_positive(amount)
        with transaction.atomic():
            self.open_account(user_id)
            new_balance = self._apply(
                user_id,
                balance=F("balance") + amount,
                total_earned=F("total_earned") + amount,
            )
            self._record(user_id, amount, LedgerEntry.KIND_EARNED, description, reference_id, new_balance)
        logger.info("Credited %s points to user %s (ref=%s), balance now %s", amount, user_id, reference_id, new_balance)
        return new_balance

    def debit(self, user_id: int, amount: int, description: str, reference_id: Optional[str] = None) -> int:
        _require_positive(amount)
        with transaction.atomic():
            new_balance = self._apply(
                user_id,
                min_balance=amount,
                balance=F("balance") - amount,
                total_spent=F("total_spent") + amount,
            )
            if new_balance is None:
                balance = self.get_balance(user_id)
                logger.info("Debit of %s points refused for user %s (balance %s)", amount, user_id, balance)
                raise InsufficientFunds(balance=balance, required=amount)
            self._record(user_id, -amount, LedgerEntry.KIND_SPENT, description, reference_id, new_balance)
        logger.info("Debited %s points from user %s (ref=%s), balance now %s", amount, user_id, reference_id, new_balance)
        return new_balance

    def adjust(self, user_id: int, amount: int, description: str, admin_id) -> int:
        """
        Signed manual correction.

        Positive adjustments count towards total_earned, negative ones towards
        total_spent.  A negative adjustment larger than the balance is
        refused with `InsufficientFunds`; balances never go below zero.
        """
        if not _is_whole_number(amount) or amount == 0:
            raise InvalidAmount("Adjustment must be a non-zero whole number of points")
        with transaction.atomic():
            self.open_account(user_id)
            if amount > 0:
                new_balance = self._apply(
                    user_id,
                    balance=F("balance") + amount,
                    total_earned=F("total_earned") + amount,
                )
            else:
                new_balance = self._apply(
                    user_id,
                    min_balance=-amount,
                    balance=F("balance") + amount,
                    total_spent=F("total_spent") - amount,
                )
                if new_balance is None:
                    raise InsufficientFunds(
                        balance=self.get_balance(user_id),
                        required=-amount,
                        message="Adjustment would make the balance negative",
                    )
            self._record(
                user_id,
                amount,
                LedgerEntry.KIND_ADJUSTED,
                f"Admin adjustment: {description}",
                str(admin_id),
                new_balance,
            )
        logger.info("Adjusted user %s by %+d points (admin=%s), balance now %s", user_id, amount, admin_id, new_balance)
        return new_balance

    def refund(self, user_id: int, amount: int, description: str, reference_id: Optional[str] = None) -> int:
        """Give back points from an earlier debit; recorded as ADJUSTED."""
        _require_positive(amount)
        with transaction.atomic():
            self.open_account(user_id)
            new_balance = self._apply(
                user_id,
                balance=F("balance") + amount,
                total_spent=F("total_spent") - amount,
            )
            self._record(user_id, amount, LedgerEntry.KIND_ADJUSTED, description, reference_id, new_balance)
        logger.info("Refunded %s points to user %s (ref=%s), balance now %s", amount, user_id, reference_id, new_balance)
        return new_balance

    def _apply(self, user_id: int, min_balance: int = 0, **changes) -> Optional[int]:
        # The UPDATE holds the row lock until commit, so the read below sees our write.
        updated = AccountBalance.objects.filter(user_id=user_id, balance__gte=min_balance).update(
            last_updated=timezone.now(),
            **changes,
        )
        if not updated:
            return None
        return AccountBalance.objects.filter(user_id=user_id).values_list("balance", flat=True).get()

    def _record(self, user_id, amount, kind, description, reference_id, balance_after) -> LedgerEntry:
        return LedgerEntry.objects.create(
            user_id=user_id,
            amount=amount,
            kind=kind,
            description=description[:500],
            reference_id=reference_id,
            balance_after=balance_after,
        )
