"""
Celery tasks for the points app.

The reconciliation job walks every balance row and checks it against the
append-only history.  It never repairs anything; mismatches are logged for
an operator to investigate.
"""
from __future__ import annotations

import logging

from celery import shared_task
from django.db.models import Sum

from .models import AccountBalance, LedgerEntry

logger = logging.getLogger(__name__)


@shared_task
def reconcile_ledger_balances() -> list[dict]:
    """Return (and log) every account whose balance disagrees with its history."""
    totals = dict(
        LedgerEntry.objects.values("user_id")
        .annotate(total=Sum("amount"))
        .values_list("user_id", "total")
    )
    mismatches = []
    for account in AccountBalance.objects.all().iterator():
        ledger_total = totals.get(account.user_id) or 0
        if account.balance != ledger_total or account.balance != account.total_earned - account.total_spent:
            mismatch = {
                "user_id": account.user_id,
                "balance": account.balance,
                "ledger_total": ledger_total,
                "total_earned": account.total_earned,
                "total_spent": account.total_spent,
            }
            logger.error("Ledger mismatch: %s", mismatch)
            mismatches.append(mismatch)
    logger.info("Ledger reconciliation finished, %d mismatches", len(mismatches))
    return mismatches
