"""
Ledger store behaviour: balances, history and the non-negative guard.
"""
import pytest
from django.db import IntegrityError, transaction
from django.db.models import Sum

from points.exceptions import InsufficientFunds, InvalidAmount
from points.ledger import LedgerStore
from points.models import AccountBalance, LedgerEntry


def entries_for(user):
    return list(LedgerEntry.objects.filter(user=user).order_by("id"))


@pytest.mark.django_db
def test_credit_and_debit_keep_totals_consistent(member, ledger):
    assert ledger.credit(member.pk, 500, "Monthly subscription") == 500
    assert ledger.debit(member.pk, 120, "Event registration: Gala", reference_id="event:1") == 380

    account = AccountBalance.objects.get(user=member)
    assert account.balance == 380
    assert account.total_earned == 500
    assert account.total_spent == 120
    assert LedgerEntry.objects.filter(user=member).aggregate(total=Sum("amount"))["total"] == account.balance

    earned, spent = entries_for(member)
    assert (earned.kind, earned.amount, earned.balance_after) == (LedgerEntry.KIND_EARNED, 500, 500)
    assert (spent.kind, spent.amount, spent.balance_after) == (LedgerEntry.KIND_SPENT, -120, 380)
    assert spent.reference_id == "event:1"


@pytest.mark.django_db
def test_debit_beyond_balance_is_refused_without_side_effects(member, ledger, fund):
    fund(member, 100)
    with pytest.raises(InsufficientFunds) as excinfo:
        ledger.debit(member.pk, 101, "Too much")
    assert excinfo.value.balance == 100
    assert excinfo.value.required == 101
    assert ledger.get_balance(member.pk) == 100
    assert len(entries_for(member)) == 1


@pytest.mark.django_db
@pytest.mark.parametrize("amount", [0, -5, 1.5, True, "10"])
def test_non_positive_or_non_integer_amounts_are_invalid(member, ledger, amount):
    with pytest.raises(InvalidAmount):
        ledger.credit(member.pk, amount, "bad")
    with pytest.raises(InvalidAmount):
        ledger.debit(member.pk, amount, "bad")
    assert not LedgerEntry.objects.filter(user=member).exists()


@pytest.mark.django_db
def test_unknown_user_has_zero_balance(ledger):
    assert ledger.get_balance(424242) == 0
    account = ledger.get_account(424242)
    assert (account.balance, account.total_earned, account.total_spent) == (0, 0, 0)


@pytest.mark.django_db
def test_positive_adjustment_counts_as_earned(member, club_admin, ledger):
    assert ledger.adjust(member.pk, 300, "goodwill", club_admin.pk) == 300
    entry = LedgerEntry.objects.get(user=member)
    assert entry.kind == LedgerEntry.KIND_ADJUSTED
    assert entry.description == "Admin adjustment: goodwill"
    assert entry.reference_id == str(club_admin.pk)
    assert AccountBalance.objects.get(user=member).total_earned == 300


@pytest.mark.django_db
def test_negative_adjustment_cannot_drive_balance_below_zero(member, club_admin, ledger, fund):
    fund(member, 40)
    with pytest.raises(InsufficientFunds):
        ledger.adjust(member.pk, -50, "correction", club_admin.pk)
    assert ledger.get_balance(member.pk) == 40

    assert ledger.adjust(member.pk, -40, "correction", club_admin.pk) == 0
    account = AccountBalance.objects.get(user=member)
    assert account.total_spent == 40
    assert account.balance == account.total_earned - account.total_spent


@pytest.mark.django_db
def test_zero_adjustment_is_invalid(member, club_admin, ledger):
    with pytest.raises(InvalidAmount):
        ledger.adjust(member.pk, 0, "noop", club_admin.pk)


@pytest.mark.django_db
def test_refund_reverses_spending(member, ledger, fund):
    fund(member, 200)
    ledger.debit(member.pk, 150, "Event registration: Gala")
    assert ledger.refund(member.pk, 150, "Refund for failed registration: Gala") == 200

    account = AccountBalance.objects.get(user=member)
    assert account.total_spent == 0
    assert entries_for(member)[-1].kind == LedgerEntry.KIND_ADJUSTED


@pytest.mark.django_db
def test_history_is_newest_first_and_limited(member, ledger):
    for amount in (10, 20, 30):
        ledger.credit(member.pk, amount, f"credit {amount}")
    history = ledger.history(member.pk, limit=2)
    assert [entry.amount for entry in history] == [30, 20]


@pytest.mark.django_db
def test_ledger_entries_refuse_mutation(member, ledger, fund):
    fund(member, 10)
    entry = LedgerEntry.objects.get(user=member)
    entry.amount = 1000
    with pytest.raises(ValueError):
        entry.save()
    with pytest.raises(ValueError):
        entry.delete()
    assert LedgerEntry.objects.get(pk=entry.pk).amount == 10


@pytest.mark.django_db
def test_storage_rejects_negative_balance_directly(member):
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            AccountBalance.objects.filter(user=member).update(balance=-1, total_spent=1)


@pytest.mark.django_db
def test_stale_balance_check_loses_to_conditional_update(member, ledger, fund):
    """Two debits of 60 against 100: both see enough points, only one lands."""
    fund(member, 100)
    observed_by_both = ledger.get_balance(member.pk)
    assert observed_by_both >= 60

    assert ledger.debit(member.pk, 60, "first") == 40
    with pytest.raises(InsufficientFunds) as excinfo:
        ledger.debit(member.pk, 60, "second")
    assert excinfo.value.balance == 40
    assert ledger.get_balance(member.pk) == 40
