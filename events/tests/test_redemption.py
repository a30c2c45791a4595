"""
Redemption coordinator: happy path, validation failures and compensation.

Races are reproduced deterministically by letting a pre-check see stale
state and asserting that the storage-level operation decides the outcome.
"""
import itertools
import logging
import re

import pytest

from events.capacity import CapacityTracker
from events.codes import ReservationCodeGenerator
from events.exceptions import (
    AlreadyRegistered,
    CodeGenerationExhausted,
    EventFull,
    EventNotAvailable,
    EventNotFound,
    InsufficientPoints,
    MembershipRequired,
    RedemptionTimedOut,
    RegistrationConflict,
)
from events.models import Event, EventRegistration
from events.redemption import RedemptionCoordinator
from points.ledger import LedgerStore
from points.models import AccountBalance, LedgerEntry


class StaleBalanceLedger(LedgerStore):
    """First balance read returns the value seen before a concurrent debit landed."""

    def __init__(self, stale_balance):
        self.stale_balance = stale_balance

    def get_balance(self, user_id):
        if self.stale_balance is not None:
            stale, self.stale_balance = self.stale_balance, None
            return stale
        return super().get_balance(user_id)


class FixedCodes:
    def __init__(self, *codes):
        self.codes = list(codes)

    def generate(self):
        return self.codes.pop(0)


class BrokenRelease(CapacityTracker):
    def release_slot(self, event_id):
        raise RuntimeError("database unavailable")


def assert_untouched(user, event, balance):
    event.refresh_from_db()
    assert event.current_attendees == 0
    assert not EventRegistration.objects.filter(user=user, event=event).exists()
    assert LedgerStore().get_balance(user.pk) == balance


@pytest.mark.django_db
def test_member_spends_entire_balance_on_last_seat(member, fund, auth_for, event_factory):
    fund(member, 500000)
    event = event_factory(points_cost=500000, max_attendees=1)

    result = RedemptionCoordinator().redeem(auth_for(member), event.pk)

    assert result.new_balance == 0
    assert result.points_spent == 500000
    assert re.match(r"^RES-[A-Z0-9]{8}$", result.reservation_code)
    event.refresh_from_db()
    assert event.current_attendees == 1
    registration = EventRegistration.objects.get(pk=result.registration_id)
    assert registration.reservation_code == result.reservation_code
    assert registration.points_spent == 500000
    spent = LedgerEntry.objects.filter(user=member, kind=LedgerEntry.KIND_SPENT).get()
    assert spent.amount == -500000
    assert spent.balance_after == 0


@pytest.mark.django_db
def test_second_redemption_for_same_event_is_refused(member, fund, auth_for, event_factory):
    fund(member, 500)
    event = event_factory(points_cost=100, max_attendees=5)
    coordinator = RedemptionCoordinator()
    coordinator.redeem(auth_for(member), event.pk)

    with pytest.raises(AlreadyRegistered):
        coordinator.redeem(auth_for(member), event.pk)
    event.refresh_from_db()
    assert event.current_attendees == 1
    assert LedgerStore().get_balance(member.pk) == 400


@pytest.mark.django_db
def test_inactive_member_is_refused(user, fund, auth_for, event_factory):
    fund(user, 500)
    event = event_factory()
    with pytest.raises(MembershipRequired):
        RedemptionCoordinator().redeem(auth_for(user), event.pk)
    assert_untouched(user, event, 500)


@pytest.mark.django_db
@pytest.mark.parametrize("status", [Event.STATUS_CANCELLED, Event.STATUS_COMPLETED, Event.STATUS_ONGOING])
def test_only_upcoming_events_can_be_redeemed(member, fund, auth_for, event_factory, status):
    fund(member, 500)
    event = event_factory(status=status)
    with pytest.raises(EventNotAvailable):
        RedemptionCoordinator().redeem(auth_for(member), event.pk)
    assert_untouched(member, event, 500)


@pytest.mark.django_db
def test_missing_event(member, auth_for):
    with pytest.raises(EventNotFound):
        RedemptionCoordinator().redeem(auth_for(member), 123456)


@pytest.mark.django_db
def test_insufficient_points_has_no_side_effects(member, fund, auth_for, event_factory):
    fund(member, 99)
    event = event_factory(points_cost=100)
    with pytest.raises(InsufficientPoints) as excinfo:
        RedemptionCoordinator().redeem(auth_for(member), event.pk)
    assert excinfo.value.balance == 99
    assert excinfo.value.required == 100
    assert excinfo.value.as_dict()["balance"] == 99
    assert_untouched(member, event, 99)


@pytest.mark.django_db
def test_last_seat_goes_to_exactly_one_member(member, user, fund, auth_for, event_factory):
    from users.membership import activate_membership

    activate_membership(user.pk)
    fund(member, 100)
    fund(user, 100)
    event = event_factory(points_cost=100, max_attendees=1)
    coordinator = RedemptionCoordinator()

    coordinator.redeem(auth_for(member), event.pk)
    with pytest.raises(EventFull):
        coordinator.redeem(auth_for(user), event.pk)

    event.refresh_from_db()
    assert event.current_attendees == 1
    assert EventRegistration.objects.filter(event=event).count() == 1
    assert LedgerStore().get_balance(user.pk) == 100


@pytest.mark.django_db
def test_debit_race_releases_the_reserved_seat(member, fund, auth_for, event_factory):
    fund(member, 100)
    first = event_factory(title="First", points_cost=60)
    second = event_factory(title="Second", points_cost=60)

    RedemptionCoordinator().redeem(auth_for(member), first.pk)
    # The second request read the balance before the first debit committed.
    stale = RedemptionCoordinator(ledger=StaleBalanceLedger(stale_balance=100))
    with pytest.raises(InsufficientPoints) as excinfo:
        stale.redeem(auth_for(member), second.pk)

    assert excinfo.value.balance == 40
    assert excinfo.value.required == 60
    assert_untouched(member, second, 40)


@pytest.mark.django_db
def test_code_exhaustion_refunds_points_and_releases_seat(member, fund, auth_for, event_factory):
    fund(member, 300)
    event = event_factory(points_cost=120)
    codes = ReservationCodeGenerator(max_attempts=2, exists=lambda code: True)

    with pytest.raises(CodeGenerationExhausted):
        RedemptionCoordinator(codes=codes).redeem(auth_for(member), event.pk)

    assert_untouched(member, event, 300)
    refund = LedgerEntry.objects.filter(user=member).order_by("-id").first()
    assert refund.kind == LedgerEntry.KIND_ADJUSTED
    assert refund.amount == 120
    account = AccountBalance.objects.get(user=member)
    assert account.total_spent == 0
    assert account.balance == account.total_earned - account.total_spent


@pytest.mark.django_db
def test_timeout_after_reservation_is_compensated(member, fund, auth_for, event_factory):
    fund(member, 300)
    event = event_factory(points_cost=100)
    ticks = itertools.chain([0.0, 1.0], itertools.repeat(60.0))
    coordinator = RedemptionCoordinator(timeout=5, clock=lambda: next(ticks))

    with pytest.raises(RedemptionTimedOut):
        coordinator.redeem(auth_for(member), event.pk)

    assert_untouched(member, event, 300)


@pytest.mark.django_db
def test_duplicate_caught_by_unique_constraint(member, fund, auth_for, event_factory):
    fund(member, 300)
    event = event_factory(points_cost=100)

    class ConcurrentWinner:
        """Lets the parallel request's registration land just before ours."""

        def generate(self):
            EventRegistration.objects.create(
                user=member, event=event, points_spent=100, reservation_code="RES-WINNER00"
            )
            return "RES-LOSER000"

    with pytest.raises(RegistrationConflict) as excinfo:
        RedemptionCoordinator(codes=ConcurrentWinner()).redeem(auth_for(member), event.pk)

    assert isinstance(excinfo.value, AlreadyRegistered)
    assert EventRegistration.objects.filter(user=member, event=event).count() == 1
    event.refresh_from_db()
    assert event.current_attendees == 0
    assert LedgerStore().get_balance(member.pk) == 300


@pytest.mark.django_db
def test_code_taken_at_write_time_is_regenerated(member, user, fund, auth_for, event_factory):
    fund(member, 300)
    other_event = event_factory(title="Other")
    EventRegistration.objects.create(user=user, event=other_event, points_spent=0, reservation_code="RES-AAAAAAAA")
    event = event_factory(points_cost=100)

    coordinator = RedemptionCoordinator(codes=FixedCodes("RES-AAAAAAAA", "RES-BBBBBBBB"))
    result = coordinator.redeem(auth_for(member), event.pk)

    assert result.reservation_code == "RES-BBBBBBBB"
    assert result.new_balance == 200


@pytest.mark.django_db
def test_failed_compensation_is_logged_for_reconciliation(member, fund, auth_for, event_factory, caplog):
    fund(member, 300)
    event = event_factory(points_cost=100)
    coordinator = RedemptionCoordinator(
        capacity=BrokenRelease(),
        codes=ReservationCodeGenerator(max_attempts=1, exists=lambda code: True),
    )

    with caplog.at_level(logging.CRITICAL, logger="events.redemption"):
        with pytest.raises(CodeGenerationExhausted):
            coordinator.redeem(auth_for(member), event.pk)

    critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
    assert len(critical) == 1
    assert "RECONCILE" in critical[0].getMessage()
    assert "reserve_capacity" in critical[0].getMessage()
    # The refund still ran; only the seat is left for an operator.
    assert LedgerStore().get_balance(member.pk) == 300
    event.refresh_from_db()
    assert event.current_attendees == 1


@pytest.mark.django_db
def test_free_event_skips_the_debit(member, fund, auth_for, event_factory):
    fund(member, 10)
    event = event_factory(points_cost=0)
    result = RedemptionCoordinator().redeem(auth_for(member), event.pk)
    assert result.points_spent == 0
    assert result.new_balance == 10
    assert not LedgerEntry.objects.filter(user=member, kind=LedgerEntry.KIND_SPENT).exists()


def redemption_failures(caplog):
    return [
        r for r in caplog.records
        if r.name == "events.redemption" and r.getMessage().startswith("Redemption failed")
    ]


@pytest.mark.django_db
def test_lost_balance_race_is_logged_as_routine(member, fund, auth_for, event_factory, caplog):
    fund(member, 40)
    event = event_factory(points_cost=60)
    coordinator = RedemptionCoordinator(ledger=StaleBalanceLedger(stale_balance=100))

    with caplog.at_level(logging.INFO, logger="events.redemption"):
        with pytest.raises(InsufficientPoints):
            coordinator.redeem(auth_for(member), event.pk)

    (record,) = redemption_failures(caplog)
    assert record.levelno == logging.INFO
    assert "debit_points" in record.getMessage()


@pytest.mark.django_db
def test_code_exhaustion_is_logged_as_warning(member, fund, auth_for, event_factory, caplog):
    fund(member, 300)
    event = event_factory(points_cost=100)
    codes = ReservationCodeGenerator(max_attempts=1, exists=lambda code: True)

    with caplog.at_level(logging.INFO, logger="events.redemption"):
        with pytest.raises(CodeGenerationExhausted):
            RedemptionCoordinator(codes=codes).redeem(auth_for(member), event.pk)

    (record,) = redemption_failures(caplog)
    assert record.levelno == logging.WARNING
    assert "create_registration" in record.getMessage()
