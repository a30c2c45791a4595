"""
Redemption coordinator: trade points for a seat at an event.

One attempt walks a fixed sequence of steps::

    CHECK_MEMBERSHIP -> CHECK_EVENT_STATUS -> CHECK_NOT_ALREADY_REGISTERED
    -> CHECK_BALANCE -> RESERVE_CAPACITY -> DEBIT_POINTS
    -> GENERATE_CODE -> CREATE_REGISTRATION -> DONE

The checks before RESERVE_CAPACITY have no side effects.  From
RESERVE_CAPACITY on, every step that changed storage pushes an undo action;
when a later step fails the undo actions run in reverse order before the
original error is re-raised, so callers only ever see a clean failure.
Undo actions that themselves fail are logged at CRITICAL for manual
reconciliation.
"""
import enum
import logging
import time
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction

from points.exceptions import InsufficientFunds
from points.ledger import LedgerStore

from .capacity import CapacityTracker, SlotOutcome
from .codes import ReservationCodeGenerator
from .exceptions import (
    EXPECTED_FAILURES,
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
from .models import Event, EventRegistration

logger = logging.getLogger(__name__)


class Step(enum.Enum):
    CHECK_MEMBERSHIP = "check_membership"
    CHECK_EVENT_STATUS = "check_event_status"
    CHECK_NOT_ALREADY_REGISTERED = "check_not_already_registered"
    CHECK_BALANCE = "check_balance"
    RESERVE_CAPACITY = "reserve_capacity"
    DEBIT_POINTS = "debit_points"
    GENERATE_CODE = "generate_code"
    CREATE_REGISTRATION = "create_registration"
    DONE = "done"


@dataclass(frozen=True)
class RedemptionResult:
    registration_id: int
    reservation_code: str
    points_spent: int
    new_balance: int

    def as_dict(self) -> dict:
        return asdict(self)


class RedemptionCoordinator:
    def __init__(
        self,
        ledger: Optional[LedgerStore] = None,
        capacity: Optional[CapacityTracker] = None,
        codes: Optional[ReservationCodeGenerator] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        write_attempts: Optional[int] = None,
    ):
        self.ledger = ledger or LedgerStore()
        self.capacity = capacity or CapacityTracker()
        self.codes = codes or ReservationCodeGenerator()
        self.timeout = timeout if timeout is not None else settings.REDEMPTION_TIMEOUT_SECONDS
        self.clock = clock
        self.write_attempts = write_attempts or settings.REGISTRATION_WRITE_ATTEMPTS

    def redeem(self, auth, event_id) -> RedemptionResult:
        deadline = self.clock() + self.timeout
        user_id = auth.user_id

        # CHECK_MEMBERSHIP
        if not auth.is_active_member:
            logger.info("Redemption refused for user %s: membership %s", user_id, auth.membership_status)
            raise MembershipRequired()

        # CHECK_EVENT_STATUS
        event = Event.objects.filter(pk=event_id).first()
        if event is None:
            raise EventNotFound()
        if event.status != Event.STATUS_UPCOMING:
            logger.info("Redemption refused for event %s in status %s", event_id, event.status)
            raise EventNotAvailable()

        # CHECK_NOT_ALREADY_REGISTERED
        if EventRegistration.objects.filter(user_id=user_id, event_id=event.pk).exists():
            raise AlreadyRegistered()

        # CHECK_BALANCE
        cost = event.points_cost
        balance = self.ledger.get_balance(user_id)
        if balance < cost:
            logger.info("Redemption refused for user %s: balance %s < cost %s", user_id, balance, cost)
            raise InsufficientPoints(balance=balance, required=cost)

        # RESERVE_CAPACITY
        outcome = self.capacity.try_reserve_slot(event.pk)
        if outcome is SlotOutcome.FULL:
            raise EventFull()
        if outcome is SlotOutcome.NOT_FOUND:
            raise EventNotFound()

        undo: List[Tuple[Step, Callable[[], object]]] = [
            (Step.RESERVE_CAPACITY, lambda: self.capacity.release_slot(event.pk)),
        ]
        step = Step.DEBIT_POINTS
        try:
            self._check_deadline(deadline, step)
            if cost > 0:
                try:
                    new_balance = self.ledger.debit(
                        user_id,
                        cost,
                        f"Event registration: {event.title}",
                        reference_id=f"event:{event.pk}",
                    )
                except InsufficientFunds as exc:
                    raise InsufficientPoints(balance=exc.balance, required=cost) from exc
                undo.append((
                    Step.DEBIT_POINTS,
                    lambda: self.ledger.refund(
                        user_id,
                        cost,
                        f"Refund for failed registration: {event.title}",
                        reference_id=f"event:{event.pk}",
                    ),
                ))
            else:
                new_balance = self.ledger.get_balance(user_id)

            step = Step.GENERATE_CODE
            self._check_deadline(deadline, step)
            step = Step.CREATE_REGISTRATION
            registration = self._create_registration(user_id, event, cost, deadline)
        except Exception as exc:
            log = logger.info if isinstance(exc, EXPECTED_FAILURES) else logger.warning
            log(
                "Redemption failed at %s for user %s on event %s: %s",
                step.value, user_id, event.pk, exc,
            )
            self._compensate(undo, user_id, event.pk, cost)
            raise

        logger.info(
            "User %s redeemed %s points for event %s (%s)",
            user_id, cost, event.pk, registration.reservation_code,
        )
        return RedemptionResult(
            registration_id=registration.pk,
            reservation_code=registration.reservation_code,
            points_spent=cost,
            new_balance=new_balance,
        )

    def _create_registration(self, user_id, event, cost, deadline) -> EventRegistration:
        for attempt in range(1, self.write_attempts + 1):
            code = self.codes.generate()
            self._check_deadline(deadline, Step.CREATE_REGISTRATION)
            try:
                with transaction.atomic():
                    return EventRegistration.objects.create(
                        user_id=user_id,
                        event_id=event.pk,
                        points_spent=cost,
                        reservation_code=code,
                    )
            except IntegrityError:
                if EventRegistration.objects.filter(user_id=user_id, event_id=event.pk).exists():
                    raise RegistrationConflict()
                logger.warning("Reservation code %s taken at write time (attempt %d)", code, attempt)
        raise CodeGenerationExhausted()

    def _check_deadline(self, deadline: float, step: Step) -> None:
        if self.clock() > deadline:
            logger.warning("Redemption deadline passed before %s", step.value)
            raise RedemptionTimedOut()

    def _compensate(self, undo, user_id, event_id, cost) -> None:
        for step, action in reversed(undo):
            try:
                action()
            except Exception:
                logger.critical(
                    "RECONCILE: compensation for %s failed (user=%s event=%s amount=%s)",
                    step.value, user_id, event_id, cost,
                    exc_info=True,
                )
