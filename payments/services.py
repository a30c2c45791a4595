"""
Subscription webhook handling.

`handle_subscription_event` is the single place where billing events touch
the rest of the system, and it only does so through the ledger store's
`credit` and the membership hooks.  Credits carry the processor payment id
as their reference, and the `Payment` row for that id is written in the
same transaction, so a redelivered webhook finds the payment and credits
nothing.
"""
import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from points.ledger import LedgerStore
from users.membership import activate_membership, deactivate_membership

from .models import Payment, Subscription, SubscriptionPlan, WebhookLog

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED_EVENTS = ("subscription.activated", "subscription.payment_succeeded")
SUBSCRIPTION_ENDED_EVENTS = ("subscription.cancelled", "subscription.expired")
PAYMENT_FAILED_EVENTS = ("subscription.payment_failed",)


def event_type_of(payload: dict) -> str:
    return payload.get("event") or payload.get("status") or ""


def resolve_plan(subscription: Subscription, payload: dict) -> Optional[SubscriptionPlan]:
    """Plan code from the payload metadata, else the subscription's plan, else a plan with the same price."""
    code = (payload.get("metadata") or {}).get("subscription_plan_code")
    if code:
        plan = SubscriptionPlan.objects.filter(code=code).first()
        if plan:
            return plan
    if subscription.plan_id:
        return subscription.plan
    return SubscriptionPlan.objects.filter(amount=subscription.amount).order_by("id").first()


def _payment_id(payload: dict) -> str:
    return str(payload.get("payment_id") or payload.get("id") or "")


def _record_successful_payment(subscription: Subscription, payload: dict) -> Optional[int]:
    payment_id = _payment_id(payload)
    if not payment_id:
        logger.warning("Payment webhook for %s carries no payment id", subscription.processor_subscription_id)
        return None

    next_payment = payload.get("next_payment_date")
    with transaction.atomic():
        Subscription.objects.filter(pk=subscription.pk).update(
            status=Subscription.STATUS_ACTIVE,
            next_payment_date=parse_datetime(next_payment) if next_payment else subscription.next_payment_date,
            updated_at=timezone.now(),
        )
        activate_membership(subscription.user_id)

        payment, created = Payment.objects.get_or_create(
            processor_payment_id=payment_id,
            defaults={
                "user_id": subscription.user_id,
                "subscription": subscription,
                "amount": payload.get("amount") or subscription.amount,
                "status": Payment.STATUS_SUCCEEDED,
                "payment_method": payload.get("payment_method") or "processor",
                "paid_at": timezone.now(),
            },
        )
        if not created:
            logger.info("Payment %s already recorded, no points credited", payment_id)
            return None

        plan = resolve_plan(subscription, payload)
        if plan is None:
            logger.error("No subscription plan matches subscription %s", subscription.processor_subscription_id)
            return None
        points = plan.points_per_payment
        if points <= 0:
            return None
        if plan.bonus_points:
            description = f"Monthly subscription: {plan.points_per_month:,} points + {plan.bonus_points:,} bonus"
        else:
            description = f"Monthly subscription: {plan.points_per_month:,} points"
        return LedgerStore().credit(subscription.user_id, points, description, reference_id=payment_id)


def _record_failed_payment(subscription: Subscription, payload: dict) -> None:
    payment_id = _payment_id(payload)
    if not payment_id:
        return
    Payment.objects.get_or_create(
        processor_payment_id=payment_id,
        defaults={
            "user_id": subscription.user_id,
            "subscription": subscription,
            "amount": payload.get("amount") or subscription.amount,
            "status": Payment.STATUS_FAILED,
            "payment_method": payload.get("payment_method") or "processor",
        },
    )


def _end_subscription(subscription: Subscription) -> None:
    with transaction.atomic():
        Subscription.objects.filter(pk=subscription.pk).update(
            status=Subscription.STATUS_CANCELLED,
            updated_at=timezone.now(),
        )
        deactivate_membership(subscription.user_id)


def handle_subscription_event(payload: dict) -> bool:
    """
    Apply one billing event.

    Returns True when the event changed something we track and False when
    it was ignored (unknown type or unknown subscription).
    """
    event_type = event_type_of(payload)
    subscription_id = payload.get("subscription_id")
    subscription = (
        Subscription.objects.select_related("plan").filter(processor_subscription_id=subscription_id).first()
        if subscription_id
        else None
    )
    if subscription is None:
        logger.warning("Ignoring %s for unknown subscription %s", event_type, subscription_id)
        return False

    if event_type in PAYMENT_SUCCEEDED_EVENTS:
        _record_successful_payment(subscription, payload)
    elif event_type in SUBSCRIPTION_ENDED_EVENTS:
        _end_subscription(subscription)
    elif event_type in PAYMENT_FAILED_EVENTS:
        _record_failed_payment(subscription, payload)
    else:
        logger.info("Ignoring unsupported billing event %s", event_type)
        return False
    logger.info("Processed %s for subscription %s", event_type, subscription_id)
    return True


def log_webhook(payload: dict) -> WebhookLog:
    return WebhookLog.objects.create(
        event_type=event_type_of(payload)[:100],
        processor_id=str(payload.get("id") or payload.get("subscription_id") or "")[:255],
        status=str(payload.get("status") or "")[:64],
        payload=payload,
    )


def process_webhook_log(log: WebhookLog) -> bool:
    """Run `handle_subscription_event` for a stored delivery and record the outcome on the log."""
    try:
        handled = handle_subscription_event(log.payload)
    except Exception as exc:
        logger.exception("Processing webhook %s failed", log.pk)
        WebhookLog.objects.filter(pk=log.pk).update(processed=True, processed_at=timezone.now(), error=str(exc))
        raise
    WebhookLog.objects.filter(pk=log.pk).update(processed=True, processed_at=timezone.now(), error="")
    return handled
