"""
Billing webhook ingestion: token check, points credit, idempotency and
subscription lifecycle.
"""
import pytest

from payments.models import Payment, Subscription, SubscriptionPlan, WebhookLog
from payments.services import handle_subscription_event
from points.ledger import LedgerStore
from points.models import LedgerEntry
from users.models import MemberProfile

TOKEN = "test-webhook-token"


@pytest.fixture
def plan(db):
    return SubscriptionPlan.objects.create(
        code="gold",
        name="Gold",
        amount=500000,
        points_per_month=500000,
        bonus_points=50000,
    )


@pytest.fixture
def subscription(user, plan):
    return Subscription.objects.create(
        user=user,
        plan=plan,
        processor_subscription_id="sub_123",
        amount=plan.amount,
    )


def post_webhook(client, payload, token=TOKEN):
    return client.post(
        "/api/payments/webhook/",
        payload,
        content_type="application/json",
        HTTP_X_CALLBACK_TOKEN=token,
    )


def payment_event(event="subscription.payment_succeeded", payment_id="pay_1", **extra):
    return {
        "event": event,
        "id": "evt_1",
        "subscription_id": "sub_123",
        "payment_id": payment_id,
        "amount": 500000,
        "next_payment_date": "2026-11-19T00:00:00Z",
        **extra,
    }


@pytest.mark.django_db
def test_wrong_token_is_rejected(client, subscription):
    resp = post_webhook(client, payment_event(), token="nope")
    assert resp.status_code == 401
    assert not WebhookLog.objects.exists()
    assert LedgerStore().get_balance(subscription.user_id) == 0


@pytest.mark.django_db
def test_successful_payment_activates_and_credits(client, subscription):
    resp = post_webhook(client, payment_event())
    assert resp.status_code == 200

    user_id = subscription.user_id
    assert MemberProfile.objects.get(user_id=user_id).membership_status == MemberProfile.STATUS_ACTIVE_MEMBER
    subscription.refresh_from_db()
    assert subscription.status == Subscription.STATUS_ACTIVE
    assert subscription.next_payment_date is not None

    payment = Payment.objects.get(processor_payment_id="pay_1")
    assert payment.status == Payment.STATUS_SUCCEEDED
    assert payment.paid_at is not None

    assert LedgerStore().get_balance(user_id) == 550000
    entry = LedgerEntry.objects.get(user_id=user_id)
    assert entry.kind == LedgerEntry.KIND_EARNED
    assert entry.reference_id == "pay_1"
    assert entry.description == "Monthly subscription: 500,000 points + 50,000 bonus"

    log = WebhookLog.objects.get()
    assert log.processed
    assert log.error == ""
    assert log.event_type == "subscription.payment_succeeded"


@pytest.mark.django_db
def test_redelivered_payment_credits_once(client, subscription):
    post_webhook(client, payment_event())
    post_webhook(client, payment_event())

    assert Payment.objects.filter(processor_payment_id="pay_1").count() == 1
    assert LedgerStore().get_balance(subscription.user_id) == 550000
    assert WebhookLog.objects.count() == 2


@pytest.mark.django_db
def test_each_new_payment_credits_again(subscription):
    handle_subscription_event(payment_event(payment_id="pay_1"))
    handle_subscription_event(payment_event(payment_id="pay_2"))
    assert LedgerStore().get_balance(subscription.user_id) == 1100000


@pytest.mark.django_db
def test_plan_code_in_metadata_wins(subscription):
    SubscriptionPlan.objects.create(code="silver", name="Silver", amount=200000, points_per_month=200000)
    handle_subscription_event(payment_event(metadata={"subscription_plan_code": "silver"}))
    assert LedgerStore().get_balance(subscription.user_id) == 200000


@pytest.mark.django_db
@pytest.mark.parametrize("event", ["subscription.cancelled", "subscription.expired"])
def test_ending_subscription_demotes_to_guest(subscription, event):
    handle_subscription_event(payment_event())
    handle_subscription_event({"event": event, "subscription_id": "sub_123"})

    subscription.refresh_from_db()
    assert subscription.status == Subscription.STATUS_CANCELLED
    profile = MemberProfile.objects.get(user_id=subscription.user_id)
    assert profile.membership_status == MemberProfile.STATUS_GUEST
    # Points already earned stay with the member.
    assert LedgerStore().get_balance(subscription.user_id) == 550000


@pytest.mark.django_db
def test_failed_payment_is_recorded_without_points(subscription):
    handle_subscription_event(payment_event(event="subscription.payment_failed", payment_id="pay_9"))
    payment = Payment.objects.get(processor_payment_id="pay_9")
    assert payment.status == Payment.STATUS_FAILED
    assert LedgerStore().get_balance(subscription.user_id) == 0


@pytest.mark.django_db
def test_unknown_subscription_and_event_are_ignored(client, subscription):
    assert handle_subscription_event({**payment_event(), "subscription_id": "sub_missing"}) is False
    assert handle_subscription_event({**payment_event(), "event": "invoice.paid"}) is False
    assert not Payment.objects.exists()

    resp = post_webhook(client, {**payment_event(), "subscription_id": "sub_missing"})
    assert resp.status_code == 200
    assert WebhookLog.objects.get().processed


@pytest.mark.django_db
def test_plans_endpoint_lists_active_plans(client, plan):
    SubscriptionPlan.objects.create(code="old", name="Old", amount=1, is_active=False)
    resp = client.get("/api/payments/plans/")
    assert resp.status_code == 200
    assert [p["code"] for p in resp.json()["plans"]] == ["gold"]
