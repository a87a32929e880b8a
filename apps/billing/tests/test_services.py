"""Tests for Stripe billing in development mode and webhook event handling."""
from unittest.mock import MagicMock, patch

import pytest

from apps.accounts.tests.factories import make_leader
from apps.billing.services import BillingService, get_stripe
from apps.core.constants import Plan, SubscriptionStatus
from apps.ministries.tests.factories import ChurchFactory, MinistryRequestFactory, PaidChurchFactory

pytestmark = pytest.mark.django_db


def event(event_type, obj):
    return {'type': event_type, 'data': {'object': obj}}


class TestGetStripe:
    def test_unconfigured(self, settings):
        settings.STRIPE_SECRET_KEY = ''
        assert get_stripe() is None

    def test_configured(self, settings):
        settings.STRIPE_SECRET_KEY = 'sk_test_123'
        module = get_stripe()
        assert module is not None
        assert module.api_key == 'sk_test_123'


class TestDevelopmentMode:
    @pytest.fixture(autouse=True)
    def development_mode(self, settings):
        settings.STRIPE_SECRET_KEY = ''

    def test_ministry_checkout_marks_request_paid(self):
        ministry_request = MinistryRequestFactory(plan=Plan.FORMATION)

        assert BillingService.create_ministry_checkout(ministry_request) is None

        ministry_request.refresh_from_db()
        assert ministry_request.is_paid is True
        assert ministry_request.stripe_customer_id.startswith('cus_dev_')

    def test_free_request_needs_no_checkout(self):
        with pytest.raises(ValueError):
            BillingService.create_ministry_checkout(MinistryRequestFactory(plan=Plan.FREE))

    def test_checkout_upgrades_plan(self):
        church = ChurchFactory()

        url = BillingService.create_checkout(church, Plan.STEWARDSHIP)

        church.refresh_from_db()
        assert church.plan == Plan.STEWARDSHIP
        assert church.max_leaders == 10
        assert url.endswith('/ministry-admin/billing?success=1')

    def test_portal_requires_customer(self):
        with pytest.raises(ValueError, match='No billing account'):
            BillingService.create_portal_session(ChurchFactory())

    def test_cancel(self):
        church = PaidChurchFactory()

        BillingService.cancel_subscription(church)

        church.refresh_from_db()
        assert church.plan == Plan.FREE
        assert church.subscription_status == SubscriptionStatus.CANCELED
        assert church.stripe_subscription_id == ''

    def test_subscription_info(self):
        church = PaidChurchFactory()
        make_leader(church=church)

        info = BillingService.subscription_info(church)

        assert info['plan'] == Plan.FORMATION
        assert info['price_cents'] == 2999
        assert info['max_leaders'] == 3
        assert info['leader_count'] == 1
        assert info['usage']['sms_limit'] == 2000


class TestStripeCheckout:
    @pytest.fixture(autouse=True)
    def stripe_configured(self, settings):
        settings.STRIPE_SECRET_KEY = 'sk_test_123'
        settings.STRIPE_PRICE_IDS = {}

    def test_ministry_checkout_session(self):
        ministry_request = MinistryRequestFactory(plan=Plan.FOUNDATIONS, admin_email='lois@example.com')
        session = MagicMock(id='cs_test_1', url='https://checkout.stripe.com/c/pay/cs_test_1')

        with patch('stripe.checkout.Session.create', return_value=session) as create:
            url = BillingService.create_ministry_checkout(ministry_request)

        assert url == 'https://checkout.stripe.com/c/pay/cs_test_1'
        kwargs = create.call_args.kwargs
        assert kwargs['mode'] == 'subscription'
        assert kwargs['customer_email'] == 'lois@example.com'
        assert kwargs['line_items'][0]['price_data']['unit_amount'] == 1999
        assert kwargs['metadata']['ministry_request_id'] == str(ministry_request.pk)
        ministry_request.refresh_from_db()
        assert ministry_request.stripe_checkout_session_id == 'cs_test_1'
        assert ministry_request.is_paid is False

    def test_configured_price_id(self, settings):
        settings.STRIPE_PRICE_IDS = {Plan.STEWARDSHIP: 'price_stewardship'}
        session = MagicMock(id='cs_test_2', url='https://checkout.stripe.com/c/pay/cs_test_2')

        with patch('stripe.checkout.Session.create', return_value=session) as create:
            BillingService.create_checkout(ChurchFactory(), Plan.STEWARDSHIP)

        assert create.call_args.kwargs['line_items'] == [{'price': 'price_stewardship', 'quantity': 1}]


class TestWebhookEvents:
    def test_checkout_completed_for_ministry_request(self):
        ministry_request = MinistryRequestFactory(plan=Plan.FORMATION)

        BillingService.handle_event(event('checkout.session.completed', {
            'id': 'cs_1',
            'customer': 'cus_1',
            'subscription': 'sub_1',
            'metadata': {'ministry_request_id': str(ministry_request.pk), 'plan': Plan.FORMATION},
        }))

        ministry_request.refresh_from_db()
        assert ministry_request.is_paid is True
        assert ministry_request.stripe_subscription_id == 'sub_1'

    def test_checkout_completed_for_church_upgrade(self):
        church = ChurchFactory()

        BillingService.handle_event(event('checkout.session.completed', {
            'id': 'cs_2',
            'customer': 'cus_2',
            'subscription': 'sub_2',
            'metadata': {'church_id': str(church.pk), 'plan': Plan.FORMATION},
        }))

        church.refresh_from_db()
        assert church.plan == Plan.FORMATION
        assert church.stripe_customer_id == 'cus_2'
        assert church.subscription_status == SubscriptionStatus.ACTIVE

    def test_payment_failed_sets_past_due(self):
        church = PaidChurchFactory()
        BillingService.handle_event(event('invoice.payment_failed', {'customer': church.stripe_customer_id}))
        church.refresh_from_db()
        assert church.subscription_status == SubscriptionStatus.PAST_DUE

    def test_payment_failed_ignored_for_free_plan(self):
        church = ChurchFactory(stripe_customer_id='cus_free')
        BillingService.handle_event(event('invoice.payment_failed', {'customer': 'cus_free'}))
        church.refresh_from_db()
        assert church.subscription_status == SubscriptionStatus.ACTIVE

    def test_payment_succeeded_restores_active(self):
        church = PaidChurchFactory(subscription_status=SubscriptionStatus.PAST_DUE)
        BillingService.handle_event(event('invoice.payment_succeeded', {
            'customer': {'id': church.stripe_customer_id},
        }))
        church.refresh_from_db()
        assert church.subscription_status == SubscriptionStatus.ACTIVE

    @pytest.mark.parametrize('stripe_status,expected', [
        ('past_due', SubscriptionStatus.PAST_DUE),
        ('canceled', SubscriptionStatus.SUSPENDED),
        ('unpaid', SubscriptionStatus.SUSPENDED),
        ('trialing', SubscriptionStatus.ACTIVE),
    ])
    def test_subscription_updated(self, stripe_status, expected):
        church = PaidChurchFactory()
        BillingService.handle_event(event('customer.subscription.updated', {
            'id': church.stripe_subscription_id, 'status': stripe_status,
        }))
        church.refresh_from_db()
        assert church.subscription_status == expected

    def test_subscription_deleted_suspends(self):
        church = PaidChurchFactory()
        BillingService.handle_event(event('customer.subscription.deleted', {'id': church.stripe_subscription_id}))
        church.refresh_from_db()
        assert church.subscription_status == SubscriptionStatus.SUSPENDED

    def test_unknown_event_ignored(self):
        assert BillingService.handle_event(event('charge.refunded', {})) is False
