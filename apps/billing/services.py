"""Stripe subscriptions for ministries: checkout, billing portal and webhook events."""
import logging
import uuid

import stripe
from django.conf import settings
from django.db import transaction

from apps.core.constants import Plan, Roles, SubscriptionStatus
from apps.core.utils import build_url

logger = logging.getLogger(__name__)

CURRENCY = 'usd'


def get_stripe():
    """Get configured stripe module. Returns None if not configured."""
    stripe.api_key = getattr(settings, 'STRIPE_SECRET_KEY', '')
    if not stripe.api_key:
        return None
    return stripe


def plan_label(plan):
    return dict(Plan.CHOICES).get(plan, plan)


def _line_item(plan):
    """Monthly recurring price for a paid plan. A configured Stripe price id wins over inline price data."""
    price_id = getattr(settings, 'STRIPE_PRICE_IDS', {}).get(plan)
    if price_id:
        return {'price': price_id, 'quantity': 1}
    return {
        'price_data': {
            'currency': CURRENCY,
            'unit_amount': Plan.PRICES[plan],
            'recurring': {'interval': 'month'},
            'product_data': {'name': f'MinistryConnect {plan_label(plan)}'},
        },
        'quantity': 1,
    }


def _dev_id(prefix):
    return f'{prefix}_dev_{uuid.uuid4().hex[:16]}'


class BillingService:
    """Manages the Stripe side of a ministry's plan."""

    # ─── Checkout ─────────────────────────────────────────────────────────

    @staticmethod
    def create_ministry_checkout(ministry_request, request=None):
        """
        Checkout session for a ministry registering on a paid plan.

        Returns the Stripe checkout URL. Without Stripe configured the
        request is marked paid with mock ids and None is returned.
        """
        if ministry_request.plan not in Plan.PAID:
            raise ValueError('This plan does not require payment.')

        stripe_module = get_stripe()
        if not stripe_module:
            ministry_request.is_paid = True
            ministry_request.stripe_checkout_session_id = _dev_id('cs')
            ministry_request.stripe_customer_id = _dev_id('cus')
            ministry_request.stripe_subscription_id = _dev_id('sub')
            ministry_request.save(update_fields=[
                'is_paid', 'stripe_checkout_session_id', 'stripe_customer_id',
                'stripe_subscription_id', 'updated_at',
            ])
            logger.info(f'Stripe not configured, ministry request {ministry_request.pk} marked paid')
            return None

        session = stripe_module.checkout.Session.create(
            mode='subscription',
            customer_email=ministry_request.admin_email,
            line_items=[_line_item(ministry_request.plan)],
            metadata={
                'ministry_request_id': str(ministry_request.pk),
                'plan': ministry_request.plan,
            },
            success_url=build_url(f'/register-ministry/success?request_id={ministry_request.pk}', request),
            cancel_url=build_url('/register-ministry?canceled=1', request),
        )
        ministry_request.stripe_checkout_session_id = session.id
        ministry_request.save(update_fields=['stripe_checkout_session_id', 'updated_at'])
        return session.url

    @staticmethod
    def create_checkout(church, plan, request=None):
        """
        Checkout session moving an existing church to a paid plan.

        Returns the URL to redirect to. Without Stripe the plan changes at once.
        """
        if plan not in Plan.PAID:
            raise ValueError('Choose a paid plan.')
        if plan == church.plan and church.subscription_status == SubscriptionStatus.ACTIVE:
            raise ValueError(f'This ministry is already on the {plan_label(plan)} plan.')

        stripe_module = get_stripe()
        if not stripe_module:
            church.plan = plan
            church.subscription_status = SubscriptionStatus.ACTIVE
            church.stripe_customer_id = church.stripe_customer_id or _dev_id('cus')
            church.stripe_subscription_id = _dev_id('sub')
            church.save(update_fields=[
                'plan', 'subscription_status', 'stripe_customer_id', 'stripe_subscription_id', 'updated_at',
            ])
            logger.info(f'Stripe not configured, {church.name} moved to {plan}')
            return build_url('/ministry-admin/billing?success=1', request)

        params = {
            'mode': 'subscription',
            'line_items': [_line_item(plan)],
            'metadata': {'church_id': str(church.pk), 'plan': plan},
            'success_url': build_url('/ministry-admin/billing?success=1', request),
            'cancel_url': build_url('/ministry-admin/billing?canceled=1', request),
        }
        if church.stripe_customer_id:
            params['customer'] = church.stripe_customer_id
        else:
            admin = church.staff_profiles.filter(role=Roles.MINISTRY_ADMIN).select_related('user').first()
            if admin is not None:
                params['customer_email'] = admin.user.email

        session = stripe_module.checkout.Session.create(**params)
        return session.url

    @staticmethod
    def create_portal_session(church, request=None):
        """Stripe billing portal URL where the admin manages card and invoices."""
        if not church.stripe_customer_id:
            raise ValueError('No billing account found for this ministry.')

        return_url = build_url('/ministry-admin/billing', request)
        stripe_module = get_stripe()
        if not stripe_module:
            return return_url

        session = stripe_module.billing_portal.Session.create(
            customer=church.stripe_customer_id,
            return_url=return_url,
        )
        return session.url

    @staticmethod
    def cancel_subscription(church):
        """Cancel the Stripe subscription and drop the church to the free plan."""
        if church.plan == Plan.FREE or not church.stripe_subscription_id:
            raise ValueError('This ministry has no active subscription.')

        stripe_module = get_stripe()
        if stripe_module:
            stripe_module.Subscription.cancel(church.stripe_subscription_id)

        church.plan = Plan.FREE
        church.subscription_status = SubscriptionStatus.CANCELED
        church.stripe_subscription_id = ''
        church.save(update_fields=['plan', 'subscription_status', 'stripe_subscription_id', 'updated_at'])
        logger.info(f'Subscription of {church.name} canceled')
        return church

    @staticmethod
    def subscription_info(church):
        from apps.communication.services_sms import SMSQuotaService

        return {
            'plan': church.plan,
            'plan_display': plan_label(church.plan),
            'status': church.subscription_status,
            'price_cents': Plan.PRICES.get(church.plan, 0),
            'currency': CURRENCY,
            'max_leaders': church.max_leaders,
            'leader_count': church.staff_profiles.filter(role=Roles.LEADER).count(),
            'has_billing_account': bool(church.stripe_customer_id),
            'usage': SMSQuotaService.summary(church),
        }

    # ─── Webhooks ─────────────────────────────────────────────────────────

    @classmethod
    def handle_event(cls, event):
        """Apply a Stripe event (already parsed to a dict). Returns True when handled."""
        handlers = {
            'checkout.session.completed': cls._checkout_completed,
            'invoice.payment_failed': cls._invoice_failed,
            'invoice.payment_succeeded': cls._invoice_succeeded,
            'customer.subscription.updated': cls._subscription_updated,
            'customer.subscription.deleted': cls._subscription_deleted,
        }
        handler = handlers.get(event.get('type', ''))
        if handler is None:
            return False
        handler(event.get('data', {}).get('object', {}) or {})
        return True

    @staticmethod
    def _customer_id(obj):
        customer = obj.get('customer')
        if isinstance(customer, dict):
            return customer.get('id')
        return customer

    @staticmethod
    def _church_by_customer(customer_id):
        from apps.ministries.models import Church

        if not customer_id:
            return None
        return Church.objects.filter(stripe_customer_id=customer_id).first()

    @staticmethod
    def _church_by_subscription(subscription_id):
        from apps.ministries.models import Church

        if not subscription_id:
            return None
        return Church.objects.filter(stripe_subscription_id=subscription_id).first()

    @staticmethod
    def _set_status(church, new_status):
        church.subscription_status = new_status
        church.save(update_fields=['subscription_status', 'updated_at'])
        logger.info(f'Ministry {church.name} subscription set to {new_status}')

    @classmethod
    @transaction.atomic
    def _checkout_completed(cls, session):
        from apps.ministries.models import Church, MinistryRequest

        metadata = session.get('metadata') or {}
        customer_id = cls._customer_id(session) or ''
        subscription_id = session.get('subscription') or ''
        plan = metadata.get('plan')

        request_id = metadata.get('ministry_request_id')
        if request_id:
            ministry_request = MinistryRequest.objects.filter(pk=request_id).first()
            if ministry_request is None:
                logger.warning(f'Checkout completed for unknown ministry request {request_id}')
                return
            ministry_request.is_paid = True
            ministry_request.stripe_checkout_session_id = session.get('id', '') or ministry_request.stripe_checkout_session_id
            ministry_request.stripe_customer_id = customer_id
            ministry_request.stripe_subscription_id = subscription_id
            ministry_request.save(update_fields=[
                'is_paid', 'stripe_checkout_session_id', 'stripe_customer_id',
                'stripe_subscription_id', 'updated_at',
            ])
            logger.info(f'Ministry request {ministry_request.pk} paid')
            return

        church_id = metadata.get('church_id')
        church = Church.objects.filter(pk=church_id).first() if church_id else None
        if church is None:
            logger.warning(f'Checkout completed without a known church: {session.get("id")}')
            return

        if plan in Plan.PAID:
            church.plan = plan
        church.stripe_customer_id = customer_id or church.stripe_customer_id
        church.stripe_subscription_id = subscription_id or church.stripe_subscription_id
        church.subscription_status = SubscriptionStatus.ACTIVE
        church.save(update_fields=[
            'plan', 'stripe_customer_id', 'stripe_subscription_id', 'subscription_status', 'updated_at',
        ])
        logger.info(f'Ministry {church.name} subscribed to {church.plan}')

    @classmethod
    def _invoice_failed(cls, invoice):
        church = cls._church_by_customer(cls._customer_id(invoice))
        if church and church.plan != Plan.FREE and church.stripe_subscription_id:
            cls._set_status(church, SubscriptionStatus.PAST_DUE)

    @classmethod
    def _invoice_succeeded(cls, invoice):
        church = cls._church_by_customer(cls._customer_id(invoice))
        if church and church.plan != Plan.FREE:
            cls._set_status(church, SubscriptionStatus.ACTIVE)

    @classmethod
    def _subscription_updated(cls, subscription):
        church = cls._church_by_subscription(subscription.get('id'))
        if church:
            cls._set_status(
                church,
                SubscriptionStatus.FROM_STRIPE.get(subscription.get('status'), SubscriptionStatus.ACTIVE),
            )

    @classmethod
    def _subscription_deleted(cls, subscription):
        church = cls._church_by_subscription(subscription.get('id'))
        if church:
            cls._set_status(church, SubscriptionStatus.SUSPENDED)
