"""API views for ministry billing."""
import json
import logging

from django.conf import settings
from django.http import HttpResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.constants import AuditAction
from apps.core.permissions import IsMinistryAdmin, get_user_church
from apps.core.services_audit import AuditService

from .serializers import CheckoutSerializer, SubscriptionSerializer
from .services import BillingService, get_stripe

logger = logging.getLogger(__name__)


class BillingViewSet(viewsets.ViewSet):
    """Plan and subscription of the ministry admin's church."""
    permission_classes = [IsMinistryAdmin]

    def _church(self, request):
        return get_user_church(request.user)

    @action(detail=False, methods=['get'])
    def subscription(self, request):
        info = BillingService.subscription_info(self._church(request))
        return Response(SubscriptionSerializer(info).data)

    @action(detail=False, methods=['post'])
    def checkout(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            url = BillingService.create_checkout(
                self._church(request), serializer.validated_data['plan'], request,
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'url': url})

    @action(detail=False, methods=['post'])
    def portal(self, request):
        try:
            url = BillingService.create_portal_session(self._church(request), request)
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'url': url})

    @action(detail=False, methods=['post'])
    def cancel(self, request):
        church = self._church(request)
        old_plan = church.plan
        try:
            BillingService.cancel_subscription(church)
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        AuditService.log(
            request.user,
            AuditAction.STATUS_CHANGE,
            church,
            changes={'plan': {'old': old_plan, 'new': church.plan}},
            request=request,
        )
        return Response(SubscriptionSerializer(BillingService.subscription_info(church)).data)


@method_decorator(csrf_exempt, name='dispatch')
class StripeWebhookView(View):
    """Receives Stripe webhook events."""

    def post(self, request):
        payload = request.body
        sig_header = request.META.get('HTTP_STRIPE_SIGNATURE', '')
        webhook_secret = getattr(settings, 'STRIPE_WEBHOOK_SECRET', '')

        stripe = get_stripe()

        if stripe:
            if not webhook_secret:
                logger.error('Stripe webhook received but STRIPE_WEBHOOK_SECRET is not set')
                return HttpResponse(status=400)
            try:
                stripe.Webhook.construct_event(payload, sig_header, webhook_secret)
            except (ValueError, stripe.SignatureVerificationError) as e:
                logger.error(f'Stripe webhook error: {e}')
                return HttpResponse(status=400)

        # Unsigned payloads reach here only in development mode
        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            return HttpResponse(status=400)

        try:
            BillingService.handle_event(event)
        except Exception as e:
            logger.error(f'Error handling Stripe event {event.get("type")}: {e}', exc_info=True)

        return HttpResponse(status=200)
