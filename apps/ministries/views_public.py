"""Unauthenticated sign-up endpoints: leader account requests and new ministries."""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response

from apps.core.constants import Plan
from apps.followups.views_public import PublicAPIView

from .models import MinistryRequest
from .serializers import PublicAccountRequestSerializer, PublicMinistryRequestSerializer
from .services import RequestReviewService

logger = logging.getLogger(__name__)


class PublicAccountRequestView(PublicAPIView):
    """A would-be leader asks to join an existing ministry."""

    def post(self, request):
        from apps.accounts.services import StaffAccountService

        serializer = PublicAccountRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if StaffAccountService.email_in_use(serializer.validated_data['email']):
            return Response({'detail': 'Email already in use'}, status=status.HTTP_400_BAD_REQUEST)

        account_request = serializer.save()
        logger.info(f'Account request {account_request.pk} for {account_request.church_name}')
        return Response(
            {
                'id': str(account_request.pk),
                'message': 'Your request has been submitted. You will receive an email once it is reviewed.',
            },
            status=status.HTTP_201_CREATED,
        )


class PublicMinistryRequestView(PublicAPIView):
    """
    Register a new ministry.

    Paid plans get a Stripe checkout URL; the request is reviewed once
    payment is confirmed by the webhook.
    """

    def post(self, request):
        from apps.accounts.services import StaffAccountService
        from apps.billing.services import BillingService

        serializer = PublicMinistryRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if StaffAccountService.email_in_use(serializer.validated_data['admin_email']):
            return Response({'detail': 'Email already in use'}, status=status.HTTP_400_BAD_REQUEST)

        ministry_request = serializer.save()
        logger.info(f'Ministry request {ministry_request.pk} ({ministry_request.ministry_name})')

        checkout_url = None
        if ministry_request.requires_payment:
            try:
                checkout_url = BillingService.create_ministry_checkout(ministry_request, request)
            except ValueError as e:
                return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                'id': str(ministry_request.pk),
                'checkout_url': checkout_url,
                'payment_status': RequestReviewService.payment_status(ministry_request),
            },
            status=status.HTTP_201_CREATED,
        )


class PublicMinistryPaymentStatusView(PublicAPIView):
    """Polled by the registration success page until checkout completes."""

    throttle_classes = []

    def get(self, request, pk):
        ministry_request = get_object_or_404(MinistryRequest, pk=pk)
        return Response({
            'payment_status': RequestReviewService.payment_status(ministry_request),
            'plan': ministry_request.plan,
        })


class PublicPlanListView(PublicAPIView):
    """Plans offered on the sign-up page, cheapest first."""

    throttle_classes = []

    def get(self, request):
        from apps.billing.services import CURRENCY

        plans = []
        for value, label in Plan.CHOICES:
            sms_limit, mms_limit = Plan.MESSAGE_LIMITS[value]
            plans.append({
                'id': value,
                'name': str(label),
                'price_cents': Plan.PRICES.get(value, 0),
                'currency': CURRENCY,
                'interval': 'month',
                'max_leaders': Plan.LEADER_LIMITS[value],
                'sms_limit': sms_limit,
                'mms_limit': mms_limit,
            })
        return Response(plans)
