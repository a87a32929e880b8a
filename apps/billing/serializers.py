"""Billing serializers."""
from rest_framework import serializers

from apps.core.constants import Plan


class CheckoutSerializer(serializers.Serializer):
    plan = serializers.ChoiceField(choices=[(p, label) for p, label in Plan.CHOICES if p in Plan.PAID])


class SmsUsageSummarySerializer(serializers.Serializer):
    billing_period = serializers.CharField()
    sms_used = serializers.IntegerField()
    sms_limit = serializers.IntegerField()
    mms_used = serializers.IntegerField()
    mms_limit = serializers.IntegerField()


class SubscriptionSerializer(serializers.Serializer):
    plan = serializers.CharField()
    plan_display = serializers.CharField()
    status = serializers.CharField()
    price_cents = serializers.IntegerField()
    currency = serializers.CharField()
    max_leaders = serializers.IntegerField()
    leader_count = serializers.IntegerField()
    has_billing_account = serializers.BooleanField()
    usage = SmsUsageSummarySerializer()
