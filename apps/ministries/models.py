"""Ministry (tenant) models: churches, sign-up requests and form settings."""
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.constants import FormType, Plan, RequestStatus, SubscriptionStatus
from apps.core.models import BaseModel, SoftDeleteModel
from apps.core.utils import generate_token
from apps.core.validators import validate_image_file


def _new_token():
    return generate_token(16)


class Church(SoftDeleteModel):
    """
    A ministry tenant. Every tracked person, check-in and staff user
    belongs to exactly one church.

    Archiving is a soft delete; archived churches can be reinstated.
    """

    name = models.CharField(
        max_length=200,
        verbose_name=_('Name')
    )

    location = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Location')
    )

    logo = models.ImageField(
        upload_to='churches/logos/',
        blank=True,
        null=True,
        validators=[validate_image_file],
        verbose_name=_('Logo')
    )

    public_token = models.CharField(
        max_length=64,
        unique=True,
        default=_new_token,
        verbose_name=_('Convert form token')
    )

    new_member_token = models.CharField(
        max_length=64,
        unique=True,
        default=_new_token,
        verbose_name=_('New member form token')
    )

    member_token = models.CharField(
        max_length=64,
        unique=True,
        default=_new_token,
        verbose_name=_('Member form token')
    )

    plan = models.CharField(
        max_length=20,
        choices=Plan.CHOICES,
        default=Plan.FREE,
        verbose_name=_('Plan')
    )

    subscription_status = models.CharField(
        max_length=20,
        choices=SubscriptionStatus.CHOICES,
        default=SubscriptionStatus.ACTIVE,
        verbose_name=_('Subscription status')
    )

    stripe_customer_id = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Stripe customer ID')
    )

    stripe_subscription_id = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Stripe subscription ID')
    )

    class Meta:
        verbose_name = _('Church')
        verbose_name_plural = _('Churches')
        ordering = ['name']

    def __str__(self):
        return self.name

    TOKEN_FIELDS = {
        FormType.CONVERT: 'public_token',
        FormType.NEW_MEMBER: 'new_member_token',
        FormType.MEMBER: 'member_token',
    }

    def get_form_token(self, form_type):
        return getattr(self, self.TOKEN_FIELDS[form_type])

    def regenerate_token(self, form_type=FormType.CONVERT):
        """Replace the link token of one public form. Old links stop working."""
        field = self.TOKEN_FIELDS[form_type]
        setattr(self, field, _new_token())
        self.save(update_fields=[field, 'updated_at'])
        return getattr(self, field)

    @property
    def max_leaders(self):
        return Plan.LEADER_LIMITS.get(self.plan, 1)

    @property
    def is_paid(self):
        return self.plan in Plan.PAID


class AccountRequest(BaseModel):
    """A request from a would-be leader to get a staff account."""

    full_name = models.CharField(
        max_length=200,
        verbose_name=_('Full name')
    )

    email = models.EmailField(
        verbose_name=_('Email')
    )

    phone = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Phone')
    )

    church_name = models.CharField(
        max_length=200,
        verbose_name=_('Church name')
    )

    church = models.ForeignKey(
        Church,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='account_requests',
        verbose_name=_('Church'),
        help_text=_('Ministry the leader asked to join, when picked from the list')
    )

    reason = models.TextField(
        blank=True,
        verbose_name=_('Reason')
    )

    status = models.CharField(
        max_length=10,
        choices=RequestStatus.choices,
        default=RequestStatus.PENDING,
        verbose_name=_('Status')
    )

    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_account_requests',
        verbose_name=_('Reviewed by')
    )

    reviewed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Reviewed at')
    )

    class Meta:
        verbose_name = _('Account request')
        verbose_name_plural = _('Account requests')
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.full_name} ({self.church_name})'


class MinistryRequest(BaseModel):
    """Sign-up of a new ministry, reviewed by a platform admin."""

    ministry_name = models.CharField(
        max_length=200,
        verbose_name=_('Ministry name')
    )

    location = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Location')
    )

    admin_full_name = models.CharField(
        max_length=200,
        verbose_name=_('Administrator name')
    )

    admin_email = models.EmailField(
        verbose_name=_('Administrator email')
    )

    admin_phone = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Administrator phone')
    )

    description = models.TextField(
        blank=True,
        verbose_name=_('Description')
    )

    plan = models.CharField(
        max_length=20,
        choices=Plan.CHOICES,
        default=Plan.FREE,
        verbose_name=_('Plan')
    )

    is_paid = models.BooleanField(
        default=False,
        verbose_name=_('Paid')
    )

    stripe_checkout_session_id = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Stripe checkout session')
    )

    stripe_customer_id = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Stripe customer ID')
    )

    stripe_subscription_id = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Stripe subscription ID')
    )

    status = models.CharField(
        max_length=10,
        choices=RequestStatus.choices,
        default=RequestStatus.PENDING,
        verbose_name=_('Status')
    )

    church = models.OneToOneField(
        Church,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ministry_request',
        verbose_name=_('Created church')
    )

    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_ministry_requests',
        verbose_name=_('Reviewed by')
    )

    reviewed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Reviewed at')
    )

    class Meta:
        verbose_name = _('Ministry request')
        verbose_name_plural = _('Ministry requests')
        ordering = ['-created_at']

    def __str__(self):
        return self.ministry_name

    @property
    def requires_payment(self):
        return self.plan in Plan.PAID


class FormConfiguration(BaseModel):
    """Per-church wording and optional fields of a public registration form."""

    church = models.ForeignKey(
        Church,
        on_delete=models.CASCADE,
        related_name='form_configurations',
        verbose_name=_('Church')
    )

    form_type = models.CharField(
        max_length=20,
        choices=FormType.choices,
        verbose_name=_('Form type')
    )

    title = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_('Title')
    )

    description = models.TextField(
        blank=True,
        verbose_name=_('Description')
    )

    success_message = models.TextField(
        blank=True,
        verbose_name=_('Success message')
    )

    enabled_fields = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Enabled optional fields')
    )

    class Meta:
        verbose_name = _('Form configuration')
        verbose_name_plural = _('Form configurations')
        constraints = [
            models.UniqueConstraint(
                fields=['church', 'form_type'],
                name='unique_form_configuration_per_church',
            ),
        ]

    def __str__(self):
        return f'{self.church} - {self.get_form_type_display()}'
