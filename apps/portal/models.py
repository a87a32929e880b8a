"""Member portal models: people, their portal accounts and what they keep there."""
import hashlib
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.constants import MemberAccountStatus, PrayerRequestStatus, RelationshipType
from apps.core.models import BaseModel
from apps.core.utils import generate_token


class Person(BaseModel):
    """
    One human across ministries, identified by email.

    The same person may be a convert in one church and a member in
    another; MinistryAffiliation links them.
    """

    email = models.EmailField(
        unique=True,
        verbose_name=_('Email')
    )

    first_name = models.CharField(
        max_length=100,
        verbose_name=_('First name')
    )

    last_name = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Last name')
    )

    phone = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Phone')
    )

    class Meta:
        verbose_name = _('Person')
        verbose_name_plural = _('People')
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return self.full_name or self.email

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()


class MemberAccount(BaseModel):
    """
    Portal login of a Person.

    Created PENDING_CLAIM; the member chooses a password through a claim
    link and the account becomes ACTIVE. Used as request.user in portal views.
    """

    person = models.OneToOneField(
        Person,
        on_delete=models.CASCADE,
        related_name='account',
        verbose_name=_('Person')
    )

    status = models.CharField(
        max_length=20,
        choices=MemberAccountStatus.choices,
        default=MemberAccountStatus.PENDING_CLAIM,
        verbose_name=_('Status')
    )

    password = models.CharField(
        max_length=128,
        blank=True,
        verbose_name=_('Password')
    )

    last_login = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Last login')
    )

    class Meta:
        verbose_name = _('Member account')
        verbose_name_plural = _('Member accounts')
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.person.email} ({self.get_status_display()})'

    # Lets DRF treat a member account as request.user
    is_authenticated = True
    is_anonymous = False

    @property
    def email(self):
        return self.person.email

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        if not self.password:
            return False
        return check_password(raw_password, self.password)


class AccountClaimToken(BaseModel):
    """Single-use link to set a portal password. Only the SHA-256 of the token is stored."""

    account = models.ForeignKey(
        MemberAccount,
        on_delete=models.CASCADE,
        related_name='claim_tokens',
        verbose_name=_('Member account')
    )

    token_hash = models.CharField(
        max_length=64,
        unique=True,
        verbose_name=_('Token hash')
    )

    expires_at = models.DateTimeField(
        verbose_name=_('Expires at')
    )

    used_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Used at')
    )

    class Meta:
        verbose_name = _('Account claim token')
        verbose_name_plural = _('Account claim tokens')
        ordering = ['-created_at']

    def __str__(self):
        return f'Claim for {self.account.person.email}'

    @staticmethod
    def hash_token(raw_token):
        return hashlib.sha256(raw_token.encode()).hexdigest()

    @classmethod
    def issue(cls, account):
        """Create a token for account and return (instance, raw_token)."""
        raw_token = generate_token()
        hours = getattr(settings, 'CLAIM_TOKEN_EXPIRY_HOURS', 24)
        instance = cls.objects.create(
            account=account,
            token_hash=cls.hash_token(raw_token),
            expires_at=timezone.now() + timedelta(hours=hours),
        )
        return instance, raw_token

    @property
    def is_usable(self):
        return self.used_at is None and self.expires_at > timezone.now()


class MinistryAffiliation(BaseModel):
    """A person's relationship with one church and the tracked record behind it."""

    person = models.ForeignKey(
        Person,
        on_delete=models.CASCADE,
        related_name='affiliations',
        verbose_name=_('Person')
    )

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.CASCADE,
        related_name='member_affiliations',
        verbose_name=_('Church')
    )

    relationship_type = models.CharField(
        max_length=20,
        choices=RelationshipType.choices,
        verbose_name=_('Relationship')
    )

    convert = models.ForeignKey(
        'followups.Convert',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='affiliations',
        verbose_name=_('Convert record')
    )

    new_member = models.ForeignKey(
        'followups.NewMember',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='affiliations',
        verbose_name=_('New member record')
    )

    member = models.ForeignKey(
        'followups.Member',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='affiliations',
        verbose_name=_('Member record')
    )

    class Meta:
        verbose_name = _('Ministry affiliation')
        verbose_name_plural = _('Ministry affiliations')
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['person', 'church'],
                name='unique_affiliation_per_church',
            ),
        ]

    def __str__(self):
        return f'{self.person} - {self.church} ({self.get_relationship_type_display()})'

    # Relationship type -> field holding the linked record
    RECORD_FIELDS = {
        RelationshipType.CONVERT: 'convert',
        RelationshipType.NEW_MEMBER: 'new_member',
        RelationshipType.MEMBER: 'member',
    }

    @property
    def record(self):
        """The tracked record for the current relationship, falling back to any linked one."""
        current = getattr(self, self.RECORD_FIELDS[self.relationship_type])
        if current is not None:
            return current
        return self.member or self.new_member or self.convert


class JournalEntry(BaseModel):
    """Personal journal entry of a member."""

    account = models.ForeignKey(
        MemberAccount,
        on_delete=models.CASCADE,
        related_name='journal_entries',
        verbose_name=_('Member account')
    )

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='journal_entries',
        verbose_name=_('Church'),
        help_text=_('Ministry selected when the entry was written')
    )

    title = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_('Title')
    )

    content = models.TextField(
        verbose_name=_('Content')
    )

    is_private = models.BooleanField(
        default=True,
        verbose_name=_('Private')
    )

    share_with_ministry = models.BooleanField(
        default=False,
        verbose_name=_('Shared with ministry')
    )

    class Meta:
        verbose_name = _('Journal entry')
        verbose_name_plural = _('Journal entries')
        ordering = ['-created_at']

    def __str__(self):
        return self.title or self.content[:50]


class MemberPrayerRequest(BaseModel):
    """Prayer request submitted from the member portal."""

    account = models.ForeignKey(
        MemberAccount,
        on_delete=models.CASCADE,
        related_name='prayer_requests',
        verbose_name=_('Member account')
    )

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.CASCADE,
        related_name='member_prayer_requests',
        verbose_name=_('Church')
    )

    request_text = models.TextField(
        verbose_name=_('Request')
    )

    category = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_('Category')
    )

    is_private = models.BooleanField(
        default=False,
        verbose_name=_('Private'),
        help_text=_('Private requests are not shown to ministry staff')
    )

    status = models.CharField(
        max_length=20,
        choices=PrayerRequestStatus.choices,
        default=PrayerRequestStatus.SUBMITTED,
        verbose_name=_('Status')
    )

    class Meta:
        verbose_name = _('Member prayer request')
        verbose_name_plural = _('Member prayer requests')
        ordering = ['-created_at']

    def __str__(self):
        return self.request_text[:50]
