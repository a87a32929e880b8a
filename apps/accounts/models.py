"""Staff accounts: role profile attached to the Django user, password reset tokens."""
import hashlib
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.constants import Roles
from apps.core.models import BaseModel
from apps.core.utils import generate_token


class StaffProfile(BaseModel):
    """
    Role and ministry of a staff user.

    Platform admins have no church; leaders and ministry admins always do.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='staff_profile',
        verbose_name=_('User')
    )

    role = models.CharField(
        max_length=20,
        choices=Roles.CHOICES,
        default=Roles.LEADER,
        verbose_name=_('Role')
    )

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='staff_profiles',
        verbose_name=_('Church')
    )

    phone = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Phone')
    )

    class Meta:
        verbose_name = _('Staff profile')
        verbose_name_plural = _('Staff profiles')
        ordering = ['user__last_name', 'user__first_name']

    def __str__(self):
        return f'{self.full_name} ({self.get_role_display()})'

    @property
    def full_name(self):
        return self.user.get_full_name() or self.user.email

    @property
    def email(self):
        return self.user.email

    @property
    def is_platform_admin(self):
        return self.role == Roles.ADMIN


class PasswordResetToken(BaseModel):
    """Single-use staff password reset link. Only the SHA-256 of the token is stored."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='password_reset_tokens',
        verbose_name=_('User')
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
        verbose_name = _('Password reset token')
        verbose_name_plural = _('Password reset tokens')
        ordering = ['-created_at']

    def __str__(self):
        return f'Reset for {self.user.email}'

    @staticmethod
    def hash_token(raw_token):
        return hashlib.sha256(raw_token.encode()).hexdigest()

    @classmethod
    def issue(cls, user):
        """Create a token for user and return (instance, raw_token)."""
        raw_token = generate_token()
        hours = getattr(settings, 'PASSWORD_RESET_EXPIRY_HOURS', 1)
        instance = cls.objects.create(
            user=user,
            token_hash=cls.hash_token(raw_token),
            expires_at=timezone.now() + timedelta(hours=hours),
        )
        return instance, raw_token

    @property
    def is_usable(self):
        return self.used_at is None and self.expires_at > timezone.now()
