"""Audit trail models: staff logins and data changes."""
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.constants import AuditAction
from apps.core.models import BaseModel


class LoginAudit(BaseModel):
    """Journal of all staff login attempts."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='login_audits',
        verbose_name=_('User'),
        null=True,
        blank=True,
    )

    email_attempted = models.EmailField(
        blank=True,
        verbose_name=_('Email attempted')
    )

    ip_address = models.GenericIPAddressField(
        verbose_name=_('IP address')
    )

    user_agent = models.TextField(
        blank=True,
        verbose_name=_('User agent')
    )

    success = models.BooleanField(
        default=True,
        verbose_name=_('Successful')
    )

    failure_reason = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Failure reason')
    )

    class Meta:
        verbose_name = _('Login audit')
        verbose_name_plural = _('Login audits')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at']),
            models.Index(fields=['-created_at']),
            models.Index(fields=['ip_address']),
        ]

    def __str__(self):
        status = 'OK' if self.success else 'FAIL'
        return f'{self.email_attempted} [{status}] {self.ip_address}'


class AuditLog(BaseModel):
    """Who changed what, in which ministry."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name=_('User'),
    )

    church = models.ForeignKey(
        'ministries.Church',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name=_('Church'),
    )

    action = models.CharField(
        max_length=20,
        choices=AuditAction.choices,
        verbose_name=_('Action'),
    )

    entity_type = models.CharField(
        max_length=100,
        verbose_name=_('Entity type'),
        help_text=_('Model affected (e.g. Convert, Church)'),
    )

    entity_id = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Entity ID'),
    )

    object_repr = models.CharField(
        max_length=500,
        blank=True,
        verbose_name=_('Representation'),
    )

    changes = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Changes'),
    )

    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        verbose_name=_('IP address'),
    )

    user_agent = models.TextField(
        blank=True,
        verbose_name=_('User agent'),
    )

    class Meta:
        verbose_name = _('Audit log')
        verbose_name_plural = _('Audit logs')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id']),
            models.Index(fields=['church', '-created_at']),
        ]

    def __str__(self):
        return f'{self.get_action_display()} {self.entity_type} {self.entity_id}'
