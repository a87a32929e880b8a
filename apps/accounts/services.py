"""Business logic for staff accounts: creation, removal and password flows."""
import logging
import secrets

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.constants import Roles
from apps.core.utils import build_url, get_leader_limit_message

from .models import PasswordResetToken, StaffProfile

logger = logging.getLogger(__name__)

User = get_user_model()

MIN_PASSWORD_LENGTH = 8


def generate_temporary_password():
    return secrets.token_urlsafe(9)


class StaffAccountService:
    """Creates and removes staff users and runs the password reset flow."""

    # ─── Lookups ──────────────────────────────────────────────────────────

    @staticmethod
    def find_by_email(email):
        return User.objects.filter(email__iexact=(email or '').strip()).first()

    @classmethod
    def email_in_use(cls, email):
        return cls.find_by_email(email) is not None

    @staticmethod
    def platform_admin_exists():
        return StaffProfile.objects.filter(role=Roles.ADMIN).exists()

    # ─── Creation ─────────────────────────────────────────────────────────

    @staticmethod
    def check_leader_quota(church):
        """Raise ValueError when the church cannot take another leader."""
        current = StaffProfile.objects.filter(church=church, role=Roles.LEADER).count()
        if current >= church.max_leaders:
            raise ValueError(get_leader_limit_message(church.max_leaders, church.plan))

    @classmethod
    @transaction.atomic
    def create_staff_user(cls, email, password, role, church=None, first_name='', last_name='',
                          phone='', enforce_quota=True):
        """
        Create a Django user with its StaffProfile.

        Ministry roles need a church; leaders count against the plan quota.
        """
        email = (email or '').strip().lower()
        if cls.email_in_use(email):
            raise ValueError('Email already in use')
        if role in Roles.MINISTRY_ROLES and church is None:
            raise ValueError('A ministry is required for this role.')
        if role == Roles.LEADER and enforce_quota:
            cls.check_leader_quota(church)

        user = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
        )
        StaffProfile.objects.create(
            user=user,
            role=role,
            church=church if role != Roles.ADMIN else None,
            phone=phone or '',
        )
        logger.info(f'Created {role} account {email}' + (f' for church {church.pk}' if church else ''))
        return user

    @classmethod
    def create_platform_admin(cls, email, password, first_name='', last_name=''):
        return cls.create_staff_user(
            email, password, Roles.ADMIN, first_name=first_name, last_name=last_name,
        )

    # ─── Removal ──────────────────────────────────────────────────────────

    @staticmethod
    def remove_staff_user(user, notify=True):
        """Delete a staff user; leaders and ministry admins are told by email."""
        from apps.communication.services_email import EmailService

        profile = getattr(user, 'staff_profile', None)
        church = profile.church if profile else None
        email, full_name = user.email, (profile.full_name if profile else user.email)

        user.delete()
        logger.info(f'Removed staff account {email}')

        if notify and church is not None:
            EmailService.send_ministry_removal(to=email, full_name=full_name, ministry_name=church.name)

    # ─── Passwords ────────────────────────────────────────────────────────

    @staticmethod
    def validate_password(password):
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')

    @classmethod
    def request_password_reset(cls, email, request=None):
        """
        Email a reset link when the address belongs to a staff user.

        Returns the raw token (None when nobody matched) so callers never
        reveal whether the address exists.
        """
        from apps.communication.services_email import EmailService

        user = cls.find_by_email(email)
        if user is None or not user.is_active:
            logger.info(f'Password reset requested for unknown email {email}')
            return None

        PasswordResetToken.objects.filter(user=user, used_at__isnull=True).update(used_at=timezone.now())
        _, raw_token = PasswordResetToken.issue(user)
        EmailService.send_password_reset(
            to=user.email,
            full_name=user.get_full_name() or user.email,
            reset_url=build_url(f'/reset-password?token={raw_token}', request),
        )
        return raw_token

    @classmethod
    @transaction.atomic
    def reset_password(cls, raw_token, new_password):
        """Consume a reset token and set the new password."""
        cls.validate_password(new_password)
        token = (
            PasswordResetToken.objects
            .select_for_update()
            .filter(token_hash=PasswordResetToken.hash_token(raw_token or ''))
            .select_related('user')
            .first()
        )
        if token is None or not token.is_usable:
            raise ValueError('Invalid or expired reset link.')

        token.user.set_password(new_password)
        token.user.save(update_fields=['password'])
        token.used_at = timezone.now()
        token.save(update_fields=['used_at', 'updated_at'])
        logger.info(f'Password reset completed for {token.user.email}')
        return token.user

    @classmethod
    def reset_platform_admin_password(cls, email, new_password):
        """Recovery path for a locked-out platform admin; the caller checks the setup key."""
        cls.validate_password(new_password)
        user = cls.find_by_email(email)
        if user is None or getattr(user, 'staff_profile', None) is None or user.staff_profile.role != Roles.ADMIN:
            raise ValueError('No platform administrator with this email.')

        user.set_password(new_password)
        user.save(update_fields=['password'])
        logger.warning(f'Platform admin password reset with the setup key for {user.email}')
        return user

    @classmethod
    def change_password(cls, user, current_password, new_password):
        if not user.check_password(current_password or ''):
            raise ValueError('Current password is incorrect.')
        cls.validate_password(new_password)
        user.set_password(new_password)
        user.save(update_fields=['password'])

    @classmethod
    def admin_reset_password(cls, user):
        """Give a staff user a new temporary password and email it. Returns the password."""
        from apps.communication.services_email import EmailService

        password = generate_temporary_password()
        user.set_password(password)
        user.save(update_fields=['password'])
        EmailService.send(
            user.email,
            'Your password has been reset',
            f'Hello {user.get_full_name() or user.email},\n\n'
            f'An administrator reset your password.\n\n'
            f'Temporary password: {password}\n\n'
            f"Sign in at {build_url('/login')} and change it right away.",
        )
        logger.info(f'Administrator reset the password of {user.email}')
        return password

    @staticmethod
    def expire_reset_tokens():
        """Delete reset tokens that can no longer be used."""
        count, _ = PasswordResetToken.objects.filter(
            Q(expires_at__lt=timezone.now()) | Q(used_at__isnull=False)
        ).delete()
        return count
