"""Business logic for ministries: sign-up reviews, archiving and public form links."""
import io
import logging

import qrcode
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.core.constants import FormType, Plan, RequestStatus, Roles
from apps.core.utils import build_url

from .models import AccountRequest, Church, FormConfiguration, MinistryRequest

logger = logging.getLogger(__name__)

# Public path of each registration form, keyed by form type
FORM_PATHS = {
    FormType.CONVERT: '/connect/{token}',
    FormType.NEW_MEMBER: '/new-member/{token}',
    FormType.MEMBER: '/member/{token}',
}

# Optional fields a ministry admin may switch on per form
OPTIONAL_FIELDS = {
    FormType.CONVERT: [
        'date_of_birth', 'country', 'gender', 'age_group', 'address', 'salvation_decision',
        'wants_contact', 'is_church_member', 'prayer_request',
    ],
    FormType.NEW_MEMBER: [
        'date_of_birth', 'country', 'gender', 'age_group', 'address', 'notes',
    ],
    FormType.MEMBER: [
        'date_of_birth', 'country', 'gender', 'age_group', 'address', 'member_since', 'notes',
    ],
}


def split_full_name(full_name):
    parts = (full_name or '').strip().split(' ', 1)
    return parts[0], (parts[1] if len(parts) > 1 else '')


class MinistryService:
    """Churches: creation from sign-ups, archive/reinstate, links and form settings."""

    # ─── Queries ──────────────────────────────────────────────────────────

    @staticmethod
    def with_counts(queryset):
        return queryset.annotate(
            leader_count=Count(
                'staff_profiles',
                filter=Q(staff_profiles__role=Roles.LEADER),
                distinct=True,
            ),
            convert_count=Count('converts', distinct=True),
        )

    # ─── Lifecycle ────────────────────────────────────────────────────────

    @staticmethod
    @transaction.atomic
    def create_church(name, location='', plan=Plan.FREE, admin_email=None, admin_first_name='',
                      admin_last_name='', request=None):
        """
        Create a church, optionally with its first ministry admin.

        The admin gets a temporary password by email. Returns (church, admin_user).
        """
        from apps.accounts.services import StaffAccountService, generate_temporary_password
        from apps.communication.services_email import EmailService

        church = Church.objects.create(name=name, location=location, plan=plan)
        logger.info(f'Created church {church.pk} ({church.name})')

        if not admin_email:
            return church, None

        password = generate_temporary_password()
        user = StaffAccountService.create_staff_user(
            admin_email,
            password,
            Roles.MINISTRY_ADMIN,
            church=church,
            first_name=admin_first_name,
            last_name=admin_last_name,
        )
        EmailService.send_account_approval(
            to=user.email,
            full_name=user.get_full_name() or user.email,
            church_name=church.name,
            temporary_password=password,
            login_url=build_url('/login', request),
            role_label='Ministry Admin',
        )
        return church, user

    @staticmethod
    def archive(church):
        church.delete()
        logger.info(f'Archived church {church.pk} ({church.name})')

    @staticmethod
    def reinstate(church):
        church.restore()
        logger.info(f'Reinstated church {church.pk} ({church.name})')

    @staticmethod
    @transaction.atomic
    def delete_permanently(church):
        """Remove an archived church, its staff users and all of its records."""
        from django.contrib.auth import get_user_model

        if not church.is_deleted:
            raise ValueError('Only archived ministries can be deleted permanently.')

        User = get_user_model()
        name = church.name
        User.objects.filter(staff_profile__church=church).delete()
        church.hard_delete()
        logger.warning(f'Permanently deleted church {name}')

    # ─── Public links ─────────────────────────────────────────────────────

    @staticmethod
    def form_url(church, form_type=FormType.CONVERT, request=None):
        token = church.get_form_token(form_type)
        return build_url(FORM_PATHS[form_type].format(token=token), request)

    @classmethod
    def form_links(cls, church, request=None):
        return {
            form_type: {
                'token': church.get_form_token(form_type),
                'url': cls.form_url(church, form_type, request),
            }
            for form_type in FORM_PATHS
        }

    @classmethod
    def qr_code_png(cls, church, form_type=FormType.CONVERT, request=None):
        """PNG bytes of a QR code pointing at one public form."""
        image = qrcode.make(cls.form_url(church, form_type, request))
        buffer = io.BytesIO()
        image.save(buffer, format='PNG')
        return buffer.getvalue()

    # ─── Form configuration ───────────────────────────────────────────────

    @staticmethod
    def get_form_configuration(church, form_type):
        config = FormConfiguration.objects.filter(church=church, form_type=form_type).first()
        if config is None:
            config = FormConfiguration(church=church, form_type=form_type)
        return config

    @staticmethod
    def save_form_configuration(church, form_type, data):
        enabled = [
            field for field in data.get('enabled_fields', [])
            if field in OPTIONAL_FIELDS[form_type]
        ]
        config, _ = FormConfiguration.objects.update_or_create(
            church=church,
            form_type=form_type,
            defaults={
                'title': data.get('title', ''),
                'description': data.get('description', ''),
                'success_message': data.get('success_message', ''),
                'enabled_fields': enabled,
            },
        )
        return config


class RequestReviewService:
    """Platform admin review of account and ministry requests."""

    @staticmethod
    def _mark_reviewed(obj, reviewer, status):
        obj.status = status
        obj.reviewed_by = reviewer
        obj.reviewed_at = timezone.now()

    @staticmethod
    def _check_pending(obj):
        if obj.status != RequestStatus.PENDING:
            raise ValueError(f'This request has already been {obj.get_status_display().lower()}.')

    # ─── Account requests ─────────────────────────────────────────────────

    @staticmethod
    def resolve_church(account_request):
        if account_request.church_id:
            return account_request.church
        return Church.objects.filter(name__iexact=account_request.church_name.strip()).first()

    @classmethod
    @transaction.atomic
    def approve_account_request(cls, account_request, reviewer, request=None):
        """
        Create the LEADER account and email a temporary password.

        Returns (user, temporary_password, email_sent).
        """
        from apps.accounts.services import StaffAccountService, generate_temporary_password
        from apps.communication.services_email import EmailService

        cls._check_pending(account_request)
        church = cls.resolve_church(account_request)
        if church is None:
            raise ValueError(f'No ministry named "{account_request.church_name}" was found.')

        first_name, last_name = split_full_name(account_request.full_name)
        password = generate_temporary_password()
        user = StaffAccountService.create_staff_user(
            account_request.email,
            password,
            Roles.LEADER,
            church=church,
            first_name=first_name,
            last_name=last_name,
            phone=account_request.phone,
        )

        account_request.church = church
        cls._mark_reviewed(account_request, reviewer, RequestStatus.APPROVED)
        account_request.save()

        sent = EmailService.send_account_approval(
            to=user.email,
            full_name=account_request.full_name,
            church_name=church.name,
            temporary_password=password,
            login_url=build_url('/login', request),
        )
        logger.info(f'Approved account request {account_request.pk} for {user.email}')
        return user, password, sent

    @classmethod
    def deny_account_request(cls, account_request, reviewer):
        from apps.communication.services_email import EmailService

        cls._check_pending(account_request)
        cls._mark_reviewed(account_request, reviewer, RequestStatus.DENIED)
        account_request.save()

        EmailService.send_account_denial(
            to=account_request.email,
            full_name=account_request.full_name,
            church_name=account_request.church_name,
        )
        logger.info(f'Denied account request {account_request.pk}')

    # ─── Ministry requests ────────────────────────────────────────────────

    @classmethod
    @transaction.atomic
    def approve_ministry_request(cls, ministry_request, reviewer, overrides=None, request=None):
        """
        Create the church and its MINISTRY_ADMIN from a sign-up.

        The reviewer may correct any submitted field through ``overrides``.
        Paid plans must have completed checkout first.
        Returns (church, user, temporary_password, email_sent).
        """
        from apps.accounts.services import StaffAccountService, generate_temporary_password
        from apps.communication.services_email import EmailService

        cls._check_pending(ministry_request)
        for field, value in (overrides or {}).items():
            setattr(ministry_request, field, value)

        if ministry_request.requires_payment and not ministry_request.is_paid:
            raise ValueError('Payment for this ministry has not been received yet.')
        if StaffAccountService.email_in_use(ministry_request.admin_email):
            raise ValueError('Email already in use')

        church = Church.objects.create(
            name=ministry_request.ministry_name,
            location=ministry_request.location,
            plan=ministry_request.plan if ministry_request.plan in Plan.VALUES else Plan.FREE,
            stripe_customer_id=ministry_request.stripe_customer_id,
            stripe_subscription_id=ministry_request.stripe_subscription_id,
        )

        first_name, last_name = split_full_name(ministry_request.admin_full_name)
        password = generate_temporary_password()
        user = StaffAccountService.create_staff_user(
            ministry_request.admin_email,
            password,
            Roles.MINISTRY_ADMIN,
            church=church,
            first_name=first_name,
            last_name=last_name,
            phone=ministry_request.admin_phone,
        )

        ministry_request.church = church
        cls._mark_reviewed(ministry_request, reviewer, RequestStatus.APPROVED)
        ministry_request.save()

        sent = EmailService.send_account_approval(
            to=user.email,
            full_name=ministry_request.admin_full_name,
            church_name=church.name,
            temporary_password=password,
            login_url=build_url('/login', request),
            role_label='Ministry Admin',
        )
        logger.info(f'Approved ministry request {ministry_request.pk}: church {church.pk}')
        return church, user, password, sent

    @classmethod
    def deny_ministry_request(cls, ministry_request, reviewer):
        from apps.communication.services_email import EmailService

        cls._check_pending(ministry_request)
        cls._mark_reviewed(ministry_request, reviewer, RequestStatus.DENIED)
        ministry_request.save()

        EmailService.send_account_denial(
            to=ministry_request.admin_email,
            full_name=ministry_request.admin_full_name,
            church_name=ministry_request.ministry_name,
        )
        logger.info(f'Denied ministry request {ministry_request.pk}')

    @staticmethod
    def payment_status(ministry_request):
        if not ministry_request.requires_payment:
            return 'not_required'
        return 'paid' if ministry_request.is_paid else 'pending'
