"""Business logic for member portal accounts: provisioning, claims and sign-in."""
import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.constants import MemberAccountStatus, PersonCategory, RelationshipType
from apps.core.utils import build_url

from .models import AccountClaimToken, MemberAccount, MinistryAffiliation, Person

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

INVALID_CREDENTIALS = 'Invalid email or password'

RELATIONSHIP_CATEGORIES = {
    RelationshipType.CONVERT: PersonCategory.CONVERTS,
    RelationshipType.NEW_MEMBER: PersonCategory.NEW_MEMBERS,
    RelationshipType.MEMBER: PersonCategory.MEMBERS,
}

CATEGORY_RELATIONSHIPS = {category: rel for rel, category in RELATIONSHIP_CATEGORIES.items()}


def claim_url(raw_token, request=None):
    return build_url(f'/member-portal/claim?token={raw_token}', request)


def login_url(request=None):
    return build_url('/member-portal/login', request)


class MemberAccountService:
    """Creates portal accounts for tracked people and runs the claim and login flows."""

    # ─── Provisioning ─────────────────────────────────────────────────────

    @classmethod
    @transaction.atomic
    def provision(cls, record, relationship, notify=True):
        """
        Give the person behind a convert, new member or member record a
        portal account in that record's church.

        A new account starts PENDING_CLAIM and gets a claim link by email.
        An active account is told it was added to the ministry, or that it
        became a member. Returns (account, raw_claim_token or None).
        """
        email = (record.email or '').strip().lower()
        if not email:
            return None, None

        person, _ = Person.objects.get_or_create(
            email=email,
            defaults={
                'first_name': record.first_name,
                'last_name': record.last_name,
                'phone': record.phone or '',
            },
        )

        account = MemberAccount.objects.filter(person=person).first()
        raw_token = None
        if account is None:
            account = MemberAccount.objects.create(person=person)
            _, raw_token = AccountClaimToken.issue(account)
            logger.info(f'Created member account for {email}')

        affiliation, created, upgraded = cls._link(person, record, relationship)

        if notify:
            cls._notify(account, person, record.church, raw_token, created, upgraded)
        return account, raw_token

    @staticmethod
    def _link(person, record, relationship):
        """Create or update the affiliation. Returns (affiliation, created, became_member)."""
        field = MinistryAffiliation.RECORD_FIELDS[relationship]
        affiliation = MinistryAffiliation.objects.filter(person=person, church=record.church).first()

        if affiliation is None:
            affiliation = MinistryAffiliation.objects.create(
                person=person,
                church=record.church,
                relationship_type=relationship,
                **{field: record},
            )
            return affiliation, True, False

        upgraded = (
            relationship == RelationshipType.MEMBER
            and affiliation.relationship_type != RelationshipType.MEMBER
        )
        affiliation.relationship_type = relationship
        setattr(affiliation, field, record)
        affiliation.save()
        return affiliation, False, upgraded

    @staticmethod
    def _notify(account, person, church, raw_token, created, upgraded):
        from apps.communication.services_email import EmailService

        if raw_token:
            EmailService.send_claim_invitation(
                to=person.email,
                first_name=person.first_name,
                church_name=church.name,
                claim_url=claim_url(raw_token),
            )
        elif account.status != MemberAccountStatus.ACTIVE:
            return
        elif upgraded:
            EmailService.send_promoted_to_member(
                to=person.email,
                first_name=person.first_name,
                church_name=church.name,
                login_url=login_url(),
            )
        elif created:
            EmailService.send_added_to_ministry(
                to=person.email,
                first_name=person.first_name,
                church_name=church.name,
                login_url=login_url(),
            )

    @classmethod
    def handle_promotion(cls, promoted, old_category, old_pk):
        """Point the person's affiliation at the record created by a promotion."""
        relationship = CATEGORY_RELATIONSHIPS.get(promoted.category)
        if relationship is None:
            return None

        logger.info(f'Moving portal affiliation from {old_category} {old_pk} to {promoted.category} {promoted.pk}')
        account, _ = cls.provision(promoted, relationship)
        return account

    # ─── Claiming ─────────────────────────────────────────────────────────

    @staticmethod
    def validate_password(password):
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')

    @staticmethod
    def resend_claim(account, church=None):
        """Invalidate unused claim links and email a fresh one. Returns the raw token."""
        from apps.communication.services_email import EmailService

        if account.status != MemberAccountStatus.PENDING_CLAIM:
            raise ValueError('Account already claimed - member can use password reset instead')

        AccountClaimToken.objects.filter(account=account, used_at__isnull=True).update(used_at=timezone.now())
        _, raw_token = AccountClaimToken.issue(account)

        if church is None:
            affiliation = account.person.affiliations.select_related('church').first()
            church = affiliation.church if affiliation else None

        EmailService.send_claim_invitation(
            to=account.person.email,
            first_name=account.person.first_name,
            church_name=church.name if church else 'your ministry',
            claim_url=claim_url(raw_token),
        )
        logger.info(f'Resent claim link to {account.person.email}')
        return raw_token

    @classmethod
    @transaction.atomic
    def claim(cls, raw_token, password):
        """Set the password of a PENDING_CLAIM account and activate it."""
        cls.validate_password(password)
        token = (
            AccountClaimToken.objects
            .select_for_update()
            .filter(token_hash=AccountClaimToken.hash_token(raw_token or ''))
            .select_related('account__person')
            .first()
        )
        if token is None or not token.is_usable:
            raise ValueError('Invalid or expired token')

        account = token.account
        if account.status == MemberAccountStatus.SUSPENDED:
            raise ValueError('Account is suspended')

        account.set_password(password)
        account.status = MemberAccountStatus.ACTIVE
        account.save(update_fields=['password', 'status', 'updated_at'])
        token.used_at = timezone.now()
        token.save(update_fields=['used_at', 'updated_at'])
        logger.info(f'Member account claimed by {account.person.email}')
        return account

    # ─── Sign-in ──────────────────────────────────────────────────────────

    @staticmethod
    def authenticate(email, password):
        """Return the account for valid credentials, else raise ValueError with the reason."""
        account = (
            MemberAccount.objects
            .filter(person__email__iexact=(email or '').strip())
            .select_related('person')
            .first()
        )
        if account is None:
            raise ValueError(INVALID_CREDENTIALS)
        if account.status == MemberAccountStatus.SUSPENDED:
            raise ValueError('Account is suspended')
        if account.status == MemberAccountStatus.PENDING_CLAIM or not account.password:
            raise ValueError('Please set up your password first using the link sent to your email')
        if not account.check_password(password):
            raise ValueError(INVALID_CREDENTIALS)

        account.last_login = timezone.now()
        account.save(update_fields=['last_login', 'updated_at'])
        return account

    @staticmethod
    def set_status(account, status):
        if status not in (MemberAccountStatus.ACTIVE, MemberAccountStatus.SUSPENDED):
            raise ValueError('Status must be ACTIVE or SUSPENDED.')
        if status == MemberAccountStatus.ACTIVE and not account.password:
            raise ValueError('This account has not been claimed yet.')
        account.status = status
        account.save(update_fields=['status', 'updated_at'])
        logger.info(f'Member account {account.person.email} set to {status}')

    @staticmethod
    def expire_claim_tokens():
        """Delete claim tokens that can no longer be used."""
        count, _ = AccountClaimToken.objects.filter(
            Q(expires_at__lt=timezone.now()) | Q(used_at__isnull=False)
        ).delete()
        return count


class PortalService:
    """What a signed-in member sees: ministries, journey and follow-ups."""

    @staticmethod
    def affiliations(account):
        return account.person.affiliations.select_related('church').filter(church__deleted_at__isnull=True)

    @classmethod
    def current_affiliation(cls, account, church_id=None):
        affiliations = cls.affiliations(account)
        if church_id:
            selected = affiliations.filter(church_id=church_id).first()
            if selected is not None:
                return selected
        return affiliations.first()

    @staticmethod
    def journey(affiliation):
        """The tracked record behind an affiliation and its past check-ins."""
        from apps.followups.services import checkins_for

        record = affiliation.record
        data = {
            'ministry_id': str(affiliation.church_id),
            'ministry_name': affiliation.church.name,
            'relationship_type': affiliation.relationship_type,
            'joined_at': affiliation.created_at,
            'record': None,
            'checkins': [],
        }
        if record is None:
            return data

        data['record'] = {
            'id': str(record.pk),
            'category': record.category,
            'status': record.status,
            'display_status': record.display_status,
            'created_at': record.created_at,
        }
        data['checkins'] = [
            {
                'id': str(checkin.pk),
                'checkin_date': checkin.checkin_date,
                'outcome': checkin.outcome,
                'completed_at': checkin.completed_at,
            }
            for checkin in checkins_for(record).filter(completed_at__isnull=False)
        ]
        return data

    @staticmethod
    def upcoming_followups(affiliation):
        """Scheduled, not yet completed check-ins of the linked record."""
        from apps.followups.services import checkins_for

        record = affiliation.record
        if record is None:
            return []
        return list(
            checkins_for(record)
            .filter(
                next_followup_date__gte=timezone.localdate(),
                completed_at__isnull=True,
            )
            .order_by('next_followup_date', 'next_followup_time')
        )
