"""Centralized constants and choices for the application."""
from django.db import models
from django.utils.translation import gettext_lazy as _


class Roles:
    """Staff role definitions."""
    LEADER = 'LEADER'
    MINISTRY_ADMIN = 'MINISTRY_ADMIN'
    ADMIN = 'ADMIN'

    CHOICES = [
        (LEADER, _('Leader')),
        (MINISTRY_ADMIN, _('Ministry admin')),
        (ADMIN, _('Platform admin')),
    ]

    # Roles bound to a single church
    MINISTRY_ROLES = [LEADER, MINISTRY_ADMIN]
    ALL_ROLES = [LEADER, MINISTRY_ADMIN, ADMIN]

    # Role hierarchy (index = power level)
    HIERARCHY = [LEADER, MINISTRY_ADMIN, ADMIN]


class FollowUpStatus:
    """Status of a tracked person in the follow-up pipeline."""
    NEW = 'NEW'
    SCHEDULED = 'SCHEDULED'
    CONNECTED = 'CONNECTED'
    NO_RESPONSE = 'NO_RESPONSE'
    NEEDS_PRAYER = 'NEEDS_PRAYER'
    REFERRED = 'REFERRED'
    NOT_COMPLETED = 'NOT_COMPLETED'
    NEVER_CONTACTED = 'NEVER_CONTACTED'
    ACTIVE = 'ACTIVE'
    IN_PROGRESS = 'IN_PROGRESS'
    INACTIVE = 'INACTIVE'

    CHOICES = [
        (NEW, _('New')),
        (SCHEDULED, _('Scheduled')),
        (CONNECTED, _('Connected')),
        (NO_RESPONSE, _('No response')),
        (NEEDS_PRAYER, _('Needs prayer')),
        (REFERRED, _('Referred')),
        (NOT_COMPLETED, _('Not completed')),
        (NEVER_CONTACTED, _('Never contacted')),
        (ACTIVE, _('Active')),
        (IN_PROGRESS, _('In progress')),
        (INACTIVE, _('Inactive')),
    ]

    VALUES = [value for value, _label in CHOICES]


class DisplayStatus:
    """
    Simplified status buckets shown to staff.

    Several stored statuses collapse into one bucket; COMPLETED and
    NOT_CONNECTED are written back as CONNECTED and NOT_COMPLETED.
    """
    NEW = 'NEW'
    SCHEDULED = 'SCHEDULED'
    COMPLETED = 'COMPLETED'
    NOT_CONNECTED = 'NOT_CONNECTED'

    CHOICES = [
        (NEW, _('New')),
        (SCHEDULED, _('Scheduled')),
        (COMPLETED, _('Completed')),
        (NOT_CONNECTED, _('Not Connected')),
    ]

    VALUES = [NEW, SCHEDULED, COMPLETED, NOT_CONNECTED]

    TO_STORED = {
        NEW: FollowUpStatus.NEW,
        SCHEDULED: FollowUpStatus.SCHEDULED,
        COMPLETED: FollowUpStatus.CONNECTED,
        NOT_CONNECTED: FollowUpStatus.NOT_COMPLETED,
    }

    FROM_STORED = {
        FollowUpStatus.NEW: NEW,
        FollowUpStatus.SCHEDULED: SCHEDULED,
        FollowUpStatus.IN_PROGRESS: SCHEDULED,
        FollowUpStatus.CONNECTED: COMPLETED,
        FollowUpStatus.ACTIVE: COMPLETED,
        FollowUpStatus.NO_RESPONSE: NOT_CONNECTED,
        FollowUpStatus.NEEDS_PRAYER: NOT_CONNECTED,
        FollowUpStatus.REFERRED: NOT_CONNECTED,
        FollowUpStatus.NOT_COMPLETED: NOT_CONNECTED,
        FollowUpStatus.NEVER_CONTACTED: NOT_CONNECTED,
        FollowUpStatus.INACTIVE: NOT_CONNECTED,
    }

    EXPORT_LABELS = {
        NEW: 'New',
        SCHEDULED: 'Scheduled',
        COMPLETED: 'Completed',
        NOT_CONNECTED: 'Not Connected',
    }

    @classmethod
    def for_status(cls, status):
        return cls.FROM_STORED.get(status, cls.NEW)

    @classmethod
    def stored_statuses(cls, display):
        """All stored statuses that fall into a display bucket."""
        return [stored for stored, bucket in cls.FROM_STORED.items() if bucket == display]

    @classmethod
    def to_stored(cls, value):
        """Accept a display bucket or a stored status and return a stored status."""
        if value in cls.TO_STORED:
            return cls.TO_STORED[value]
        return value


class CheckinOutcome:
    """Outcome recorded on a follow-up check-in."""
    CONNECTED = 'CONNECTED'
    NO_RESPONSE = 'NO_RESPONSE'
    NEEDS_PRAYER = 'NEEDS_PRAYER'
    NEEDS_FOLLOWUP = 'NEEDS_FOLLOWUP'
    SCHEDULED_VISIT = 'SCHEDULED_VISIT'
    REFERRED = 'REFERRED'
    NOT_COMPLETED = 'NOT_COMPLETED'
    OTHER = 'OTHER'

    CHOICES = [
        (CONNECTED, _('Connected')),
        (NO_RESPONSE, _('No response')),
        (NEEDS_PRAYER, _('Needs prayer')),
        (NEEDS_FOLLOWUP, _('Needs follow-up')),
        (SCHEDULED_VISIT, _('Scheduled visit')),
        (REFERRED, _('Referred')),
        (NOT_COMPLETED, _('Not completed')),
        (OTHER, _('Other')),
    ]

    # Outcomes that leave the person waiting on another follow-up
    PENDING = [NEEDS_FOLLOWUP, SCHEDULED_VISIT]

    @classmethod
    def resulting_status(cls, outcome):
        if outcome == cls.CONNECTED:
            return FollowUpStatus.CONNECTED
        if outcome in cls.PENDING:
            return FollowUpStatus.SCHEDULED
        return FollowUpStatus.NOT_COMPLETED


class NewMemberStage:
    """Three-touch follow-up pipeline for new members."""
    NEW = 'NEW'
    CONTACT_NEW_MEMBER = 'CONTACT_NEW_MEMBER'
    SCHEDULED = 'SCHEDULED'
    FIRST_COMPLETED = 'FIRST_COMPLETED'
    INITIATE_SECOND = 'INITIATE_SECOND'
    SECOND_SCHEDULED = 'SECOND_SCHEDULED'
    SECOND_COMPLETED = 'SECOND_COMPLETED'
    INITIATE_FINAL = 'INITIATE_FINAL'
    FINAL_SCHEDULED = 'FINAL_SCHEDULED'
    FINAL_COMPLETED = 'FINAL_COMPLETED'

    CHOICES = [
        (NEW, _('New')),
        (CONTACT_NEW_MEMBER, _('Contact new member')),
        (SCHEDULED, _('First follow-up scheduled')),
        (FIRST_COMPLETED, _('First follow-up completed')),
        (INITIATE_SECOND, _('Initiate second follow-up')),
        (SECOND_SCHEDULED, _('Second follow-up scheduled')),
        (SECOND_COMPLETED, _('Second follow-up completed')),
        (INITIATE_FINAL, _('Initiate final follow-up')),
        (FINAL_SCHEDULED, _('Final follow-up scheduled')),
        (FINAL_COMPLETED, _('Final follow-up completed')),
    ]

    # Stage reached when a follow-up is scheduled from the given stage
    ON_SCHEDULE = {
        NEW: SCHEDULED,
        CONTACT_NEW_MEMBER: SCHEDULED,
        INITIATE_SECOND: SECOND_SCHEDULED,
        FIRST_COMPLETED: SECOND_SCHEDULED,
        INITIATE_FINAL: FINAL_SCHEDULED,
        SECOND_COMPLETED: FINAL_SCHEDULED,
    }

    # Stage reached when a scheduled follow-up is completed as connected
    ON_CONNECTED = {
        SCHEDULED: FIRST_COMPLETED,
        SECOND_SCHEDULED: SECOND_COMPLETED,
        FINAL_SCHEDULED: FINAL_COMPLETED,
    }


class NotificationMethod:
    """Channels used for follow-up reminders."""
    EMAIL = 'EMAIL'
    SMS = 'SMS'
    MMS = 'MMS'
    EMAIL_SMS = 'EMAIL_SMS'
    EMAIL_MMS = 'EMAIL_MMS'

    CHOICES = [
        (EMAIL, _('Email')),
        (SMS, _('SMS')),
        (MMS, _('MMS')),
        (EMAIL_SMS, _('Email and SMS')),
        (EMAIL_MMS, _('Email and MMS')),
    ]

    SMS_METHODS = [SMS, EMAIL_SMS]
    MMS_METHODS = [MMS, EMAIL_MMS]


class PersonCategory:
    """The four tracked person types."""
    CONVERTS = 'converts'
    NEW_MEMBERS = 'new_members'
    MEMBERS = 'members'
    GUESTS = 'guests'

    CHOICES = [
        (CONVERTS, _('Converts')),
        (NEW_MEMBERS, _('New members')),
        (MEMBERS, _('Members')),
        (GUESTS, _('Guests')),
    ]

    VALUES = [CONVERTS, NEW_MEMBERS, MEMBERS, GUESTS]

    LABELS = {
        CONVERTS: 'new convert',
        NEW_MEMBERS: 'new member',
        MEMBERS: 'member',
        GUESTS: 'guest',
    }


class Gender:
    MALE = 'Male'
    FEMALE = 'Female'

    CHOICES = [
        (MALE, _('Male')),
        (FEMALE, _('Female')),
    ]


class AgeGroup:
    UNDER_18 = 'Under 18'
    AGE_18_24 = '18-24'
    AGE_25_34 = '25-34'
    AGE_35_PLUS = '35 and Above'

    CHOICES = [
        (UNDER_18, _('Under 18')),
        (AGE_18_24, _('18-24')),
        (AGE_25_34, _('25-34')),
        (AGE_35_PLUS, _('35 and Above')),
    ]


class SalvationDecision:
    ACCEPTED = 'I just made Jesus Christ my Lord and Savior'
    REDEDICATED = 'I have rededicated my life to Jesus'

    CHOICES = [
        (ACCEPTED, _('I just made Jesus Christ my Lord and Savior')),
        (REDEDICATED, _('I have rededicated my life to Jesus')),
    ]


class Plan:
    """Subscription plans and their limits."""
    FREE = 'free'
    FOUNDATIONS = 'foundations'
    FORMATION = 'formation'
    STEWARDSHIP = 'stewardship'

    CHOICES = [
        (FREE, _('Free')),
        (FOUNDATIONS, _('Foundations')),
        (FORMATION, _('Formation')),
        (STEWARDSHIP, _('Stewardship')),
    ]

    VALUES = [FREE, FOUNDATIONS, FORMATION, STEWARDSHIP]

    PAID = [FOUNDATIONS, FORMATION, STEWARDSHIP]

    LEADER_LIMITS = {
        FREE: 1,
        FOUNDATIONS: 1,
        FORMATION: 3,
        STEWARDSHIP: 10,
    }

    # (sms, mms) per billing period
    MESSAGE_LIMITS = {
        FREE: (0, 0),
        FOUNDATIONS: (500, 250),
        FORMATION: (2000, 500),
        STEWARDSHIP: (5000, 1000),
    }

    # Monthly price in USD cents
    PRICES = {
        FOUNDATIONS: 1999,
        FORMATION: 2999,
        STEWARDSHIP: 5999,
    }


class SubscriptionStatus:
    ACTIVE = 'active'
    PAST_DUE = 'past_due'
    SUSPENDED = 'suspended'
    CANCELED = 'canceled'

    CHOICES = [
        (ACTIVE, _('Active')),
        (PAST_DUE, _('Past due')),
        (SUSPENDED, _('Suspended')),
        (CANCELED, _('Canceled')),
    ]

    # Stripe subscription status -> local status
    FROM_STRIPE = {
        'past_due': PAST_DUE,
        'canceled': SUSPENDED,
        'unpaid': SUSPENDED,
        'active': ACTIVE,
        'trialing': ACTIVE,
    }


class RequestStatus(models.TextChoices):
    """Review status for account and ministry requests."""
    PENDING = 'PENDING', _('Pending')
    APPROVED = 'APPROVED', _('Approved')
    DENIED = 'DENIED', _('Denied')


class FormType(models.TextChoices):
    CONVERT = 'convert', _('Convert')
    NEW_MEMBER = 'new_member', _('New member')
    MEMBER = 'member', _('Member')


class MemberAccountStatus(models.TextChoices):
    PENDING_CLAIM = 'PENDING_CLAIM', _('Pending claim')
    ACTIVE = 'ACTIVE', _('Active')
    SUSPENDED = 'SUSPENDED', _('Suspended')


class RelationshipType(models.TextChoices):
    CONVERT = 'convert', _('Convert')
    NEW_MEMBER = 'new_member', _('New member')
    MEMBER = 'member', _('Member')


class PrayerRequestStatus(models.TextChoices):
    SUBMITTED = 'SUBMITTED', _('Submitted')
    BEING_PRAYED_FOR = 'BEING_PRAYED_FOR', _('Being prayed for')
    ANSWERED = 'ANSWERED', _('Answered')


class ContactRequestStatus(models.TextChoices):
    NEW = 'NEW', _('New')
    IN_PROGRESS = 'IN_PROGRESS', _('In progress')
    RESOLVED = 'RESOLVED', _('Resolved')


class AnnouncementStatus(models.TextChoices):
    SCHEDULED = 'SCHEDULED', _('Scheduled')
    SENT = 'SENT', _('Sent')
    FAILED = 'FAILED', _('Failed')
    CANCELLED = 'CANCELLED', _('Cancelled')


class SMSStatus(models.TextChoices):
    PENDING = 'pending', _('Pending')
    SENT = 'sent', _('Sent')
    DELIVERED = 'delivered', _('Delivered')
    FAILED = 'failed', _('Failed')
    SKIPPED = 'skipped', _('Skipped')


class MessageKind(models.TextChoices):
    SMS = 'sms', _('SMS')
    MMS = 'mms', _('MMS')


class ReminderType(models.TextChoices):
    DAY_BEFORE = 'DAY_BEFORE', _('Day before')


class AuditAction(models.TextChoices):
    CREATE = 'create', _('Create')
    UPDATE = 'update', _('Update')
    DELETE = 'delete', _('Delete')
    EXPORT = 'export', _('Export')
    STATUS_CHANGE = 'status_change', _('Status change')
    APPROVE = 'approve', _('Approve')
    DENY = 'deny', _('Deny')
    ARCHIVE = 'archive', _('Archive')
    RESTORE = 'restore', _('Restore')
