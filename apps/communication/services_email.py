"""Plain-text transactional emails sent through Django's mail backend."""
import logging

from django.conf import settings
from django.core.mail import send_mail

from apps.core.constants import PersonCategory
from apps.core.utils import format_followup_datetime

logger = logging.getLogger(__name__)

PLATFORM_NAME = 'MinistryConnect'

# Subject shown to the person, per category
PERSON_SUBJECTS = {
    PersonCategory.CONVERTS: 'Your Faith Journey Matters - {church}',
    PersonCategory.NEW_MEMBERS: 'Welcome to the Family - {church}',
    PersonCategory.MEMBERS: "We'd Love to Check In - {church}",
    PersonCategory.GUESTS: 'Great to Have You Visit - {church}',
}
DEFAULT_PERSON_SUBJECT = "We'd love to connect with you - {church}"


class EmailService:
    """
    Builds and sends the app's emails.

    Sending never raises: failures are logged and reported as False so a
    mail outage cannot break the request that triggered it.
    """

    @staticmethod
    def send(to, subject, message):
        if not to:
            return False
        try:
            sent = send_mail(
                subject,
                message,
                settings.DEFAULT_FROM_EMAIL,
                [to],
                fail_silently=False,
            )
        except Exception as e:
            logger.error(f'Failed to send email "{subject}" to {to}: {e}')
            return False
        logger.info(f'Email "{subject}" sent to {to}')
        return bool(sent)

    # ── follow-ups ────────────────────────────────────────────────────────────

    @classmethod
    def send_followup_notification(cls, *, category, person_name, person_email, leader_name,
                                   leader_email, church_name, followup_date, followup_time=None,
                                   video_link='', custom_leader_subject='', custom_leader_message='',
                                   custom_person_subject='', custom_person_message=''):
        """Notify the leader and, when an address exists, the person of a new follow-up."""
        when = format_followup_datetime(followup_date, followup_time)
        video = f'\n\nVideo call link: {video_link}\n(no account required)' if video_link else ''
        label = PersonCategory.LABELS.get(category, 'person')

        leader_subject = custom_leader_subject or f'{label.capitalize()} Follow-Up: {person_name} on {when}'
        if custom_leader_message:
            leader_body = f'Hello {leader_name},\n\n{custom_leader_message}\n\nFollow-up date: {when}'
        else:
            leader_body = (
                f'Hello {leader_name},\n\n'
                f'This is a reminder that you have a scheduled follow-up with {person_name} ({label}).\n\n'
                f'Follow-up date: {when}\n\n'
                f'Please ensure to reach out and connect on the scheduled date.'
            )
        cls.send(leader_email, leader_subject, f'{leader_body}{video}\n\nBlessings,\n{church_name}')

        if not person_email:
            return

        person_subject = custom_person_subject or PERSON_SUBJECTS.get(
            category, DEFAULT_PERSON_SUBJECT
        ).format(church=church_name)
        if custom_person_message:
            person_body = f'Hello {person_name},\n\n{custom_person_message}\n\nExpected contact date: {when}'
        else:
            person_body = (
                f'Hello {person_name},\n\n'
                f'Someone from {church_name} will be reaching out soon to connect with you '
                f'and see how we can support you.\n\n'
                f'Expected contact date: {when}\n\n'
                f"If you have any prayer requests or need to connect sooner, please don't hesitate to reach out."
            )
        cls.send(person_email, person_subject, f'{person_body}{video}\n\nBlessings,\n{church_name}')

    @classmethod
    def send_followup_reminder(cls, *, to, recipient_name, other_name, church_name, followup_date,
                               followup_time=None, video_link='', subject='', message='',
                               is_leader=False):
        """Day-before reminder for a scheduled follow-up."""
        when = format_followup_datetime(followup_date, followup_time)
        if is_leader:
            default_subject = f'Reminder: Follow-up with {other_name} tomorrow'
            default_body = f'This is a reminder that you have a follow-up with {other_name} on {when}.'
        else:
            default_subject = f'Reminder: {church_name} will connect with you tomorrow'
            default_body = f'This is a reminder that {church_name} has a follow-up scheduled with you on {when}.'

        body = f'Hello {recipient_name},\n\n{message or default_body}'
        if video_link:
            body += f'\n\nJoin the video call: {video_link}'
        body += f'\n\nBlessings,\n{church_name}'
        return cls.send(to, subject or default_subject, body)

    # ── staff accounts ────────────────────────────────────────────────────────

    @classmethod
    def send_account_approval(cls, *, to, full_name, church_name, temporary_password, login_url,
                              role_label='Leader'):
        subject = f'Your {role_label} Account Has Been Approved - {PLATFORM_NAME}'
        message = (
            f'Hello {full_name},\n\n'
            f'Your {role_label.lower()} account for {church_name} has been approved.\n\n'
            f'Email: {to}\n'
            f'Temporary password: {temporary_password}\n\n'
            f'Sign in at {login_url} and change your password right away.\n\n'
            f'{PLATFORM_NAME}'
        )
        return cls.send(to, subject, message)

    @classmethod
    def send_account_denial(cls, *, to, full_name, church_name):
        subject = f'Account Request Update - {PLATFORM_NAME}'
        message = (
            f'Hello {full_name},\n\n'
            f'Thank you for your interest in joining {church_name} on {PLATFORM_NAME}. '
            f'After review, your account request was not approved at this time.\n\n'
            f'{PLATFORM_NAME}'
        )
        return cls.send(to, subject, message)

    @classmethod
    def send_ministry_removal(cls, *, to, full_name, ministry_name):
        subject = f'You have been removed from {ministry_name}'
        message = (
            f'Hello {full_name},\n\n'
            f'Your leader access to {ministry_name} has been removed by a ministry administrator.\n\n'
            f'{PLATFORM_NAME}'
        )
        return cls.send(to, subject, message)

    @classmethod
    def send_password_reset(cls, *, to, full_name, reset_url):
        subject = f'Reset your {PLATFORM_NAME} password'
        message = (
            f'Hello {full_name},\n\n'
            f'Use the link below to choose a new password. It expires in one hour.\n\n'
            f'{reset_url}\n\n'
            f"If you did not ask for this, you can ignore this email."
        )
        return cls.send(to, subject, message)

    # ── member portal ─────────────────────────────────────────────────────────

    @classmethod
    def send_claim_invitation(cls, *, to, first_name, church_name, claim_url):
        subject = f'Welcome to {church_name} - set up your member account'
        message = (
            f'Hello {first_name},\n\n'
            f'{church_name} has created a member portal account for you. '
            f'Follow your journey, keep a journal and share prayer requests.\n\n'
            f'Set your password here (link valid for 24 hours):\n{claim_url}\n\n'
            f'Blessings,\n{church_name}'
        )
        return cls.send(to, subject, message)

    @classmethod
    def send_added_to_ministry(cls, *, to, first_name, church_name, login_url):
        subject = f"You've been added to {church_name}"
        message = (
            f'Hello {first_name},\n\n'
            f'{church_name} is now linked to your member portal account. '
            f'Sign in to switch between your ministries:\n{login_url}\n\n'
            f'Blessings,\n{church_name}'
        )
        return cls.send(to, subject, message)

    @classmethod
    def send_promoted_to_member(cls, *, to, first_name, church_name, login_url):
        subject = f'Welcome as a member of {church_name}'
        message = (
            f'Hello {first_name},\n\n'
            f'You are now a member of {church_name}. Your portal account has been updated:\n'
            f'{login_url}\n\n'
            f'Blessings,\n{church_name}'
        )
        return cls.send(to, subject, message)

    # ── announcements ─────────────────────────────────────────────────────────

    @classmethod
    def send_announcement(cls, *, to, subject, message, church_name):
        return cls.send(to, subject, f'{message}\n\n{church_name}')
