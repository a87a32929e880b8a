"""Time-driven follow-up transitions and day-before reminders."""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError
from django.utils import timezone

from apps.core.constants import (
    CheckinOutcome, FollowUpStatus, NewMemberStage, ReminderType, SMSStatus,
)

from .models import Convert, NewMember
from .services import CHECKIN_MODELS, CHECKIN_PERSON_FIELDS, _message_kind, _staff_name

logger = logging.getLogger(__name__)


class FollowUpAutomationService:
    """
    Periodic jobs over follow-up records.

    Each method is idempotent and returns the number of rows it touched.
    """

    # ─── Expired follow-ups ───────────────────────────────────────────────

    @staticmethod
    def expire_scheduled_followups(today=None):
        """
        Close scheduled check-ins whose date has passed.

        The check-in becomes NOT_COMPLETED, and so does its person when they
        have no other follow-up still ahead.
        """
        today = today or timezone.localdate()
        count = 0

        for category, model in CHECKIN_MODELS.items():
            person_field = CHECKIN_PERSON_FIELDS[category]
            expired = model.objects.filter(
                next_followup_date__lt=today,
                completed_at__isnull=True,
            ).select_related(person_field)

            for checkin in expired:
                checkin.outcome = CheckinOutcome.NOT_COMPLETED
                checkin.completed_at = timezone.now()
                checkin.save(update_fields=['outcome', 'completed_at', 'updated_at'])

                person = checkin.person
                still_pending = model.objects.filter(
                    **{person_field: person},
                    next_followup_date__gte=today,
                    completed_at__isnull=True,
                ).exists()
                if person.status == FollowUpStatus.SCHEDULED and not still_pending:
                    person.status = FollowUpStatus.NOT_COMPLETED
                    person.save(update_fields=['status', 'updated_at'])

                logger.info(
                    f'Marked {category} follow-up {checkin.pk} as NOT_COMPLETED '
                    f'(was scheduled for {checkin.next_followup_date})'
                )
                count += 1

        return count

    # ─── Converts never contacted ─────────────────────────────────────────

    @staticmethod
    def mark_never_contacted(days=None):
        """Converts still NEW with no check-in after the grace period."""
        days = days or getattr(settings, 'NEVER_CONTACTED_AFTER_DAYS', 30)
        cutoff = timezone.now() - timedelta(days=days)

        count = Convert.objects.filter(
            status=FollowUpStatus.NEW,
            created_at__lte=cutoff,
            checkins__isnull=True,
        ).update(status=FollowUpStatus.NEVER_CONTACTED, updated_at=timezone.now())

        if count:
            logger.info(f'Marked {count} converts as NEVER_CONTACTED ({days}+ days with no follow-up)')
        return count

    # ─── New member stages ────────────────────────────────────────────────

    @staticmethod
    def _advance_stage(queryset, stage):
        count = 0
        for new_member in queryset:
            new_member.set_stage(stage)
            new_member.save(update_fields=['follow_up_stage', 'stage_updated_at', 'updated_at'])
            logger.info(f'New member {new_member.full_name} moved to {stage}')
            count += 1
        return count

    @classmethod
    def progress_new_member_stages(cls):
        """
        Move new members along when nobody acted in time.

        NEW without contact -> CONTACT_NEW_MEMBER, FIRST_COMPLETED ->
        INITIATE_SECOND, SECOND_COMPLETED -> INITIATE_FINAL.
        """
        now = timezone.now()
        contact_days = getattr(settings, 'NEW_MEMBER_CONTACT_AFTER_DAYS', 14)
        interval_days = getattr(settings, 'NEW_MEMBER_STAGE_INTERVAL_DAYS', 20)

        count = cls._advance_stage(
            NewMember.objects.filter(
                follow_up_stage=NewMemberStage.NEW,
                stage_updated_at__lte=now - timedelta(days=contact_days),
                checkins__isnull=True,
            ),
            NewMemberStage.CONTACT_NEW_MEMBER,
        )
        count += cls._advance_stage(
            NewMember.objects.filter(
                follow_up_stage=NewMemberStage.FIRST_COMPLETED,
                stage_updated_at__lte=now - timedelta(days=interval_days),
            ),
            NewMemberStage.INITIATE_SECOND,
        )
        count += cls._advance_stage(
            NewMember.objects.filter(
                follow_up_stage=NewMemberStage.SECOND_COMPLETED,
                stage_updated_at__lte=now - timedelta(days=interval_days),
            ),
            NewMemberStage.INITIATE_FINAL,
        )
        return count

    # ─── Day-before reminders ─────────────────────────────────────────────

    @staticmethod
    def _reminders_enabled(church):
        from apps.communication.models import MessagingAutomation

        automation = MessagingAutomation.objects.filter(church=church).first()
        return automation, (automation is None or automation.day_before_reminders_enabled)

    @classmethod
    def send_day_before_reminders(cls, today=None):
        """
        Remind people (and optionally their leader) of tomorrow's follow-ups.

        A ReminderLog row per check-in keeps the job from sending twice.
        """
        from apps.communication.models import ReminderLog

        today = today or timezone.localdate()
        tomorrow = today + timedelta(days=1)
        count = 0

        for category, model in CHECKIN_MODELS.items():
            entity_type = f'{CHECKIN_PERSON_FIELDS[category]}_checkin'
            upcoming = model.objects.filter(
                next_followup_date=tomorrow,
                completed_at__isnull=True,
            ).select_related('church', 'created_by', CHECKIN_PERSON_FIELDS[category])

            for checkin in upcoming:
                if ReminderLog.objects.filter(
                    entity_type=entity_type,
                    entity_id=str(checkin.pk),
                    reminder_type=ReminderType.DAY_BEFORE,
                ).exists():
                    logger.debug(f'Reminder already sent for {entity_type} {checkin.pk}')
                    continue

                automation, enabled = cls._reminders_enabled(checkin.church)
                if not enabled:
                    continue

                if cls._send_reminder(checkin, automation):
                    try:
                        ReminderLog.objects.create(
                            church=checkin.church,
                            entity_type=entity_type,
                            entity_id=str(checkin.pk),
                            reminder_type=ReminderType.DAY_BEFORE,
                        )
                    except IntegrityError:
                        logger.warning(f'Reminder log already exists for {entity_type} {checkin.pk}')
                    count += 1

        return count

    @staticmethod
    def _send_reminder(checkin, automation=None):
        """Send one day-before reminder. Returns True when anything went out."""
        from apps.communication.services_email import EmailService
        from apps.communication.services_sms import TwilioSMSService, build_followup_sms_message

        person = checkin.person
        church = checkin.church
        leader = checkin.created_by
        leader_name = _staff_name(leader)

        subject = checkin.custom_reminder_subject or (automation.reminder_subject if automation else '')
        message = checkin.custom_reminder_message or (automation.reminder_message if automation else '')
        sent = False

        if person.email:
            sent = EmailService.send_followup_reminder(
                to=person.email,
                recipient_name=person.full_name,
                other_name=leader_name or church.name,
                church_name=church.name,
                followup_date=checkin.next_followup_date,
                followup_time=checkin.next_followup_time,
                video_link=checkin.video_link,
                subject=subject,
                message=message,
            )
        else:
            logger.info(f'No email for {person.full_name}, skipping email reminder')

        kind = _message_kind(checkin.notification_method)
        if kind:
            if not person.phone:
                logger.info(f'Skipping {kind} reminder for {person.first_name} - no phone')
            else:
                body = build_followup_sms_message(
                    recipient_name=person.first_name,
                    church_name=church.name,
                    followup_date=checkin.next_followup_date,
                    followup_time=checkin.next_followup_time,
                    video_link=checkin.video_link,
                    custom_message=checkin.custom_reminder_message,
                )
                sms = TwilioSMSService().send_to(church, person.phone, body, kind=kind)
                if sms is not None and sms.status == SMSStatus.SENT:
                    sent = True

        # Leader copy only once the person was reached
        if sent and leader is not None and leader.email and (automation is None or automation.notify_leader):
            EmailService.send_followup_reminder(
                to=leader.email,
                recipient_name=leader_name,
                other_name=person.full_name,
                church_name=church.name,
                followup_date=checkin.next_followup_date,
                followup_time=checkin.next_followup_time,
                video_link=checkin.video_link,
                is_leader=True,
            )

        return sent
