"""Business logic for follow-up check-ins, scheduling and promotions."""
import logging
from datetime import time

from django.db import transaction
from django.utils import timezone

from apps.core.constants import (
    CheckinOutcome, FollowUpStatus, MessageKind, NewMemberStage,
    NotificationMethod, PersonCategory, RelationshipType,
)
from apps.core.utils import generate_mass_jitsi_link, generate_personal_jitsi_link

from .models import (
    Convert, ConvertCheckin, Guest, GuestCheckin, Member, MemberCheckin,
    NewMember, NewMemberCheckin,
)

logger = logging.getLogger(__name__)


PERSON_MODELS = {
    PersonCategory.CONVERTS: Convert,
    PersonCategory.NEW_MEMBERS: NewMember,
    PersonCategory.MEMBERS: Member,
    PersonCategory.GUESTS: Guest,
}

CHECKIN_MODELS = {
    PersonCategory.CONVERTS: ConvertCheckin,
    PersonCategory.NEW_MEMBERS: NewMemberCheckin,
    PersonCategory.MEMBERS: MemberCheckin,
    PersonCategory.GUESTS: GuestCheckin,
}

# Foreign key from a check-in to its person
CHECKIN_PERSON_FIELDS = {
    PersonCategory.CONVERTS: 'convert',
    PersonCategory.NEW_MEMBERS: 'new_member',
    PersonCategory.MEMBERS: 'member',
    PersonCategory.GUESTS: 'guest',
}

# Category a person moves to when promoted
PROMOTIONS = {
    PersonCategory.CONVERTS: PersonCategory.NEW_MEMBERS,
    PersonCategory.NEW_MEMBERS: PersonCategory.MEMBERS,
    PersonCategory.GUESTS: PersonCategory.MEMBERS,
}

# Date used to pick mass follow-up candidates
CANDIDATE_DATE_FIELDS = {
    PersonCategory.CONVERTS: 'created_at__date',
    PersonCategory.NEW_MEMBERS: 'created_at__date',
    PersonCategory.MEMBERS: 'member_since',
    PersonCategory.GUESTS: 'visit_date',
}

PORTAL_RELATIONSHIPS = {
    PersonCategory.CONVERTS: RelationshipType.CONVERT,
    PersonCategory.NEW_MEMBERS: RelationshipType.NEW_MEMBER,
    PersonCategory.MEMBERS: RelationshipType.MEMBER,
}

COMMON_PERSON_FIELDS = [
    'church', 'first_name', 'last_name', 'phone', 'email', 'date_of_birth',
    'country', 'gender', 'age_group', 'address', 'notes', 'self_submitted',
]


def get_person_model(category):
    try:
        return PERSON_MODELS[category]
    except KeyError:
        raise ValueError(f'Unknown category: {category}')


def get_checkin_model(category):
    try:
        return CHECKIN_MODELS[category]
    except KeyError:
        raise ValueError(f'Unknown category: {category}')


def checkins_for(person):
    """Check-ins of a person, newest first."""
    return CHECKIN_MODELS[person.category].objects.filter(
        **{CHECKIN_PERSON_FIELDS[person.category]: person}
    )


def _message_kind(method):
    if method in NotificationMethod.SMS_METHODS:
        return MessageKind.SMS
    if method in NotificationMethod.MMS_METHODS:
        return MessageKind.MMS
    return None


def _staff_name(user):
    if user is None:
        return ''
    profile = getattr(user, 'staff_profile', None)
    if profile is not None:
        return profile.full_name
    return user.get_full_name() or user.email


class FollowUpService:
    """Status transitions driven by check-ins and scheduled follow-ups."""

    # ─── Status transitions ───────────────────────────────────────────────

    @staticmethod
    def apply_outcome(person, outcome, has_next_date=False):
        """
        Move a person's status after a check-in outcome.

        CONNECTED always wins; a next follow-up date otherwise keeps the
        person SCHEDULED. New members also advance their stage when connected.
        """
        if outcome == CheckinOutcome.CONNECTED:
            person.status = FollowUpStatus.CONNECTED
        elif has_next_date:
            person.status = FollowUpStatus.SCHEDULED
        else:
            person.status = CheckinOutcome.resulting_status(outcome)

        update_fields = ['status', 'updated_at']

        if isinstance(person, NewMember) and outcome == CheckinOutcome.CONNECTED:
            next_stage = NewMemberStage.ON_CONNECTED.get(person.follow_up_stage)
            if next_stage:
                person.set_stage(next_stage)
                update_fields += ['follow_up_stage', 'stage_updated_at']

        person.save(update_fields=update_fields)
        return person

    # ─── Check-ins ────────────────────────────────────────────────────────

    @classmethod
    @transaction.atomic
    def record_checkin(cls, person, user, outcome, notes='', checkin_date=None,
                       next_followup_date=None, next_followup_time=None,
                       notification_method=NotificationMethod.EMAIL):
        """Record a completed contact with a person."""
        checkin_model = CHECKIN_MODELS[person.category]
        checkin = checkin_model.objects.create(
            church=person.church,
            created_by=user,
            checkin_date=checkin_date or timezone.localdate(),
            notes=notes or '',
            outcome=outcome,
            next_followup_date=next_followup_date,
            next_followup_time=next_followup_time,
            notification_method=notification_method,
            completed_at=None if next_followup_date else timezone.now(),
            **{CHECKIN_PERSON_FIELDS[person.category]: person},
        )
        cls.apply_outcome(person, outcome, has_next_date=next_followup_date is not None)
        logger.info(f'Check-in {checkin.pk} recorded for {person.category} {person.pk}: {outcome}')
        return checkin

    @classmethod
    @transaction.atomic
    def complete_checkin(cls, checkin, outcome, notes=None):
        """Close a scheduled check-in with its outcome."""
        if checkin.completed_at is not None:
            raise ValueError('This follow-up has already been completed.')

        checkin.outcome = outcome
        if notes is not None:
            checkin.notes = notes
        checkin.completed_at = timezone.now()
        checkin.save(update_fields=['outcome', 'notes', 'completed_at', 'updated_at'])

        cls.apply_outcome(checkin.person, outcome)
        return checkin

    # ─── Scheduling ───────────────────────────────────────────────────────

    @classmethod
    def schedule_followup(cls, person, user, followup_date, followup_time=None, notes='',
                          notification_method=NotificationMethod.EMAIL, include_video_link=False,
                          video_link='', custom_leader_subject='', custom_leader_message='',
                          custom_person_subject='', custom_person_message='', media_url='',
                          notify=True):
        """
        Schedule the next follow-up with a person and notify both sides.

        Returns the created check-in.
        """
        church = person.church
        if include_video_link and not video_link:
            video_link = generate_personal_jitsi_link(church.name, person.full_name)

        with transaction.atomic():
            checkin = CHECKIN_MODELS[person.category].objects.create(
                church=church,
                created_by=user,
                checkin_date=timezone.localdate(),
                notes=notes or '',
                outcome=CheckinOutcome.SCHEDULED_VISIT,
                next_followup_date=followup_date,
                next_followup_time=followup_time,
                video_link=video_link or '',
                notification_method=notification_method,
                custom_reminder_subject=custom_person_subject or '',
                custom_reminder_message=custom_person_message or '',
                **{CHECKIN_PERSON_FIELDS[person.category]: person},
            )

            person.status = FollowUpStatus.SCHEDULED
            update_fields = ['status', 'updated_at']
            if isinstance(person, NewMember):
                next_stage = NewMemberStage.ON_SCHEDULE.get(person.follow_up_stage)
                if next_stage:
                    person.set_stage(next_stage)
                    update_fields += ['follow_up_stage', 'stage_updated_at']
            person.save(update_fields=update_fields)

        if notify:
            cls.notify_scheduled(
                checkin,
                user,
                custom_leader_subject=custom_leader_subject,
                custom_leader_message=custom_leader_message,
                media_url=media_url,
            )

        logger.info(
            f'Follow-up scheduled for {person.category} {person.pk} on {followup_date} '
            f'({notification_method})'
        )
        return checkin

    @staticmethod
    def notify_scheduled(checkin, user, custom_leader_subject='', custom_leader_message='',
                         media_url=''):
        """Email the leader and the person, then SMS/MMS the person when asked."""
        from apps.communication.services_email import EmailService
        from apps.communication.services_sms import TwilioSMSService, build_followup_sms_message

        person = checkin.person
        church = checkin.church

        EmailService.send_followup_notification(
            category=person.category,
            person_name=person.full_name,
            person_email=person.email,
            leader_name=_staff_name(user),
            leader_email=getattr(user, 'email', ''),
            church_name=church.name,
            followup_date=checkin.next_followup_date,
            followup_time=checkin.next_followup_time,
            video_link=checkin.video_link,
            custom_leader_subject=custom_leader_subject,
            custom_leader_message=custom_leader_message,
            custom_person_subject=checkin.custom_reminder_subject,
            custom_person_message=checkin.custom_reminder_message,
        )

        kind = _message_kind(checkin.notification_method)
        if kind is None or not person.phone:
            return None

        body = build_followup_sms_message(
            recipient_name=person.first_name,
            church_name=church.name,
            followup_date=checkin.next_followup_date,
            followup_time=checkin.next_followup_time,
            video_link=checkin.video_link,
            custom_message=checkin.custom_reminder_message,
        )
        return TwilioSMSService().send_to(
            church, person.phone, body, kind=kind, media_url=media_url, sent_by=user,
        )

    # ─── Mass follow-up ───────────────────────────────────────────────────

    @staticmethod
    def mass_followup_candidates(church, category, date_from=None, date_to=None):
        """People of one category, optionally limited to a date window."""
        queryset = get_person_model(category).objects.filter(church=church)
        date_field = CANDIDATE_DATE_FIELDS[category]
        if date_from:
            queryset = queryset.filter(**{f'{date_field}__gte': date_from})
        if date_to:
            queryset = queryset.filter(**{f'{date_field}__lte': date_to})
        return queryset.order_by('last_name', 'first_name')

    @classmethod
    def mass_followup(cls, church, user, category, person_ids, followup_date, followup_time=None,
                      include_video_link=True, custom_subject='', custom_message='',
                      notification_method=NotificationMethod.EMAIL):
        """
        Schedule the same follow-up for many people sharing one video room.

        Returns (video_link, results) where each result is
        {person_id, name, success, error}.
        """
        from apps.communication.services_email import EmailService

        model = get_person_model(category)
        people = {str(p.pk): p for p in model.objects.filter(church=church, pk__in=person_ids)}
        video_link = generate_mass_jitsi_link(church.name) if include_video_link else ''

        results = []
        for person_id in person_ids:
            person = people.get(str(person_id))
            if person is None:
                results.append({
                    'person_id': str(person_id),
                    'name': '',
                    'success': False,
                    'error': 'Person not found',
                })
                continue
            try:
                checkin = cls.schedule_followup(
                    person,
                    user,
                    followup_date,
                    followup_time=followup_time,
                    notification_method=notification_method,
                    video_link=video_link,
                    custom_person_subject=custom_subject,
                    custom_person_message=custom_message,
                    notify=False,
                )
                cls._notify_person_only(checkin)
                results.append({
                    'person_id': str(person.pk),
                    'name': person.full_name,
                    'success': True,
                    'error': None,
                })
            except Exception as e:
                logger.error(f'Mass follow-up failed for {category} {person.pk}: {e}')
                results.append({
                    'person_id': str(person.pk),
                    'name': person.full_name,
                    'success': False,
                    'error': str(e),
                })

        scheduled = [r for r in results if r['success']]
        if scheduled and getattr(user, 'email', ''):
            names = '\n'.join(f"- {r['name']}" for r in scheduled)
            EmailService.send(
                user.email,
                f'Mass Follow-Up Scheduled: {len(scheduled)} {PersonCategory.LABELS[category]}(s)',
                f'Hello {_staff_name(user)},\n\n'
                f'You scheduled a follow-up on {followup_date} with:\n{names}'
                + (f'\n\nVideo call link: {video_link}' if video_link else '')
                + f'\n\nBlessings,\n{church.name}',
            )

        return video_link, results

    @staticmethod
    def _notify_person_only(checkin):
        from apps.communication.services_email import EmailService
        from apps.communication.services_sms import TwilioSMSService, build_followup_sms_message

        person = checkin.person
        church = checkin.church
        if person.email:
            EmailService.send_followup_reminder(
                to=person.email,
                recipient_name=person.first_name,
                other_name=church.name,
                church_name=church.name,
                followup_date=checkin.next_followup_date,
                followup_time=checkin.next_followup_time,
                video_link=checkin.video_link,
                subject=checkin.custom_reminder_subject,
                message=checkin.custom_reminder_message,
            )

        kind = _message_kind(checkin.notification_method)
        if kind and person.phone:
            body = build_followup_sms_message(
                recipient_name=person.first_name,
                church_name=church.name,
                followup_date=checkin.next_followup_date,
                followup_time=checkin.next_followup_time,
                video_link=checkin.video_link,
                custom_message=checkin.custom_reminder_message,
            )
            TwilioSMSService().send_to(church, person.phone, body, kind=kind)

    # ─── Upcoming follow-ups ──────────────────────────────────────────────

    @staticmethod
    def upcoming_followups(church=None, category=None):
        """
        Open scheduled check-ins across the four categories, soonest first.

        Each item is a dict with the check-in, its person, the category and
        an overdue flag.
        """
        today = timezone.localdate()
        categories = [category] if category else PersonCategory.VALUES
        items = []
        for cat in categories:
            person_field = CHECKIN_PERSON_FIELDS[cat]
            queryset = CHECKIN_MODELS[cat].objects.filter(
                next_followup_date__isnull=False,
                completed_at__isnull=True,
            ).select_related(person_field, 'created_by')
            if church is not None:
                queryset = queryset.filter(church=church)
            for checkin in queryset:
                items.append({
                    'category': cat,
                    'checkin': checkin,
                    'person': checkin.person,
                    'overdue': checkin.next_followup_date < today,
                })
        items.sort(key=lambda item: (item['checkin'].next_followup_date,
                                     item['checkin'].next_followup_time or time.min))
        return items

    # ─── Promotion ────────────────────────────────────────────────────────

    @staticmethod
    @transaction.atomic
    def promote(person, user=None):
        """
        Move a person to the next category.

        The new record copies the shared fields and starts fresh; the old
        record and its check-ins are deleted. Portal affiliations follow.
        """
        target = PROMOTIONS.get(person.category)
        if target is None:
            raise ValueError('Members cannot be promoted further.')

        target_model = PERSON_MODELS[target]
        data = {field: getattr(person, field) for field in COMMON_PERSON_FIELDS}
        data['created_by'] = user or person.created_by
        data['status'] = FollowUpStatus.NEW
        if target == PersonCategory.MEMBERS:
            data['member_since'] = timezone.localdate()

        promoted = target_model.objects.create(**data)
        old_category, old_pk = person.category, person.pk
        person.delete()

        relationship = PORTAL_RELATIONSHIPS.get(target)
        if relationship and promoted.email:
            from apps.portal.services import MemberAccountService
            MemberAccountService.handle_promotion(promoted, old_category, old_pk)

        logger.info(f'Promoted {old_category} {old_pk} to {target} {promoted.pk}')
        return promoted
