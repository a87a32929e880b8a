"""Dashboard statistics for ministry staff and platform admins."""
from datetime import timedelta

from django.db.models import Count
from django.utils import timezone

from apps.core.constants import DisplayStatus, FollowUpStatus, PersonCategory, Roles

from .models import Convert, ConvertCheckin, PrayerRequest
from .services import CHECKIN_MODELS, PERSON_MODELS


class DashboardService:
    """Counts shown on the staff and platform dashboards."""

    @staticmethod
    def status_breakdown(queryset):
        """Display-bucket counts for a person queryset."""
        breakdown = {bucket: 0 for bucket in DisplayStatus.VALUES}
        for row in queryset.values('status').annotate(count=Count('id')):
            breakdown[DisplayStatus.for_status(row['status'])] += row['count']
        return breakdown

    @classmethod
    def get_church_stats(cls, church):
        """Stats for one ministry: converts summary, due follow-ups and per-category counts."""
        today = timezone.localdate()
        thirty_days_ago = timezone.now() - timedelta(days=30)

        converts = Convert.objects.filter(church=church)

        due = (
            ConvertCheckin.objects
            .filter(
                church=church,
                next_followup_date__lte=today,
                completed_at__isnull=True,
            )
            .select_related('convert')
            .order_by('next_followup_date')
        )

        categories = {}
        for category, model in PERSON_MODELS.items():
            queryset = model.objects.filter(church=church)
            categories[category] = {
                'total': queryset.count(),
                'status_breakdown': cls.status_breakdown(queryset),
                'scheduled_followups': CHECKIN_MODELS[category].objects.filter(
                    church=church,
                    next_followup_date__gte=today,
                    completed_at__isnull=True,
                ).count(),
            }

        return {
            'church_name': church.name,
            'total_converts': converts.count(),
            'new_converts': converts.filter(created_at__gte=thirty_days_ago).count(),
            'active_converts': converts.filter(
                status__in=[FollowUpStatus.ACTIVE, FollowUpStatus.CONNECTED]
            ).count(),
            'followups_due': [
                {
                    'id': str(checkin.pk),
                    'convert_id': str(checkin.convert_id),
                    'convert_name': checkin.convert.full_name,
                    'next_followup_date': checkin.next_followup_date,
                }
                for checkin in due
            ],
            'categories': categories,
        }

    @staticmethod
    def get_platform_stats():
        """Totals across every ministry."""
        from apps.accounts.models import StaffProfile
        from apps.ministries.models import Church

        today = timezone.localdate()
        thirty_days_ago = timezone.now() - timedelta(days=30)

        followups_due = sum(
            model.objects.filter(
                next_followup_date__lte=today,
                completed_at__isnull=True,
            ).count()
            for model in CHECKIN_MODELS.values()
        )

        return {
            'total_churches': Church.objects.count(),
            'total_leaders': StaffProfile.objects.filter(role=Roles.LEADER).count(),
            'total_converts': Convert.objects.count(),
            'converts_last_30_days': Convert.objects.filter(created_at__gte=thirty_days_ago).count(),
            'followups_due': followups_due,
            'recent_prayer_requests': PrayerRequest.objects.filter(
                created_at__gte=thirty_days_ago
            ).count(),
            'people_by_category': {
                category: PERSON_MODELS[category].objects.count()
                for category in PersonCategory.VALUES
            },
        }
