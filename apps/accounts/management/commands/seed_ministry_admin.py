"""Create a ministry admin, creating the ministry when it does not exist."""
from django.core.management.base import BaseCommand, CommandError

from apps.accounts.services import StaffAccountService
from apps.core.constants import Plan, Roles
from apps.ministries.models import Church


class Command(BaseCommand):
    help = 'Create a ministry admin for a ministry (created by name if missing).'

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('password')
        parser.add_argument('ministry', help='Ministry name')
        parser.add_argument('--location', default='')
        parser.add_argument('--plan', default=Plan.FREE, choices=Plan.VALUES)
        parser.add_argument('--first-name', default='')
        parser.add_argument('--last-name', default='')

    def handle(self, *args, **options):
        church, created = Church.objects.get_or_create(
            name=options['ministry'],
            defaults={'location': options['location'], 'plan': options['plan']},
        )
        if created:
            self.stdout.write(f'Created ministry "{church.name}".')

        try:
            user = StaffAccountService.create_staff_user(
                options['email'],
                options['password'],
                Roles.MINISTRY_ADMIN,
                church=church,
                first_name=options['first_name'],
                last_name=options['last_name'],
            )
        except ValueError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(f'Ministry admin {user.email} created for {church.name}.'))
