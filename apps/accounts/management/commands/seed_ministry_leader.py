"""Create a leader in an existing ministry."""
from django.core.management.base import BaseCommand, CommandError

from apps.accounts.services import StaffAccountService
from apps.core.constants import Roles
from apps.ministries.models import Church


class Command(BaseCommand):
    help = 'Create a leader for an existing ministry. The plan leader limit applies unless --force.'

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('password')
        parser.add_argument('ministry', help='Ministry name')
        parser.add_argument('--first-name', default='')
        parser.add_argument('--last-name', default='')
        parser.add_argument('--force', action='store_true', help='Ignore the plan leader limit')

    def handle(self, *args, **options):
        church = Church.objects.filter(name=options['ministry']).first()
        if church is None:
            raise CommandError(f'Ministry "{options["ministry"]}" not found.')

        try:
            user = StaffAccountService.create_staff_user(
                options['email'],
                options['password'],
                Roles.LEADER,
                church=church,
                first_name=options['first_name'],
                last_name=options['last_name'],
                enforce_quota=not options['force'],
            )
        except ValueError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(f'Leader {user.email} created for {church.name}.'))
