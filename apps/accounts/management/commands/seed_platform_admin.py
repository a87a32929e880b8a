"""Create the platform administrator account."""
from django.core.management.base import BaseCommand, CommandError

from apps.accounts.services import StaffAccountService


class Command(BaseCommand):
    help = 'Create a platform admin (ADMIN role, no ministry).'

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('password')
        parser.add_argument('--first-name', default='')
        parser.add_argument('--last-name', default='')

    def handle(self, *args, **options):
        try:
            user = StaffAccountService.create_platform_admin(
                options['email'],
                options['password'],
                first_name=options['first_name'],
                last_name=options['last_name'],
            )
        except ValueError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(f'Platform admin {user.email} created.'))
