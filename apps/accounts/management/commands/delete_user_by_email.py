"""Delete a staff user by email."""
from django.core.management.base import BaseCommand, CommandError

from apps.accounts.services import StaffAccountService


class Command(BaseCommand):
    help = 'Delete the staff user with the given email address.'

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('--notify', action='store_true', help='Email the user about the removal')

    def handle(self, *args, **options):
        user = StaffAccountService.find_by_email(options['email'])
        if user is None:
            raise CommandError(f'No user with email {options["email"]}.')

        StaffAccountService.remove_staff_user(user, notify=options['notify'])
        self.stdout.write(self.style.SUCCESS(f'Deleted {options["email"]}.'))
