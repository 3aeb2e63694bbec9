# users/management/commands/create_super_admin.py
from django.core.management.base import BaseCommand, CommandError

from core.exceptions import ConflictError, ValidationError
from shared.constants import Role
from users.services import CredentialService, PrincipalService


class Command(BaseCommand):
    help = 'Create a platform SuperAdmin (bootstraps an empty deployment)'

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--password', required=True)
        parser.add_argument('--first-name', default='Platform')
        parser.add_argument('--last-name', default='Admin')

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        if CredentialService.email_taken(email):
            raise CommandError(f"A user with email {email} already exists.")

        try:
            user = PrincipalService.bootstrap_super_admin({
                'email': email,
                'password': options['password'],
                'first_name': options['first_name'],
                'last_name': options['last_name'],
            })
        except (ConflictError, ValidationError) as e:
            raise CommandError(e.message) from e

        self.stdout.write(self.style.SUCCESS(f"SuperAdmin {user.email} created (id {user.pk})"))
