"""
Management command to create a marketplace admin account.

Admin accounts cannot be self-registered through the API.

Usage:
    python manage.py create_admin --email admin@example.com --password secret
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from accounts.models import User


class Command(BaseCommand):
    help = 'Creates a marketplace admin account'

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--password', required=True)
        parser.add_argument('--username', default=None)
        parser.add_argument('--display-name', dest='display_name', default='Admin')

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        username = options['username'] or email.split('@')[0]

        with transaction.atomic():
            user = User.objects.filter(email=email).first()

            if user is not None:
                if not user.is_marketplace_admin:
                    raise CommandError(
                        f'{email} already exists as a {user.role}; roles cannot be changed.'
                    )
                user.set_password(options['password'])
                user.account_status = User.AccountStatus.ACTIVE
                user.save()
                self.stdout.write(
                    self.style.WARNING(f'Admin {email} already exists; password reset.')
                )
                return

            User.objects.create_user(
                username=username,
                email=email,
                password=options['password'],
                display_name=options['display_name'],
                role=User.UserRole.ADMIN,
                is_staff=True,
            )

        self.stdout.write(self.style.SUCCESS(f'Created admin account {email}'))
