"""
Management command to ensure the bootstrap administrator exists (for Docker startup).
"""
import os

from django.core.management.base import BaseCommand

from apps.authz.models import RoleChoices, User, assign_role


class Command(BaseCommand):
    help = 'Create the bootstrap admin if it does not exist and grant it the admin role'

    def handle(self, *args, **options):
        email = os.environ.get('DJANGO_SUPERUSER_EMAIL', 'admin@example.com')
        password = os.environ.get('DJANGO_SUPERUSER_PASSWORD', 'admin123dev')

        user = User.objects.filter(email=email).first()
        if user is None:
            user = User.objects.create_superuser(
                email=email,
                password=password,
                name='Administrator',
                can_have_availability=False,
            )
            self.stdout.write(
                self.style.SUCCESS(f'Superuser "{email}" created successfully')
            )
        else:
            self.stdout.write(
                self.style.WARNING(f'Superuser "{email}" already exists')
            )

        assign_role(user, RoleChoices.ADMIN)
