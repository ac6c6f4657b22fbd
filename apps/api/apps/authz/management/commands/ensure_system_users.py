"""
Management command to seed roles and the system actors.

Usage:
    python manage.py ensure_system_users

This command is idempotent and safe to run multiple times.
"""
from django.core.management.base import BaseCommand

from apps.authz.models import Role, RoleChoices
from apps.authz.system_actors import ensure_system_actors


class Command(BaseCommand):
    help = 'Ensure roles and system actors (System, SMS Service) exist'

    def handle(self, *args, **options):
        self.stdout.write("Ensuring roles exist...")
        for role_choice in RoleChoices.values:
            role, created = Role.objects.get_or_create(name=role_choice)
            if created:
                self.stdout.write(self.style.SUCCESS(f'  Created role: {role.name}'))
            else:
                self.stdout.write(f'  - Role exists: {role.name}')

        self.stdout.write("Ensuring system actors exist...")
        for kind, user in ensure_system_actors().items():
            self.stdout.write(self.style.SUCCESS(f'  {kind}: {user.email} ({user.id})'))
