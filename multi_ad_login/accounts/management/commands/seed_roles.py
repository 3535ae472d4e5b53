"""Management command to seed default roles."""
from django.core.management.base import BaseCommand

from accounts.models import Role
from core.constants import ALL_ROLES, ROLE_HIERARCHY


class Command(BaseCommand):
    help = 'Create default roles if they do not exist.'

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING('Seeding roles...'))
        for role_name in ALL_ROLES:
            role, created = Role.objects.get_or_create(
                name=role_name,
                defaults={
                    'description': f'{role_name} role',
                    'priority': ROLE_HIERARCHY.get(role_name, 0),
                },
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'  Created role: {role_name}'))
            else:
                self.stdout.write(f'  Role already exists: {role_name}')
