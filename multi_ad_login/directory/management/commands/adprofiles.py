"""Management command to list, add, update and delete directory profiles."""
import argparse

from django.core.management.base import BaseCommand, CommandError

from audit.services import AuditLogger
from core.constants import (
    AUDIT_ACTION_PROFILE_ADD,
    AUDIT_ACTION_PROFILE_DELETE,
    AUDIT_ACTION_PROFILE_UPDATE,
    AUDIT_CATEGORY_ADMIN,
)
from directory.services import ProfileNotFound, ProfileStore, ProfileStoreError, ProfileValidationError
from directory.services.profile_store import EDITABLE_FIELDS

# option dest -> profile field
OPTION_FIELDS = {
    'name': 'profile_name',
    'default': 'is_default',
    'domain': 'domain_identifier',
    'base_dn': 'base_dn',
    'servers': 'domain_controllers',
    'port': 'port',
    'tls': 'use_tls',
    'ssl': 'use_ssl',
    'allow_self_signed': 'allow_self_signed',
    'timeout': 'network_timeout',
    'suffixes': 'account_suffixes',
    'bind_username': 'bind_username',
    'bind_password': 'bind_password',
}


def add_profile_options(parser):
    parser.add_argument('--name', help='Unique profile name.')
    parser.add_argument('--domain', help='UPN domain routed to this profile, e.g. example.com.')
    parser.add_argument('--base-dn', dest='base_dn')
    parser.add_argument('--servers', help='Semicolon-separated domain controllers.')
    parser.add_argument('--port', type=int)
    parser.add_argument('--timeout', type=int, help='Network timeout in seconds.')
    parser.add_argument('--suffixes', help='Semicolon-separated account suffixes.')
    parser.add_argument('--bind-username', dest='bind_username')
    parser.add_argument('--bind-password', dest='bind_password')
    parser.add_argument('--default', action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument('--tls', action=argparse.BooleanOptionalAction, default=None,
                        help='Use STARTTLS. Takes precedence over --ssl.')
    parser.add_argument('--ssl', action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument('--allow-self-signed', dest='allow_self_signed',
                        action=argparse.BooleanOptionalAction, default=None)


class Command(BaseCommand):
    help = 'Manage directory connection profiles.'

    def add_arguments(self, parser):
        subparsers = parser.add_subparsers(dest='action', required=True)

        subparsers.add_parser('list', help='List all profiles.')

        show = subparsers.add_parser('show', help='Show one profile.')
        show.add_argument('profile_id', type=int)

        add = subparsers.add_parser('add', help='Add a profile.')
        add_profile_options(add)

        update = subparsers.add_parser('update', help='Update a profile; omitted options keep their values.')
        update.add_argument('profile_id', type=int)
        add_profile_options(update)
        update.add_argument('--clear-bind-password', dest='clear_bind_password',
                            action='store_true')

        delete = subparsers.add_parser('delete', help='Delete a profile.')
        delete.add_argument('profile_id', type=int)

        set_default = subparsers.add_parser('set-default', help='Make a profile the default.')
        set_default.add_argument('profile_id', type=int)

    def handle(self, *args, **options):
        self.store = ProfileStore()
        action = options['action']
        handler = getattr(self, 'handle_' + action.replace('-', '_'))
        try:
            handler(options)
        except ProfileValidationError as exc:
            raise CommandError(str(exc)) from exc
        except ProfileNotFound as exc:
            raise CommandError(str(exc)) from exc
        except ProfileStoreError as exc:
            raise CommandError(f"Profile store error: {exc}") from exc

    def handle_list(self, options):
        profiles = self.store.list_all()
        if not profiles:
            self.stdout.write('No directory profiles configured.')
            return
        for profile in profiles:
            marker = '*' if profile.is_default else ' '
            self.stdout.write(
                f"{marker} {profile.pk:>4}  {profile.profile_name}  "
                f"domain={profile.domain_identifier or '-'}  "
                f"servers={';'.join(profile.server_list)}"
            )

    def handle_show(self, options):
        profile = self._get(options['profile_id'])
        for field in ['id'] + EDITABLE_FIELDS:
            self.stdout.write(f"{field}: {getattr(profile, field)}")
        self.stdout.write(f"bind_password: {'***' if profile.bind_password else ''}")
        self.stdout.write(f"transport_security: {profile.transport_security.value}")

    def handle_add(self, options):
        data = self._collect(options)
        profile_id = self.store.add(data)
        self._audit(AUDIT_ACTION_PROFILE_ADD, profile_id, data.get('profile_name'))
        self.stdout.write(self.style.SUCCESS(f"Added profile {profile_id}: {data.get('profile_name')}"))

    def handle_update(self, options):
        profile = self._get(options['profile_id'])
        data = {name: getattr(profile, name) for name in EDITABLE_FIELDS}
        data.update(self._collect(options))
        profile = self.store.update(
            profile.pk, data, clear_bind_password=options.get('clear_bind_password', False),
        )
        self._audit(AUDIT_ACTION_PROFILE_UPDATE, profile.pk, profile.profile_name)
        self.stdout.write(self.style.SUCCESS(f"Updated profile {profile.pk}: {profile.profile_name}"))

    def handle_delete(self, options):
        profile = self._get(options['profile_id'])
        self.store.delete(profile.pk)
        self._audit(AUDIT_ACTION_PROFILE_DELETE, profile.pk, profile.profile_name)
        self.stdout.write(self.style.SUCCESS(f"Deleted profile {profile.pk}: {profile.profile_name}"))

    def handle_set_default(self, options):
        profile = self._get(options['profile_id'])
        data = {name: getattr(profile, name) for name in EDITABLE_FIELDS}
        data['is_default'] = True
        self.store.update(profile.pk, data)
        self._audit(AUDIT_ACTION_PROFILE_UPDATE, profile.pk, profile.profile_name)
        self.stdout.write(self.style.SUCCESS(f"Profile {profile.pk} is now the default"))

    def _get(self, profile_id):
        profile = self.store.get_by_id(profile_id)
        if profile is None:
            raise ProfileNotFound(f"Directory profile {profile_id} does not exist")
        return profile

    @staticmethod
    def _collect(options):
        return {
            field: options[dest]
            for dest, field in OPTION_FIELDS.items()
            if options.get(dest) is not None
        }

    @staticmethod
    def _audit(action, profile_id, profile_name):
        AuditLogger.log(
            user=None,
            action=action,
            category=AUDIT_CATEGORY_ADMIN,
            detail={'profile_id': profile_id, 'profile_name': profile_name},
            username='manage.py',
        )
