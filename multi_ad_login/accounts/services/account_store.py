"""Local account store backed by the Django user model."""
import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from accounts.models import Role, UserProfile

logger = logging.getLogger(__name__)

METADATA_FIELDS = ('ad_guid', 'last_auth_profile', 'last_ad_upn')
PROFILE_FIELDS = ('display_name',)


class ReconciliationError(Exception):
    """Base error for mapping a directory user onto a local account."""
    pass


class AccountPersistenceError(ReconciliationError):
    """The account store failed; the error is surfaced, never retried."""
    pass


class DjangoAccountStore:
    """Find, create and update local accounts and their directory metadata."""

    def __init__(self, user_model=None):
        self.user_model = user_model or get_user_model()

    @property
    def login_name_max_length(self):
        return self.user_model._meta.get_field(self.user_model.USERNAME_FIELD).max_length

    def find_by_external_id(self, external_id):
        if not external_id:
            return None
        profile = (
            UserProfile.objects.select_related('user')
            .filter(ad_guid=external_id)
            .order_by('pk')
            .first()
        )
        return profile.user if profile else None

    def find_by_login_name(self, login_name):
        if not login_name:
            return None
        lookup = {f'{self.user_model.USERNAME_FIELD}__iexact': login_name}
        return self.user_model.objects.filter(**lookup).order_by('pk').first()

    def find_by_email(self, email):
        if not email:
            return None
        return self.user_model.objects.filter(email__iexact=email).order_by('pk').first()

    def create(self, fields):
        """Create a user plus its profile. ``role`` names the initial role."""
        fields = dict(fields)
        password = fields.pop('password', None)
        role_name = fields.pop('role', None)
        profile_values = {name: fields.pop(name) for name in PROFILE_FIELDS if name in fields}

        try:
            with transaction.atomic():
                user = self.user_model(**fields)
                if password:
                    user.set_password(password)
                else:
                    user.set_unusable_password()
                user.save()
                profile = UserProfile.objects.create(user=user, **profile_values)
                if role_name:
                    self._assign_role(profile, role_name)
        except DatabaseError as exc:
            logger.exception("Failed to create local account %s", fields.get('username'))
            raise AccountPersistenceError(f"Create failed: {exc}") from exc

        return user

    def update(self, account_id, fields):
        """Update an existing user in place, keeping its identifier."""
        fields = dict(fields)
        password = fields.pop('password', None)
        fields.pop('role', None)
        profile_values = {name: fields.pop(name) for name in PROFILE_FIELDS if name in fields}

        try:
            with transaction.atomic():
                user = self.user_model.objects.select_for_update().filter(pk=account_id).first()
                if user is None:
                    raise AccountPersistenceError(f"Local account {account_id} does not exist")
                for name, value in fields.items():
                    setattr(user, name, value)
                if password:
                    user.set_password(password)
                user.save()
                if profile_values:
                    UserProfile.objects.update_or_create(user=user, defaults=profile_values)
        except DatabaseError as exc:
            logger.exception("Failed to update local account %s", account_id)
            raise AccountPersistenceError(f"Update failed: {exc}") from exc

        return user

    def set_metadata(self, account_id, key, value):
        if key not in METADATA_FIELDS:
            raise ValueError(f"Unknown account metadata key: {key}")
        try:
            UserProfile.objects.update_or_create(
                user_id=account_id,
                defaults={key: value or ''},
            )
        except DatabaseError as exc:
            logger.exception("Failed to set %s on local account %s", key, account_id)
            raise AccountPersistenceError(f"Metadata update failed: {exc}") from exc

    @staticmethod
    def _assign_role(profile, role_name):
        role = Role.objects.filter(name=role_name).first()
        if role is None:
            logger.warning("Default role '%s' does not exist; run seed_roles", role_name)
            return
        profile.roles.add(role)
