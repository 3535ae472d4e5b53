"""Persistent store of directory connection profiles."""
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from core.constants import DEFAULT_LDAP_PORT, DEFAULT_NETWORK_TIMEOUT
from directory.models import DirectoryProfile

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = [
    'profile_name',
    'is_default',
    'domain_identifier',
    'base_dn',
    'domain_controllers',
    'port',
    'use_tls',
    'use_ssl',
    'allow_self_signed',
    'network_timeout',
    'account_suffixes',
    'bind_username',
]

FIELD_DEFAULTS = {
    'is_default': False,
    'domain_identifier': None,
    'port': DEFAULT_LDAP_PORT,
    'use_tls': False,
    'use_ssl': False,
    'allow_self_signed': False,
    'network_timeout': DEFAULT_NETWORK_TIMEOUT,
    'account_suffixes': None,
    'bind_username': None,
}


class ProfileStoreError(Exception):
    """Base error for profile store operations."""
    pass


class ProfileValidationError(ProfileStoreError):
    """Profile input was rejected; nothing was persisted."""

    def __init__(self, message_dict):
        self.message_dict = message_dict
        detail = '; '.join(
            f"{field}: {' '.join(messages)}" for field, messages in message_dict.items()
        )
        super().__init__(f"Invalid profile: {detail}")


class ProfileNotFound(ProfileStoreError):
    pass


class ProfilePersistenceError(ProfileStoreError):
    pass


class ProfileStore:
    """CRUD over directory profiles with a single-default invariant.

    The persistence handle is explicit: the model class and the database
    alias are given at construction and nothing is cached between calls.
    """

    def __init__(self, model=DirectoryProfile, using='default'):
        self.model = model
        self.using = using

    @property
    def objects(self):
        return self.model.objects.using(self.using)

    def add(self, data):
        """Validate and insert a new profile. Returns the new id."""
        values = dict(FIELD_DEFAULTS)
        values.update(self._editable(data))
        values['bind_password'] = data.get('bind_password') or None
        profile = self.model(**values)
        self._validate(profile)

        try:
            with transaction.atomic(using=self.using):
                if profile.is_default:
                    cleared = self.objects.filter(is_default=True).update(is_default=False)
                    logger.debug("Cleared %d previous default profile(s)", cleared)
                profile.save(using=self.using)
        except DatabaseError as exc:
            logger.exception("Failed to add directory profile %s", values.get('profile_name'))
            raise ProfilePersistenceError(f"Add failed: {exc}") from exc

        logger.info("Added directory profile %s with id %s", profile.profile_name, profile.pk)
        return profile.pk

    def update(self, profile_id, data, clear_bind_password=False):
        """Replace the editable fields of an existing profile.

        The stored bind password changes only when a non-empty password is
        supplied or ``clear_bind_password`` is set.
        """
        profile = self.get_by_id(profile_id)
        if profile is None:
            raise ProfileNotFound(f"Directory profile {profile_id} does not exist")

        values = dict(FIELD_DEFAULTS)
        values.update(self._editable(data))
        for name, value in values.items():
            setattr(profile, name, value)

        new_password = data.get('bind_password')
        if new_password:
            profile.bind_password = new_password
        elif clear_bind_password:
            profile.bind_password = None

        self._validate(profile)

        try:
            with transaction.atomic(using=self.using):
                if profile.is_default:
                    self.objects.filter(is_default=True).exclude(pk=profile.pk).update(
                        is_default=False,
                    )
                profile.save(using=self.using)
        except DatabaseError as exc:
            logger.exception("Failed to update directory profile %s", profile_id)
            raise ProfilePersistenceError(f"Update failed: {exc}") from exc

        logger.info("Updated directory profile %s (%s)", profile.pk, profile.profile_name)
        return profile

    def delete(self, profile_id):
        try:
            deleted, _ = self.objects.filter(pk=profile_id).delete()
        except DatabaseError as exc:
            logger.exception("Failed to delete directory profile %s", profile_id)
            raise ProfilePersistenceError(f"Delete failed: {exc}") from exc
        if not deleted:
            raise ProfileNotFound(f"Directory profile {profile_id} does not exist")
        logger.info("Deleted directory profile %s", profile_id)

    def get_by_id(self, profile_id):
        return self.objects.filter(pk=profile_id).first()

    def list_all(self):
        return list(self.objects.order_by('profile_name'))

    def get_default(self):
        return self.objects.filter(is_default=True).order_by('pk').first()

    def get_by_domain_identifier(self, identifier):
        identifier = self.model.normalize_domain_identifier(identifier)
        if not identifier:
            return None
        return self.objects.filter(domain_identifier__iexact=identifier).first()

    def _editable(self, data):
        values = {}
        for name in EDITABLE_FIELDS:
            if name not in data:
                continue
            value = data[name]
            if isinstance(value, str):
                value = value.strip()
            values[name] = value
        return values

    def _validate(self, profile):
        try:
            profile.full_clean()
        except ValidationError as exc:
            logger.info("Rejected directory profile %r: %s", profile.profile_name, exc.message_dict)
            raise ProfileValidationError(exc.message_dict) from exc
