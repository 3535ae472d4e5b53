"""Map an authenticated directory user onto a local account."""
import logging

from django.conf import settings
from django.db import transaction

from accounts.signals import account_synced

from .account_store import DjangoAccountStore, ReconciliationError

logger = logging.getLogger(__name__)


class IncompleteDirectoryData(ReconciliationError):
    """The directory record cannot identify a local account."""
    pass


class AccountReconciler:
    """Find or create the local account for a directory record.

    Existing accounts are located by object GUID, then by login name, then
    by email. The local login name is the user's email (or UPN), not the
    directory's short account name.
    """

    def __init__(self, store=None, default_role=None):
        self.store = store or DjangoAccountStore()
        if default_role is None:
            default_role = settings.AD_LOGIN_DEFAULT_ROLE
        self.default_role = default_role

    def reconcile(self, record, password, profile_name):
        missing = record.missing_fields()
        if missing:
            logger.error(
                "Directory record from profile '%s' is missing %s; cannot sync local account",
                profile_name, ', '.join(missing),
            )
            raise IncompleteDirectoryData(f"Directory data is incomplete (missing {', '.join(missing)})")

        email = record.email
        limit = self.store.login_name_max_length
        if limit and len(email) > limit:
            logger.warning(
                "Login name '%s' from profile '%s' is longer than the %d characters a local "
                "account can hold; the database may reject it",
                email, profile_name, limit,
            )

        fields = {
            'username': email,
            'email': email,
            'first_name': record.givenname,
            'last_name': record.sn,
            'display_name': record.displayname or record.samaccountname,
            'password': password,
        }

        with transaction.atomic():
            user = self.find_existing(record, email)
            if user is not None:
                logger.info(
                    "Updating local account %s from directory user '%s'",
                    user.pk, record.samaccountname,
                )
                user = self.store.update(user.pk, fields)
            else:
                logger.info("Creating local account for directory user '%s'", record.samaccountname)
                user = self.store.create(dict(fields, role=self.default_role))

            if record.objectguid:
                self.store.set_metadata(user.pk, 'ad_guid', record.objectguid)
                self.store.set_metadata(user.pk, 'last_auth_profile', profile_name)
                self.store.set_metadata(user.pk, 'last_ad_upn', record.userprincipalname)

        for receiver, response in account_synced.send_robust(
            sender=self.__class__, user=user, record=record, profile_name=profile_name,
        ):
            if isinstance(response, Exception):
                logger.error(
                    "account_synced receiver %r failed: %s", receiver, response,
                    exc_info=response,
                )
        return user

    def find_existing(self, record, email):
        user = self.store.find_by_external_id(record.objectguid)
        if user is not None:
            logger.info("Found local account %s by object GUID %s", user.pk, record.objectguid)
            return user
        user = self.store.find_by_login_name(email)
        if user is not None:
            logger.info("Found local account %s by login '%s'", user.pk, email)
            return user
        user = self.store.find_by_email(email)
        if user is not None:
            logger.info("Found local account %s by email '%s'", user.pk, email)
        return user
