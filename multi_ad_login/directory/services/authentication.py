"""Authenticate a login against the directory profile that governs it."""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.db import DatabaseError

from .directory_client import BindResult, ConnectionConfig, get_directory_client
from .profile_resolver import ProfileResolver
from .records import USER_ATTRIBUTES, DirectoryRecord

logger = logging.getLogger(__name__)


class FailureReason(enum.Enum):
    INVALID_CREDENTIALS = 'invalid_credentials'
    NO_PROFILE = 'no_profile'
    DIRECTORY_UNAVAILABLE = 'directory_unavailable'
    INCOMPLETE_DIRECTORY_DATA = 'incomplete_directory_data'


@dataclass(frozen=True)
class AuthOutcome:
    """Result of one authentication attempt.

    Exactly one of ``record`` (success), ``reason`` (failure) or
    ``authenticated_user`` (an earlier authenticator already succeeded) is set.
    """

    record: Optional[DirectoryRecord] = None
    profile_name: str = ''
    reason: Optional[FailureReason] = None
    authenticated_user: Any = None

    @classmethod
    def success(cls, record, profile_name):
        return cls(record=record, profile_name=profile_name)

    @classmethod
    def failure(cls, reason, profile_name=''):
        return cls(reason=reason, profile_name=profile_name)

    @classmethod
    def passthrough(cls, user):
        return cls(authenticated_user=user)

    @property
    def is_success(self):
        return self.record is not None

    @property
    def is_passthrough(self):
        return self.authenticated_user is not None


def select_account_suffix(profile, upn=None):
    """First configured suffix, else ``@domain`` of the UPN, else ``None``."""
    suffixes = profile.suffix_list
    if suffixes:
        return suffixes[0]
    if upn and '@' in upn:
        return '@' + upn.split('@', 1)[1]
    return None


class DirectoryAuthenticator:
    """Resolve the profile, bind, fetch and normalize the directory record.

    ``authenticate`` never raises; every failure becomes an
    :class:`AuthOutcome` with a :class:`FailureReason`.
    """

    def __init__(self, resolver=None, client_factory=get_directory_client):
        self.resolver = resolver or ProfileResolver()
        self.client_factory = client_factory

    def authenticate(self, raw_login, password, authenticated_user=None):
        if authenticated_user is not None:
            logger.info("'%s' already authenticated by an earlier backend; skipping", raw_login)
            return AuthOutcome.passthrough(authenticated_user)

        if not raw_login or not password:
            logger.warning("Empty username or password for '%s'", raw_login or '')
            return AuthOutcome.failure(FailureReason.INVALID_CREDENTIALS)

        try:
            resolved = self.resolver.resolve(raw_login)
        except DatabaseError:
            logger.exception("Directory profile lookup failed for '%s'", raw_login)
            resolved = None
        if resolved is None:
            return AuthOutcome.failure(FailureReason.NO_PROFILE)

        profile = resolved.profile
        account_suffix = select_account_suffix(profile, resolved.upn)
        if not account_suffix:
            logger.warning(
                "No account suffix for profile '%s'; binding '%s' unqualified",
                profile.profile_name, resolved.username,
            )
        config = ConnectionConfig.from_profile(profile, account_suffix)

        try:
            outcome = self._authenticate_with_config(config, resolved.username, password)
        except Exception:
            logger.exception(
                "Unexpected error authenticating '%s' against profile '%s'",
                raw_login, profile.profile_name,
            )
            outcome = AuthOutcome.failure(FailureReason.DIRECTORY_UNAVAILABLE)

        if outcome.is_success:
            logger.info(
                "Authenticated '%s' against directory profile '%s'", raw_login, profile.profile_name
            )
            return AuthOutcome.success(outcome.record, profile.profile_name)

        log = logger.error if outcome.reason is FailureReason.INCOMPLETE_DIRECTORY_DATA else logger.warning
        log(
            "Authentication of '%s' against profile '%s' failed: %s",
            raw_login, profile.profile_name, outcome.reason.value,
        )
        return AuthOutcome.failure(outcome.reason, profile.profile_name)

    def _authenticate_with_config(self, config, username, password):
        client = self.client_factory()
        connection = client.bind(config)
        if connection is None:
            logger.warning("Directory bind to %s failed: %s", config.servers, client.last_error)
            return AuthOutcome.failure(FailureReason.DIRECTORY_UNAVAILABLE)

        try:
            result = client.authenticate(connection, username, password)
            if result is BindResult.INVALID_CREDENTIALS:
                return AuthOutcome.failure(FailureReason.INVALID_CREDENTIALS)
            if result is not BindResult.SUCCESS:
                logger.warning("Directory unavailable during bind: %s", client.last_error)
                return AuthOutcome.failure(FailureReason.DIRECTORY_UNAVAILABLE)

            raw = client.fetch_attributes(connection, username, USER_ATTRIBUTES)
            if raw is None:
                logger.error(
                    "Bind succeeded for '%s' but fetching attributes failed: %s",
                    username, client.last_error,
                )
                return AuthOutcome.failure(FailureReason.DIRECTORY_UNAVAILABLE)
        finally:
            client.close(connection)

        record = DirectoryRecord.from_entry(raw)
        logger.debug("Directory record for '%s': %s", username, record.as_log_dict())
        missing = record.missing_fields()
        if missing:
            logger.error("Directory record for '%s' is missing %s", username, ', '.join(missing))
            return AuthOutcome.failure(FailureReason.INCOMPLETE_DIRECTORY_DATA)

        return AuthOutcome.success(record, '')
