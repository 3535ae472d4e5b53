"""Directory client interface consumed by the authenticator."""
import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

from django.conf import settings
from django.utils.module_loading import import_string

from directory.models import TransportSecurity


class BindResult(enum.Enum):
    SUCCESS = 'success'
    INVALID_CREDENTIALS = 'invalid_credentials'
    UNAVAILABLE = 'unavailable'


@dataclass(frozen=True)
class ConnectionConfig:
    """Everything a client needs to reach one directory."""

    servers: Tuple[str, ...]
    port: int
    security: TransportSecurity
    allow_self_signed: bool
    timeout: int
    base_dn: str
    account_suffix: Optional[str] = None
    bind_username: Optional[str] = None
    bind_password: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_profile(cls, profile, account_suffix=None):
        return cls(
            servers=tuple(profile.server_list),
            port=int(profile.port),
            security=profile.transport_security,
            allow_self_signed=bool(profile.allow_self_signed),
            timeout=int(profile.network_timeout),
            base_dn=profile.base_dn,
            account_suffix=account_suffix or None,
            bind_username=profile.bind_username or None,
            bind_password=profile.bind_password or None,
        )

    def principal_for(self, username):
        """Qualify a bare account name with the account suffix."""
        if self.account_suffix and '@' not in username:
            return f"{username}{self.account_suffix}"
        return username


class DirectoryClient:
    """Capability the authenticator needs from a directory protocol library.

    Implementations report failures through return values and ``last_error``
    and never raise.
    """

    def bind(self, config):
        """Open a connection for ``config``. Returns a handle or ``None``."""
        raise NotImplementedError

    def authenticate(self, connection, username, password):
        """Verify a user credential. Returns a :class:`BindResult`."""
        raise NotImplementedError

    def fetch_attributes(self, connection, principal, attributes):
        """Return the raw attribute mapping of ``principal`` or ``None``."""
        raise NotImplementedError

    def close(self, connection):
        raise NotImplementedError

    @property
    def last_error(self):
        return ''


def get_directory_client_class():
    return import_string(settings.AD_LOGIN_DIRECTORY_CLIENT)


def get_directory_client():
    """Return a new instance of the configured directory client."""
    return get_directory_client_class()()
