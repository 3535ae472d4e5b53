"""ldap3-backed directory client.

Every authentication attempt builds its own server pool and connection, so
concurrent attempts never share connection state.
"""
import logging
import ssl
from dataclasses import dataclass

from ldap3 import (
    AUTO_BIND_NONE,
    NONE,
    ROUND_ROBIN,
    SUBTREE,
    Connection,
    Server,
    ServerPool,
    Tls,
)
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from directory.models import TransportSecurity

from .directory_client import BindResult, ConnectionConfig, DirectoryClient

logger = logging.getLogger(__name__)

RESULT_INVALID_CREDENTIALS = 49


@dataclass
class DirectoryConnection:
    connection: Connection
    config: ConnectionConfig


def split_host_port(entry, default_port):
    """Split ``host[:port]``; IPv6 literals must be bracketed to carry a port."""
    entry = entry.strip()
    if entry.startswith('['):
        host, _, rest = entry[1:].partition(']')
        if rest.startswith(':') and rest[1:].isdigit():
            return host, int(rest[1:])
        return host, default_port
    if entry.count(':') == 1:
        host, port = entry.split(':')
        if port.isdigit():
            return host, int(port)
    return entry, default_port


def build_server_pool(config):
    """Build a one-pass round-robin pool over the configured servers."""
    tls = None
    if config.security is not TransportSecurity.NONE:
        tls = Tls(
            validate=ssl.CERT_NONE if config.allow_self_signed else ssl.CERT_REQUIRED,
        )
    servers = []
    for entry in config.servers:
        host, port = split_host_port(entry, config.port)
        servers.append(
            Server(
                host,
                port=port,
                use_ssl=config.security is TransportSecurity.LDAPS,
                tls=tls,
                get_info=NONE,
                connect_timeout=config.timeout,
            )
        )
    return ServerPool(servers, ROUND_ROBIN, active=1, exhaust=True)


def classify_bind_failure(result):
    """Tell a clean credential rejection apart from infrastructure failures."""
    result = result if isinstance(result, dict) else {}
    if (result.get('result') == RESULT_INVALID_CREDENTIALS
            or result.get('description') == 'invalidCredentials'):
        return BindResult.INVALID_CREDENTIALS
    return BindResult.UNAVAILABLE


class LDAP3DirectoryClient(DirectoryClient):
    """Directory client built on ldap3."""

    def __init__(self):
        self._last_error = ''

    @property
    def last_error(self):
        return self._last_error

    def bind(self, config):
        if not config.servers:
            self._last_error = 'No domain controllers configured'
            return None

        try:
            conn = Connection(
                build_server_pool(config),
                user=None,
                password=None,
                auto_bind=AUTO_BIND_NONE,
                read_only=True,
                raise_exceptions=False,
                receive_timeout=config.timeout,
            )
            conn.open()
            if config.security is TransportSecurity.STARTTLS and not conn.start_tls():
                self._last_error = f"StartTLS failed: {conn.last_error or conn.result}"
                logger.warning("LDAP StartTLS failed for %s: %s", config.servers, self._last_error)
                conn.unbind()
                return None
        except LDAPException as exc:
            self._last_error = str(exc)
            logger.warning("LDAP connection to %s failed: %s", config.servers, exc)
            return None

        return DirectoryConnection(conn, config)

    def authenticate(self, connection, username, password):
        conn = connection.connection
        principal = connection.config.principal_for(username)
        try:
            if conn.rebind(user=principal, password=password):
                return BindResult.SUCCESS
        except LDAPException as exc:
            self._last_error = str(exc)
            outcome = classify_bind_failure(conn.result)
            logger.info("LDAP bind for %s raised %s (%s)", principal, exc.__class__.__name__, outcome.value)
            return outcome

        self._last_error = conn.last_error or str(conn.result)
        outcome = classify_bind_failure(conn.result)
        logger.info("LDAP bind for %s rejected (%s)", principal, outcome.value)
        return outcome

    def fetch_attributes(self, connection, principal, attributes):
        conn = connection.connection
        config = connection.config
        try:
            if config.bind_username:
                service_user = config.principal_for(config.bind_username)
                if not conn.rebind(user=service_user, password=config.bind_password or ''):
                    self._last_error = f"Service account bind failed: {conn.result}"
                    logger.warning("LDAP service account bind failed for %s", service_user)
                    return None

            search_filter = f'(sAMAccountName={escape_filter_chars(principal)})'
            if not conn.search(
                search_base=config.base_dn,
                search_filter=search_filter,
                search_scope=SUBTREE,
                attributes=list(attributes),
            ):
                self._last_error = conn.last_error or str(conn.result)
                logger.warning(
                    "LDAP search returned nothing: base=%s filter=%s", config.base_dn, search_filter
                )
                return None
        except LDAPException as exc:
            self._last_error = str(exc)
            logger.warning("LDAP search for %s failed: %s", principal, exc)
            return None

        for entry in conn.response or []:
            if entry.get('type') != 'searchResEntry':
                continue
            attrs = dict(entry.get('attributes') or {})
            # objectGUID is binary; take it undecoded.
            for name, value in (entry.get('raw_attributes') or {}).items():
                if name.lower() == 'objectguid':
                    attrs = {k: v for k, v in attrs.items() if k.lower() != 'objectguid'}
                    attrs['objectGUID'] = value
            return attrs

        self._last_error = 'No matching entry'
        return None

    def close(self, connection):
        try:
            connection.connection.unbind()
        except LDAPException:
            logger.debug("LDAP unbind failed", exc_info=True)
