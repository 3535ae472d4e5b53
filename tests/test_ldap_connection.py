from unittest import mock

import pytest
from ldap3.core.exceptions import LDAPBindError, LDAPSocketOpenError, LDAPSocketReceiveError

from directory.models import TransportSecurity
from directory.services import (
    BindResult,
    ConnectionConfig,
    DirectoryAuthenticator,
    FailureReason,
    ProfileResolver,
    ProfileStore,
)
from directory.services import ldap_connection
from directory.services.ldap_connection import (
    DirectoryConnection,
    LDAP3DirectoryClient,
    build_server_pool,
    classify_bind_failure,
    split_host_port,
)


def make_config(**overrides):
    values = {
        'servers': ('dc1.example.com', 'dc2.example.com:3268'),
        'port': 389,
        'security': TransportSecurity.NONE,
        'allow_self_signed': False,
        'timeout': 5,
        'base_dn': 'DC=example,DC=com',
        'account_suffix': '@example.com',
    }
    values.update(overrides)
    return ConnectionConfig(**values)


class TestSplitHostPort:
    @pytest.mark.parametrize('entry, expected', [
        ('dc1.example.com', ('dc1.example.com', 389)),
        ('dc1.example.com:636', ('dc1.example.com', 636)),
        (' 10.0.0.1 ', ('10.0.0.1', 389)),
        ('[::1]:636', ('::1', 636)),
        ('[::1]', ('::1', 389)),
        ('fe80::1', ('fe80::1', 389)),
    ])
    def test_split(self, entry, expected):
        assert split_host_port(entry, 389) == expected


class TestClassifyBindFailure:
    def test_invalid_credentials(self):
        assert classify_bind_failure({'result': 49, 'description': 'invalidCredentials'}) \
            is BindResult.INVALID_CREDENTIALS

    def test_other_failures_are_unavailable(self):
        assert classify_bind_failure({'result': 81}) is BindResult.UNAVAILABLE
        assert classify_bind_failure(None) is BindResult.UNAVAILABLE


class TestBuildServerPool:
    def test_ldaps_servers(self):
        pool = build_server_pool(make_config(security=TransportSecurity.LDAPS, port=636))
        assert [server.port for server in pool.servers] == [636, 3268]
        assert all(server.ssl for server in pool.servers)

    def test_plain_servers(self):
        pool = build_server_pool(make_config())
        assert not any(server.ssl for server in pool.servers)


class TestLDAP3DirectoryClient:
    def test_bind_without_servers(self):
        client = LDAP3DirectoryClient()
        assert client.bind(make_config(servers=())) is None
        assert client.last_error

    def test_bind_starts_tls(self):
        with mock.patch.object(ldap_connection, 'Connection') as connection_cls:
            conn = connection_cls.return_value
            conn.start_tls.return_value = True
            handle = LDAP3DirectoryClient().bind(make_config(security=TransportSecurity.STARTTLS))

        conn.open.assert_called_once_with()
        conn.start_tls.assert_called_once_with()
        assert handle.connection is conn

    def test_failed_start_tls_is_unavailable(self):
        with mock.patch.object(ldap_connection, 'Connection') as connection_cls:
            conn = connection_cls.return_value
            conn.start_tls.return_value = False
            client = LDAP3DirectoryClient()
            assert client.bind(make_config(security=TransportSecurity.STARTTLS)) is None

        conn.unbind.assert_called_once_with()
        assert 'StartTLS' in client.last_error

    def test_authenticate_uses_suffixed_principal(self):
        conn = mock.Mock()
        conn.rebind.return_value = True
        result = LDAP3DirectoryClient().authenticate(DirectoryConnection(conn, make_config()), 'bob', 'pw')
        assert result is BindResult.SUCCESS
        conn.rebind.assert_called_once_with(user='bob@example.com', password='pw')

    def test_authenticate_rejected(self):
        conn = mock.Mock()
        conn.rebind.return_value = False
        conn.result = {'result': 49, 'description': 'invalidCredentials'}
        result = LDAP3DirectoryClient().authenticate(DirectoryConnection(conn, make_config()), 'bob', 'bad')
        assert result is BindResult.INVALID_CREDENTIALS

    def test_fetch_attributes_takes_raw_guid(self):
        conn = mock.Mock()
        conn.search.return_value = True
        conn.response = [{
            'type': 'searchResEntry',
            'attributes': {'sAMAccountName': 'bob', 'objectGUID': '{decoded}'},
            'raw_attributes': {'objectGUID': [b'\x01\x02']},
        }]
        attrs = LDAP3DirectoryClient().fetch_attributes(
            DirectoryConnection(conn, make_config()), 'bob', ['samaccountname', 'objectguid'],
        )
        assert attrs == {'sAMAccountName': 'bob', 'objectGUID': [b'\x01\x02']}
        assert conn.search.call_args.kwargs['search_filter'] == '(sAMAccountName=bob)'

    def test_fetch_attributes_escapes_filter(self):
        conn = mock.Mock()
        conn.search.return_value = False
        client = LDAP3DirectoryClient()
        assert client.fetch_attributes(DirectoryConnection(conn, make_config()), 'b*b)', []) is None
        assert conn.search.call_args.kwargs['search_filter'] == r'(sAMAccountName=b\2ab\29)'

    def test_fetch_attributes_rebinds_as_service_account(self):
        conn = mock.Mock()
        conn.rebind.return_value = False
        config = make_config(bind_username='svc', bind_password='pw')
        assert LDAP3DirectoryClient().fetch_attributes(DirectoryConnection(conn, config), 'bob', []) is None
        conn.rebind.assert_called_once_with(user='svc@example.com', password='pw')
        conn.search.assert_not_called()


class TestLDAP3Timeouts:
    def test_servers_carry_connect_timeout(self):
        pool = build_server_pool(make_config(timeout=7))
        assert [server.connect_timeout for server in pool.servers] == [7, 7]

    def test_connection_carries_receive_timeout(self):
        with mock.patch.object(ldap_connection, 'Connection') as connection_cls:
            LDAP3DirectoryClient().bind(make_config(timeout=7))
        assert connection_cls.call_args.kwargs['receive_timeout'] == 7

    def test_unreachable_servers(self):
        with mock.patch.object(ldap_connection, 'Connection') as connection_cls:
            connection_cls.return_value.open.side_effect = LDAPSocketOpenError('invalid server address')
            client = LDAP3DirectoryClient()
            assert client.bind(make_config()) is None
        assert 'invalid server address' in client.last_error

    @pytest.mark.parametrize('error', [
        LDAPBindError('server abruptly closed the connection'),
        LDAPSocketReceiveError('timed out'),
    ])
    def test_bind_error_during_authenticate(self, error):
        conn = mock.Mock()
        conn.rebind.side_effect = error
        conn.result = None
        client = LDAP3DirectoryClient()

        result = client.authenticate(DirectoryConnection(conn, make_config()), 'bob', 'pw')

        assert result is BindResult.UNAVAILABLE
        assert client.last_error

    @pytest.mark.django_db
    def test_timeout_reported_as_directory_unavailable(self, make_profile):
        make_profile(is_default=True)
        authenticator = DirectoryAuthenticator(
            resolver=ProfileResolver(ProfileStore()),
            client_factory=LDAP3DirectoryClient,
        )
        with mock.patch.object(ldap_connection, 'Connection') as connection_cls:
            conn = connection_cls.return_value
            conn.rebind.side_effect = LDAPSocketReceiveError('timed out')
            conn.result = None
            outcome = authenticator.authenticate('bob', 's3cret')

        assert outcome.reason is FailureReason.DIRECTORY_UNAVAILABLE
        conn.unbind.assert_called_once_with()
