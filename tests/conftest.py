import pytest

from directory.services import DirectoryAuthenticator, ProfileResolver, ProfileStore

from .fakes import FakeDirectory, FakeDirectoryClient


def profile_data(**overrides):
    data = {
        'profile_name': 'Example',
        'is_default': False,
        'domain_identifier': 'example.com',
        'base_dn': 'DC=example,DC=com',
        'domain_controllers': 'dc1.example.com;dc2.example.com',
        'port': 389,
        'use_tls': False,
        'use_ssl': False,
        'allow_self_signed': False,
        'network_timeout': 5,
        'account_suffixes': '@example.com',
        'bind_username': '',
        'bind_password': '',
    }
    data.update(overrides)
    return data


@pytest.fixture
def store(db):
    return ProfileStore()


@pytest.fixture
def make_profile(store):
    def _make(**overrides):
        profile_id = store.add(profile_data(**overrides))
        return store.get_by_id(profile_id)
    return _make


@pytest.fixture
def directory(monkeypatch):
    fake = FakeDirectory()
    monkeypatch.setattr(FakeDirectoryClient, 'directory', fake)
    return fake


@pytest.fixture
def authenticator(store, directory):
    return DirectoryAuthenticator(
        resolver=ProfileResolver(store),
        client_factory=FakeDirectoryClient,
    )


@pytest.fixture
def fake_client_setting(settings, directory):
    settings.AD_LOGIN_DIRECTORY_CLIENT = 'tests.fakes.FakeDirectoryClient'
    return directory


BOB_GUID = '550e8400-e29b-41d4-a716-446655440000'


@pytest.fixture
def bob(directory):
    directory.add_user(
        'bob@example.com', 's3cret',
        sAMAccountName=['bob'],
        mail=['bob@example.com'],
        givenName=['Bob'],
        sn=['Smith'],
        displayName=['Bob Smith'],
        objectGUID=[BOB_GUID],
        userPrincipalName=['bob@example.com'],
    )
    return directory
