import pytest
from django.contrib.auth import authenticate, get_user_model
from django.test import RequestFactory

from accounts.backends import MultiADBackend
from accounts.models import UserProfile
from audit.models import AuditEntry
from core.constants import AUDIT_ACTION_LOGIN, AUDIT_CATEGORY_AUTH

User = get_user_model()


@pytest.fixture
def example(make_profile, fake_client_setting):
    return make_profile(is_default=True)


@pytest.fixture
def request_from():
    def _make(ip='10.1.2.3'):
        request = RequestFactory().post('/accounts/login/')
        request.client_ip = ip
        return request
    return _make


@pytest.mark.django_db
class TestMultiADBackend:
    def test_success_returns_synced_user(self, example, bob, request_from):
        user = MultiADBackend().authenticate(request_from(), username='bob', password='s3cret')

        assert user.username == 'bob@example.com'
        assert UserProfile.objects.get(user=user).last_auth_profile == 'Example'

        entry = AuditEntry.objects.get()
        assert entry.action == AUDIT_ACTION_LOGIN
        assert entry.category == AUDIT_CATEGORY_AUTH
        assert entry.success
        assert entry.user == user
        assert entry.username == 'bob'
        assert entry.ip_address == '10.1.2.3'

    def test_failure_is_audited_with_reason(self, example, bob, request_from):
        assert MultiADBackend().authenticate(request_from(), username='bob', password='bad') is None

        entry = AuditEntry.objects.get()
        assert not entry.success
        assert entry.user is None
        assert entry.detail == {'reason': 'invalid_credentials', 'profile': 'Example'}
        assert 'bad' not in str(entry.detail)

    def test_no_profile(self, example, bob, request_from):
        assert MultiADBackend().authenticate(request_from(), username='bob@nowhere.org', password='s3cret') is None
        assert AuditEntry.objects.get().detail['reason'] == 'no_profile'
        assert User.objects.count() == 0

    def test_incomplete_record(self, example, directory, request_from):
        directory.add_user('carol@example.com', 'pw', sAMAccountName=['carol'])
        assert MultiADBackend().authenticate(request_from(), username='carol', password='pw') is None
        assert AuditEntry.objects.get().detail['reason'] == 'incomplete_directory_data'
        assert User.objects.count() == 0

    def test_inactive_local_account(self, example, bob, request_from):
        User.objects.create_user(username='bob@example.com', is_active=False)

        assert MultiADBackend().authenticate(request_from(), username='bob', password='s3cret') is None

        entry = AuditEntry.objects.get()
        assert entry.detail['reason'] == 'inactive'
        assert entry.user.username == 'bob@example.com'

    def test_missing_username(self, example, bob):
        assert MultiADBackend().authenticate(None, username=None, password='s3cret') is None
        assert AuditEntry.objects.count() == 0

    def test_without_request(self, example, bob):
        user = MultiADBackend().authenticate(None, username='bob', password='s3cret')
        assert user is not None
        assert AuditEntry.objects.get().ip_address is None

    def test_audit_disabled(self, example, bob, settings, request_from):
        settings.AD_LOGIN_AUDIT_ENABLED = False
        assert MultiADBackend().authenticate(request_from(), username='bob', password='s3cret') is not None
        assert AuditEntry.objects.count() == 0

    def test_configured_in_authentication_backends(self, example, bob):
        user = authenticate(None, username='bob@example.com', password='s3cret')
        assert user is not None
        assert user.backend == 'accounts.backends.MultiADBackend'

    def test_local_password_still_accepted_after_directory_rejects(self, example, bob):
        User.objects.create_user(username='bob@example.com', password='cached')

        user = authenticate(None, username='bob@example.com', password='cached')

        assert user.backend == 'django.contrib.auth.backends.ModelBackend'
        assert AuditEntry.objects.get().detail['reason'] == 'invalid_credentials'

    def test_deactivated_local_account_blocks_fallback(self, example, bob):
        User.objects.create_user(username='bob@example.com', password='cached', is_active=False)
        assert authenticate(None, username='bob@example.com', password='cached') is None


@pytest.mark.django_db
class TestLoginView:
    def test_get_renders_form(self, client):
        response = client.get('/accounts/login/')
        assert response.status_code == 200
        assert b'name="username"' in response.content

    def test_successful_login_redirects(self, client, example, bob):
        response = client.post(
            '/accounts/login/?next=/reports/',
            {'username': 'bob', 'password': 's3cret'},
            HTTP_X_FORWARDED_FOR='192.0.2.7, 10.0.0.1',
        )
        assert response.status_code == 302
        assert response['Location'] == '/reports/'
        assert AuditEntry.objects.get().ip_address == '192.0.2.7'

    def test_external_next_url_is_ignored(self, client, example, bob):
        response = client.post(
            '/accounts/login/?next=https://evil.example.org/',
            {'username': 'bob', 'password': 's3cret'},
        )
        assert response['Location'] == '/'

    def test_failed_login_shows_generic_message(self, client, example, bob):
        response = client.post('/accounts/login/', {'username': 'bob', 'password': 'bad'})
        assert response.status_code == 200
        assert b'Invalid username or password.' in response.content

    def test_logout(self, client, example, bob):
        client.post('/accounts/login/', {'username': 'bob', 'password': 's3cret'})
        response = client.get('/accounts/logout/')
        assert response.status_code == 302
        assert '_auth_user_id' not in client.session
