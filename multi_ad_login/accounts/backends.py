"""Multi-profile Active Directory authentication backend."""
import logging

from django.contrib.auth.backends import ModelBackend

from accounts.services import AccountReconciler, IncompleteDirectoryData, ReconciliationError
from audit.services import AuditLogger
from core.constants import AUDIT_ACTION_LOGIN, AUDIT_CATEGORY_AUTH
from directory.services import DirectoryAuthenticator

logger = logging.getLogger(__name__)


class MultiADBackend(ModelBackend):
    """Authenticate users against the directory profile their login routes to.

    Every failure returns ``None`` so the login form shows one generic
    message; the precise reason goes to the log and the audit trail.
    """

    authenticator_class = DirectoryAuthenticator
    reconciler_class = AccountReconciler

    def authenticate(self, request, username=None, password=None, **kwargs):
        if username is None:
            return None

        outcome = self.authenticator_class().authenticate(username, password)
        if not outcome.is_success:
            self._audit(request, username, False, {
                'reason': outcome.reason.value,
                'profile': outcome.profile_name,
            })
            return None

        try:
            user = self.reconciler_class().reconcile(
                outcome.record, password, outcome.profile_name,
            )
        except IncompleteDirectoryData:
            self._audit(request, username, False, {
                'reason': 'incomplete_directory_data',
                'profile': outcome.profile_name,
            })
            return None
        except ReconciliationError:
            logger.exception("Could not sync local account for %s", username)
            self._audit(request, username, False, {
                'reason': 'account_sync_failed',
                'profile': outcome.profile_name,
            })
            return None

        if not self.user_can_authenticate(user):
            logger.warning("Local account %s for %s is inactive", user.pk, username)
            self._audit(request, username, False, {
                'reason': 'inactive',
                'profile': outcome.profile_name,
            }, user=user)
            return None

        self._audit(request, username, True, {'profile': outcome.profile_name}, user=user)
        return user

    @staticmethod
    def _audit(request, username, success, detail, user=None):
        AuditLogger.log_from_request(
            request,
            action=AUDIT_ACTION_LOGIN,
            category=AUDIT_CATEGORY_AUTH,
            detail=detail,
            success=success,
            user=user,
            username=username,
        )
