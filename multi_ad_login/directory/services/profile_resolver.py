"""Select the directory profile that governs a login attempt."""
import logging
from typing import NamedTuple, Optional

from directory.models import DirectoryProfile

from .profile_store import ProfileStore

logger = logging.getLogger(__name__)


class ResolvedProfile(NamedTuple):
    profile: DirectoryProfile
    username: str
    upn: Optional[str]


class ProfileResolver:
    """Route bare account names to the default profile and UPNs by domain.

    A UPN whose domain matches no profile is never routed to the default
    profile.
    """

    def __init__(self, store=None):
        self.store = store or ProfileStore()

    def resolve(self, raw_login):
        if not raw_login:
            return None

        if '@' not in raw_login:
            profile = self.store.get_default()
            if profile is None:
                logger.warning(
                    "No default directory profile configured; cannot route '%s'", raw_login
                )
                return None
            logger.debug("Routing '%s' to default profile '%s'", raw_login, profile.profile_name)
            return ResolvedProfile(profile, raw_login, None)

        user_part, domain_part = raw_login.split('@', 1)
        domain = domain_part.strip().lower()
        profile = self.store.get_by_domain_identifier(domain)
        if profile is None:
            logger.warning("No directory profile for domain identifier '%s'", domain)
            return None

        logger.debug(
            "Routing '%s' to profile '%s' by domain '%s'",
            raw_login, profile.profile_name, domain,
        )
        return ResolvedProfile(profile, user_part, f"{user_part}@{domain}")
