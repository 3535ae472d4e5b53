"""Directory services package."""
from .authentication import AuthOutcome, DirectoryAuthenticator, FailureReason
from .directory_client import BindResult, ConnectionConfig, DirectoryClient, get_directory_client
from .profile_resolver import ProfileResolver, ResolvedProfile
from .profile_store import (
    ProfileNotFound,
    ProfilePersistenceError,
    ProfileStore,
    ProfileStoreError,
    ProfileValidationError,
)
from .records import DirectoryRecord, format_guid

__all__ = [
    'AuthOutcome',
    'DirectoryAuthenticator',
    'FailureReason',
    'BindResult',
    'ConnectionConfig',
    'DirectoryClient',
    'get_directory_client',
    'ProfileResolver',
    'ResolvedProfile',
    'ProfileNotFound',
    'ProfilePersistenceError',
    'ProfileStore',
    'ProfileStoreError',
    'ProfileValidationError',
    'DirectoryRecord',
    'format_guid',
]
