"""Account services package."""
from .account_store import AccountPersistenceError, DjangoAccountStore, ReconciliationError
from .reconciler import AccountReconciler, IncompleteDirectoryData

__all__ = [
    'AccountPersistenceError',
    'DjangoAccountStore',
    'ReconciliationError',
    'AccountReconciler',
    'IncompleteDirectoryData',
]
