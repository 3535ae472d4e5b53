"""Signals sent by the accounts app."""
from django.dispatch import Signal

# Sent after a directory user has been synced onto a local account.
# Arguments: user, record, profile_name.
account_synced = Signal()
