"""Normalization of raw directory entries into typed records."""
import binascii
import logging
import re
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

USER_ATTRIBUTES = [
    'samaccountname',
    'mail',
    'givenname',
    'sn',
    'displayname',
    'objectguid',
    'userprincipalname',
]

GUID_RE = re.compile(
    r'^\{?([0-9A-Fa-f]{8}-(?:[0-9A-Fa-f]{4}-){3}[0-9A-Fa-f]{12})\}?$'
)


def format_guid(value):
    """Return the stable string form of a directory object GUID.

    Canonical ``8-4-4-4-12`` strings (braces allowed) are upper-cased.
    Raw bytes are hex-encoded as a fallback representation. Anything else
    is returned as a stripped string.
    """
    if value is None:
        return ''
    if isinstance(value, (bytes, bytearray)):
        return binascii.hexlify(bytes(value)).decode('ascii')
    value = str(value).strip()
    match = GUID_RE.match(value)
    if match:
        return match.group(1).upper()
    if value:
        logger.debug("GUID value is not in canonical form, keeping as-is")
    return value


def first_value(value):
    """Collapse a possibly multi-valued attribute to its first value."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def normalize_attributes(raw):
    """Lower-case attribute names and collapse multi-valued attributes."""
    normalized = {}
    for key, value in (raw or {}).items():
        if not isinstance(key, str):
            continue
        value = first_value(value)
        if value is None:
            continue
        normalized[key.lower()] = value
    return normalized


def _as_text(value):
    if value is None:
        return ''
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8', errors='replace').strip()
    return str(value).strip()


@dataclass(frozen=True)
class DirectoryRecord:
    """Normalized attributes of an authenticated directory user."""

    samaccountname: str = ''
    mail: str = ''
    givenname: str = ''
    sn: str = ''
    displayname: str = ''
    objectguid: str = ''
    userprincipalname: str = ''

    @classmethod
    def from_entry(cls, raw):
        attrs = normalize_attributes(raw)
        values = {}
        for field in fields(cls):
            if field.name == 'objectguid':
                values[field.name] = format_guid(attrs.get('objectguid'))
            else:
                values[field.name] = _as_text(attrs.get(field.name))
        return cls(**values)

    @property
    def email(self):
        """Email used for the local account: ``mail``, else the UPN."""
        return self.mail or self.userprincipalname

    def missing_fields(self):
        """Return the reasons this record cannot identify a local account."""
        missing = []
        if not self.samaccountname:
            missing.append('samaccountname')
        if not self.mail and not self.userprincipalname:
            missing.append('mail/userprincipalname')
        return missing

    def as_log_dict(self):
        return {
            'samaccountname': self.samaccountname,
            'mail': self.mail,
            'userprincipalname': self.userprincipalname,
            'objectguid': self.objectguid,
        }
