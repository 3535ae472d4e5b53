"""Directory connection profiles."""
import enum

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models.functions import Lower

from core.constants import DEFAULT_LDAP_PORT, DEFAULT_NETWORK_TIMEOUT, LIST_SEPARATOR


class TransportSecurity(enum.Enum):
    NONE = 'none'
    STARTTLS = 'starttls'
    LDAPS = 'ldaps'


def split_list(value):
    """Split a ``;``-separated text column into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(LIST_SEPARATOR) if item.strip()]


def validate_server_list(value):
    if not split_list(value):
        raise ValidationError('At least one domain controller is required.')


class DirectoryProfile(models.Model):
    """A named configuration describing how to reach one directory service.

    Column names match the ``ad_profiles`` table used by existing
    installations, so stored profiles keep working unchanged.
    """
    profile_name = models.CharField(max_length=255, unique=True)
    is_default = models.BooleanField(default=False)
    domain_identifier = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text='UPN domain routed to this profile, e.g. example.com.',
    )
    base_dn = models.CharField(max_length=255)
    domain_controllers = models.TextField(
        validators=[validate_server_list],
        help_text='Semicolon-separated list of hosts, e.g. dc1.example.com;dc2.example.com',
    )
    port = models.PositiveIntegerField(
        default=DEFAULT_LDAP_PORT,
        validators=[MinValueValidator(1), MaxValueValidator(65535)],
    )
    use_tls = models.BooleanField(default=False, help_text='STARTTLS on the plain port.')
    use_ssl = models.BooleanField(default=False, help_text='LDAPS (implicit TLS).')
    allow_self_signed = models.BooleanField(default=False)
    network_timeout = models.PositiveSmallIntegerField(
        default=DEFAULT_NETWORK_TIMEOUT,
        validators=[MinValueValidator(1)],
    )
    account_suffixes = models.TextField(
        null=True,
        blank=True,
        help_text='Semicolon-separated suffixes, e.g. @example.com;@staff.example.com',
    )
    bind_username = models.CharField(max_length=255, null=True, blank=True)
    bind_password = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'ad_profiles'
        ordering = ['profile_name']
        constraints = [
            models.UniqueConstraint(
                Lower('domain_identifier'),
                name='unique_domain_identifier_ci',
            ),
        ]

    def __str__(self):
        return self.profile_name

    def save(self, *args, **kwargs):
        self.domain_identifier = self.normalize_domain_identifier(self.domain_identifier)
        super().save(*args, **kwargs)

    def clean(self):
        self.domain_identifier = self.normalize_domain_identifier(self.domain_identifier)

    @staticmethod
    def normalize_domain_identifier(value):
        if value is None:
            return None
        value = value.strip().lower()
        return value or None

    @property
    def server_list(self):
        return split_list(self.domain_controllers)

    @property
    def suffix_list(self):
        return split_list(self.account_suffixes)

    @property
    def transport_security(self):
        # Both flags set is ambiguous; STARTTLS wins.
        if self.use_tls:
            return TransportSecurity.STARTTLS
        if self.use_ssl:
            return TransportSecurity.LDAPS
        return TransportSecurity.NONE
