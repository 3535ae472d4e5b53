"""Account models: Role and UserProfile."""
from django.conf import settings
from django.db import models


class Role(models.Model):
    """An application role; new directory users receive the default role."""
    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True, default='')
    priority = models.IntegerField(
        default=0,
        help_text='Higher value = more privileges.',
    )

    class Meta:
        ordering = ['-priority']

    def __str__(self):
        return self.name


class UserProfile(models.Model):
    """Extended profile linking a Django user to their directory identity."""
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
    )
    display_name = models.CharField(max_length=255, blank=True, default='')
    ad_guid = models.CharField(
        max_length=64, blank=True, default='', db_index=True, help_text='AD objectGUID',
    )
    last_auth_profile = models.CharField(
        max_length=255, blank=True, default='',
        help_text='Name of the directory profile used for the last login.',
    )
    last_ad_upn = models.CharField(max_length=255, blank=True, default='')
    roles = models.ManyToManyField(Role, blank=True)
    last_synced = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['user__username']

    def __str__(self):
        return f"{self.user.username} profile"
