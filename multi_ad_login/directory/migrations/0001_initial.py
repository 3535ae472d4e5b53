import django.core.validators
import django.db.models.functions.text
from django.db import migrations, models

import directory.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='DirectoryProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('profile_name', models.CharField(max_length=255, unique=True)),
                ('is_default', models.BooleanField(default=False)),
                ('domain_identifier', models.CharField(blank=True, db_index=True, help_text='UPN domain routed to this profile, e.g. example.com.', max_length=255, null=True)),
                ('base_dn', models.CharField(max_length=255)),
                ('domain_controllers', models.TextField(help_text='Semicolon-separated list of hosts, e.g. dc1.example.com;dc2.example.com', validators=[directory.models.validate_server_list])),
                ('port', models.PositiveIntegerField(default=389, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(65535)])),
                ('use_tls', models.BooleanField(default=False, help_text='STARTTLS on the plain port.')),
                ('use_ssl', models.BooleanField(default=False, help_text='LDAPS (implicit TLS).')),
                ('allow_self_signed', models.BooleanField(default=False)),
                ('network_timeout', models.PositiveSmallIntegerField(default=5, validators=[django.core.validators.MinValueValidator(1)])),
                ('account_suffixes', models.TextField(blank=True, help_text='Semicolon-separated suffixes, e.g. @example.com;@staff.example.com', null=True)),
                ('bind_username', models.CharField(blank=True, max_length=255, null=True)),
                ('bind_password', models.TextField(blank=True, null=True)),
            ],
            options={
                'db_table': 'ad_profiles',
                'ordering': ['profile_name'],
            },
        ),
        migrations.AddConstraint(
            model_name='directoryprofile',
            constraint=models.UniqueConstraint(django.db.models.functions.text.Lower('domain_identifier'), name='unique_domain_identifier_ci'),
        ),
    ]
