# Initial migration for core: app_settings

import apps.core.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AppSettings',
            fields=[
                ('id', models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ('consultation_duration_minutes', models.PositiveIntegerField(default=10)),
                ('break_duration_minutes', models.PositiveIntegerField(default=5)),
                ('buffer_time_minutes', models.PositiveIntegerField(default=apps.core.models.default_buffer_time_minutes, help_text='Slots starting before now + buffer are not bookable')),
                ('consultation_sms_templates', models.JSONField(default=apps.core.models.default_sms_templates, help_text='Array of {name, body}; body may contain {consultationTime}')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'App Settings',
                'verbose_name_plural': 'App Settings',
                'db_table': 'app_settings',
            },
        ),
    ]
