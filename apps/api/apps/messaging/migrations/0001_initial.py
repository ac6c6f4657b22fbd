# Initial migration for messaging: sms_message, outgoing_sms_message

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('consultations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SmsMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone_number', models.CharField(max_length=32)),
                ('body', models.TextField()),
                ('direction', models.CharField(choices=[('incoming', 'Incoming'), ('outgoing', 'Outgoing')], default='incoming', max_length=10)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'SMS Message',
                'verbose_name_plural': 'SMS Messages',
                'db_table': 'sms_message',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['phone_number', 'created_at'], name='idx_sms_phone_created'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OutgoingSmsMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone_number', models.CharField(max_length=32)),
                ('body', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('success', models.BooleanField(blank=True, null=True)),
                ('consultation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='outgoing_sms_messages', to='consultations.consultation')),
                ('sent_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='outgoing_sms_messages', to=settings.AUTH_USER_MODEL)),
                ('sent_message', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='outgoing_message', to='messaging.smsmessage')),
            ],
            options={
                'verbose_name': 'Outgoing SMS Message',
                'verbose_name_plural': 'Outgoing SMS Messages',
                'db_table': 'outgoing_sms_message',
                'ordering': ['created_at', 'id'],
            },
        ),
    ]
