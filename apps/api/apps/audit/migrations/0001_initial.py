# Initial migration for audit: audit_event

from django.conf import settings
import django.core.serializers.json
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_timestamp', models.DateTimeField(auto_now_add=True)),
                ('event_type', models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update')], max_length=10)),
                ('entity_type', models.CharField(help_text='Model name of the mutated entity', max_length=100)),
                ('entity_id', models.CharField(help_text='Primary key of the mutated entity', max_length=64)),
                ('changed_fields', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Payload submitted with the mutation: {"changes": {...}}', null=True)),
                ('actor', models.ForeignKey(help_text='User the mutation is attributed to', on_delete=django.db.models.deletion.PROTECT, related_name='audit_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Audit Event',
                'verbose_name_plural': 'Audit Events',
                'db_table': 'audit_event',
                'ordering': ['-event_timestamp', '-id'],
                'indexes': [
                    models.Index(fields=['event_timestamp'], name='idx_audit_event_timestamp'),
                    models.Index(fields=['actor'], name='idx_audit_event_actor'),
                    models.Index(fields=['entity_type', 'entity_id'], name='idx_audit_event_entity'),
                ],
            },
        ),
    ]
