# Initial migration for scheduling: slot

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Slot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('start_datetime', models.DateTimeField()),
                ('end_datetime', models.DateTimeField()),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='slots', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Slot',
                'verbose_name_plural': 'Slots',
                'db_table': 'slot',
                'ordering': ['start_datetime', 'id'],
                'indexes': [
                    models.Index(fields=['owner', 'start_datetime'], name='idx_slot_owner_start'),
                    models.Index(fields=['start_datetime'], name='idx_slot_start'),
                ],
                'constraints': [
                    models.CheckConstraint(check=models.Q(end_datetime__gt=models.F('start_datetime')), name='slot_end_after_start'),
                ],
            },
        ),
    ]
