# Seed the fixed roles

from django.db import migrations

ROLE_NAMES = ['admin', 'clinician', 'system']


def create_roles(apps, schema_editor):
    Role = apps.get_model('authz', 'Role')
    for name in ROLE_NAMES:
        Role.objects.get_or_create(name=name)


class Migration(migrations.Migration):

    dependencies = [
        ('authz', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_roles, migrations.RunPython.noop),
    ]
