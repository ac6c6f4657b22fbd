"""
Test settings against PostgreSQL, for the tests that need row-level
locking between concurrent transactions (SQLite serialises writers and
ignores SELECT ... FOR UPDATE, so those tests skip there).

    DATABASE_HOST=localhost pytest --ds=config.settings_test_pg apps/api/tests/test_booking.py

Connection settings come from the same DATABASE_* variables as the
application settings. The test runner creates and drops test_<NAME>.
"""
import os

from .settings_test import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DATABASE_NAME', 'teleconsult_db'),
        'USER': os.environ.get('DATABASE_USER', 'teleconsult_user'),
        'PASSWORD': os.environ.get('DATABASE_PASSWORD', 'teleconsult_dev_pass'),
        'HOST': os.environ.get('DATABASE_HOST', 'postgres'),
        'PORT': os.environ.get('DATABASE_PORT', '5432'),
    }
}
