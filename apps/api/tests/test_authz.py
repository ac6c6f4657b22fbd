"""
Tests for roles and system actors.
"""
import pytest
from django.core.management import call_command

from apps.authz.models import Role, RoleChoices, User, UserRole, assign_role
from apps.authz.system_actors import SMS_SERVICE, SYSTEM, get_system_actor


@pytest.mark.django_db
class TestSystemActors:

    def test_get_system_actor_is_idempotent(self):
        first = get_system_actor(SMS_SERVICE)
        second = get_system_actor(SMS_SERVICE)

        assert first.pk == second.pk
        assert User.objects.filter(email='sms-service@internal').count() == 1

    def test_system_actor_cannot_hold_slots_or_log_in(self):
        actor = get_system_actor(SYSTEM)

        assert actor.can_have_availability is False
        assert actor.has_usable_password() is False
        assert actor.has_role(RoleChoices.SYSTEM)
        assert not actor.is_admin

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            get_system_actor('printer')

    def test_ensure_system_users_command(self):
        call_command('ensure_system_users')
        call_command('ensure_system_users')

        assert set(Role.objects.values_list('name', flat=True)) == set(RoleChoices.values)
        assert User.objects.filter(email__endswith='@internal').count() == 2


@pytest.mark.django_db
class TestRoles:

    def test_assign_role_is_idempotent(self, clinician):
        assign_role(clinician, RoleChoices.CLINICIAN)
        assert UserRole.objects.filter(user=clinician).count() == 1

    def test_is_admin(self, admin_user, clinician):
        assert admin_user.is_admin
        assert not clinician.is_admin

    def test_superuser_is_admin_without_role(self):
        user = User.objects.create_superuser(email='root@test.com', password='x')
        assert user.is_admin
