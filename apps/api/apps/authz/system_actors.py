"""
Well-known system identities for machine-originated writes.

Inbound SMS ingestion and gateway callbacks have no human user; their
writes are attributed to the SMS service actor instead.
"""
from apps.authz.models import RoleChoices, User, assign_role

SYSTEM = 'system'
SMS_SERVICE = 'sms_service'

SYSTEM_ACTORS = {
    SYSTEM: {'email': 'system@internal', 'name': 'System'},
    SMS_SERVICE: {'email': 'sms-service@internal', 'name': 'SMS Service'},
}


def get_system_actor(kind=SYSTEM):
    """
    Return the system user for ``kind``, creating it on first use.

    System actors cannot log in and never own slots.
    """
    try:
        identity = SYSTEM_ACTORS[kind]
    except KeyError:
        raise ValueError(f'Unknown system actor: {kind}')

    user = User.objects.filter(email=identity['email']).first()
    if user is None:
        user = User.objects.create_user(
            email=identity['email'],
            password=None,
            name=identity['name'],
            can_have_availability=False,
        )
        assign_role(user, RoleChoices.SYSTEM)
    return user


def ensure_system_actors():
    """Seed every system actor (idempotent)."""
    return {kind: get_system_actor(kind) for kind in SYSTEM_ACTORS}
