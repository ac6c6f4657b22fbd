"""
Availability services: publish a day of slots, delete a slot.
"""
import logging
import re
from datetime import datetime, time, timedelta
from typing import Dict, List

import pytz
from django.conf import settings
from django.db import transaction

from apps.core.observability.events import log_domain_event
from apps.scheduling.exceptions import AvailabilityNotAllowed, InvalidSlotTimes, SlotNotFound
from apps.scheduling.models import Slot

logger = logging.getLogger(__name__)

TIME_FORMAT = re.compile(r'^([01]?[0-9]|2[0-3]):[0-5][0-9]$')


def _parse_time(value: str) -> time:
    if not value or not TIME_FORMAT.match(value):
        raise InvalidSlotTimes('Invalid time format. Expected HH:mm format')
    hours, minutes = value.split(':')
    return time(int(hours), int(minutes))


def _check_can_edit(actor, owner):
    if owner.pk != actor.pk and not actor.is_admin:
        raise AvailabilityNotAllowed("Only admins can edit another user's availability.")
    if not owner.can_have_availability:
        raise AvailabilityNotAllowed()


def replace_day_slots(actor, owner, day, windows: List[Dict[str, str]]) -> List[Slot]:
    """
    Replace the unbooked slots of ``owner`` on ``day`` with ``windows``.

    Booked slots of that day are kept. Windows are {'start': 'HH:MM',
    'end': 'HH:MM'} in the clinic timezone.

    Args:
        actor: user performing the change (audit attribution)
        owner: user whose availability is edited
        day: datetime.date in the clinic timezone
        windows: list of {'start', 'end'} dicts

    Raises:
        AvailabilityNotAllowed: actor may not edit owner, or owner cannot hold slots
        InvalidSlotTimes: malformed time, or end not after start
    """
    _check_can_edit(actor, owner)

    tz = pytz.timezone(settings.CLINIC_TIME_ZONE)
    parsed = []
    for window in windows:
        start = tz.localize(datetime.combine(day, _parse_time(window.get('start'))))
        end = tz.localize(datetime.combine(day, _parse_time(window.get('end'))))
        if end <= start:
            raise InvalidSlotTimes('End time must be after start time')
        parsed.append((start, end))

    day_start = tz.localize(datetime.combine(day, time.min))
    day_end = day_start + timedelta(days=1)

    with transaction.atomic():
        deleted, _ = Slot.objects.filter(
            owner=owner,
            start_datetime__gte=day_start,
            start_datetime__lt=day_end,
        ).without_consultation().delete()

        created = [
            Slot.objects.create(
                owner=owner,
                start_datetime=start,
                end_datetime=end,
                audit_actor=actor,
            )
            for start, end in parsed
        ]

    log_domain_event(
        'availability_replaced',
        entity_type='Slot',
        entity_ids={'owner_id': str(owner.pk)},
        actor_id=str(actor.pk),
        day=day.isoformat(),
        deleted_count=deleted,
        created_count=len(created),
    )
    return created


def delete_slot(actor, slot_id) -> None:
    """
    Delete one unbooked slot.

    Raises:
        SlotNotFound: no slot with this id
        AvailabilityNotAllowed: actor is neither the owner nor an admin
        SlotBooked: a consultation references the slot
    """
    slot = Slot.objects.select_related('owner').filter(pk=slot_id).first()
    if slot is None:
        raise SlotNotFound()

    if slot.owner_id != actor.pk and not actor.is_admin:
        raise AvailabilityNotAllowed("Only admins can delete another user's slots.")

    try:
        slot.delete()
    except Slot.DoesNotExist:
        raise SlotNotFound()

    log_domain_event(
        'slot_deleted',
        entity_type='Slot',
        entity_id=str(slot_id),
        actor_id=str(actor.pk),
    )
