"""
Slot allocator: deterministic choice of the next bookable slot.

Pure selection logic. Reads the slot table, writes nothing, and takes
"now" and the buffer as explicit inputs so repeated calls over the same
data return the same slot.
"""
from datetime import datetime, timedelta
from typing import Iterable, Optional

from apps.scheduling.models import Slot


def booking_buffer_instant(now: datetime, buffer_minutes: int) -> datetime:
    """Earliest start instant a slot may have to be bookable."""
    return now + timedelta(minutes=buffer_minutes)


def find_next_slot(
    buffer_instant: datetime,
    owner=None,
    exclude_ids: Iterable = (),
) -> Optional[Slot]:
    """
    Return the eligible slot with the earliest start, or None.

    Eligible means: no consultation, start_datetime >= buffer_instant
    (a slot starting exactly at the buffer instant is bookable), owner
    may hold availability, owner matches ``owner`` when given, and id
    not in ``exclude_ids``. Ties on start are broken by id ascending.
    """
    candidates = Slot.objects.bookable(buffer_instant)
    if owner is not None:
        candidates = candidates.filter(owner=owner)
    exclude_ids = list(exclude_ids)
    if exclude_ids:
        candidates = candidates.exclude(id__in=exclude_ids)
    return candidates.select_related('owner').order_by('start_datetime', 'id').first()
