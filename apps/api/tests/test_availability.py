"""
Availability tests: publishing a day of slots and deleting slots.

Days are interpreted in the clinic timezone (Africa/Kinshasa, UTC+1).
"""
from datetime import date, datetime, timedelta

import pytest
import pytz

from apps.audit.gatekeeper import AuditedQuerySet
from apps.consultations.models import Consultation
from apps.scheduling.exceptions import (
    AvailabilityNotAllowed,
    InvalidSlotTimes,
    SlotBooked,
    SlotNotFound,
)
from apps.scheduling.models import Slot
from apps.scheduling.services import delete_slot, replace_day_slots

DAY = date(2030, 1, 15)
KINSHASA = pytz.timezone('Africa/Kinshasa')


def local(hour, minute=0, day=DAY):
    return KINSHASA.localize(datetime(day.year, day.month, day.day, hour, minute))


@pytest.mark.django_db
class TestReplaceDaySlots:

    def test_creates_windows_in_clinic_timezone(self, clinician):
        slots = replace_day_slots(
            clinician, clinician, DAY,
            [{'start': '09:00', 'end': '09:30'}, {'start': '10:00', 'end': '10:30'}],
        )

        assert [s.start_datetime for s in slots] == [local(9), local(10)]
        assert slots[0].end_datetime == local(9, 30)
        assert slots[0].start_datetime.astimezone(pytz.utc).hour == 8
        assert Slot.objects.filter(owner=clinician).count() == 2

    def test_replaces_unbooked_and_keeps_booked(self, clinician, make_slot, make_request):
        booked = make_slot(clinician, local(8))
        make_slot(clinician, local(11))
        other_day = make_slot(clinician, local(11, day=DAY + timedelta(days=1)))
        Consultation.objects.create(
            assigned_to=clinician,
            request=make_request(),
            slot=booked,
            audit_actor=clinician,
        )

        replace_day_slots(clinician, clinician, DAY, [{'start': '14:00', 'end': '14:30'}])

        starts = set(Slot.objects.filter(owner=clinician).values_list('start_datetime', flat=True))
        assert starts == {booked.start_datetime, other_day.start_datetime, local(14)}

    def test_empty_list_clears_day(self, clinician, make_slot):
        make_slot(clinician, local(9))
        replace_day_slots(clinician, clinician, DAY, [])
        assert not Slot.objects.exists()

    @pytest.mark.parametrize('window', [
        {'start': '9h00', 'end': '09:30'},
        {'start': '24:00', 'end': '24:30'},
        {'start': '10:00', 'end': '09:30'},
        {'start': '10:00', 'end': '10:00'},
    ])
    def test_invalid_windows_are_rejected(self, clinician, make_slot, window):
        existing = make_slot(clinician, local(9))

        with pytest.raises(InvalidSlotTimes):
            replace_day_slots(clinician, clinician, DAY, [window])
        assert Slot.objects.filter(pk=existing.pk).exists()

    def test_clinician_cannot_edit_another_clinician(self, clinician, other_clinician):
        with pytest.raises(AvailabilityNotAllowed):
            replace_day_slots(clinician, other_clinician, DAY, [{'start': '09:00', 'end': '09:30'}])

    def test_admin_can_edit_another_clinician(self, admin_user, clinician):
        replace_day_slots(admin_user, clinician, DAY, [{'start': '09:00', 'end': '09:30'}])
        assert Slot.objects.get().owner == clinician

    def test_owner_without_availability_is_rejected(self, admin_user):
        with pytest.raises(AvailabilityNotAllowed):
            replace_day_slots(admin_user, admin_user, DAY, [{'start': '09:00', 'end': '09:30'}])


@pytest.mark.django_db
class TestDeleteSlot:

    def test_owner_deletes_unbooked_slot(self, clinician, make_slot):
        slot = make_slot(clinician, local(9))
        delete_slot(clinician, slot.pk)
        assert not Slot.objects.filter(pk=slot.pk).exists()

    def test_admin_deletes_any_unbooked_slot(self, admin_user, clinician, make_slot):
        slot = make_slot(clinician, local(9))
        delete_slot(admin_user, slot.pk)
        assert not Slot.objects.filter(pk=slot.pk).exists()

    def test_other_clinician_cannot_delete(self, clinician, other_clinician, make_slot):
        slot = make_slot(clinician, local(9))
        with pytest.raises(AvailabilityNotAllowed):
            delete_slot(other_clinician, slot.pk)
        assert Slot.objects.filter(pk=slot.pk).exists()

    def test_missing_slot(self, clinician):
        with pytest.raises(SlotNotFound):
            delete_slot(clinician, 424242)

    def test_booked_slot(self, clinician, make_slot, make_request):
        slot = make_slot(clinician, local(9))
        Consultation.objects.create(
            assigned_to=clinician,
            request=make_request(),
            slot=slot,
            audit_actor=clinician,
        )
        with pytest.raises(SlotBooked):
            delete_slot(clinician, slot.pk)
        assert Slot.objects.filter(pk=slot.pk).exists()

    def test_slot_booked_while_deleting_is_kept(self, clinician, make_slot, make_request, monkeypatch):
        slot = make_slot(clinician, local(9))
        pending = make_request()
        raw_delete = AuditedQuerySet._raw_delete

        def book_then_delete(queryset, using):
            Consultation.objects.create(
                assigned_to=clinician,
                request=pending,
                slot=slot,
                audit_actor=clinician,
            )
            return raw_delete(queryset, using)

        monkeypatch.setattr(AuditedQuerySet, '_raw_delete', book_then_delete)

        with pytest.raises(SlotBooked):
            delete_slot(clinician, slot.pk)
        assert Slot.objects.filter(pk=slot.pk).exists()
        assert Consultation.objects.filter(slot=slot).exists()
