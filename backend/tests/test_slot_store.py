"""Slot store: plain reads/writes and the compare-and-set primitives the engine relies on."""
from datetime import timedelta

import pytest

from slotswap.models.slot import OWNER_EDITABLE_STATUSES, SlotStatus
from slotswap.services import slot_store

from conftest import BASE_TIME


def _new_slot(db, owner_id, offset=0, title="Standup"):
    start = BASE_TIME + timedelta(hours=offset)
    slot = slot_store.create_slot(db, owner_id, title, start, start + timedelta(hours=1))
    db.commit()
    return slot


class TestReadsAndCreate:
    def test_create_slot_starts_busy(self, db, users):
        slot = _new_slot(db, users.alice)
        loaded = slot_store.get_slot(db, slot.id)
        assert loaded.owner_id == users.alice
        assert loaded.status == SlotStatus.BUSY
        assert loaded.title == "Standup"

    def test_get_missing_slot_returns_none(self, db, users):
        assert slot_store.get_slot(db, 999) is None

    def test_get_slots_owned_by_orders_by_start(self, db, users):
        late = _new_slot(db, users.alice, offset=5, title="late")
        early = _new_slot(db, users.alice, offset=1, title="early")
        _new_slot(db, users.bob, offset=2, title="not mine")
        assert [s.id for s in slot_store.get_slots_owned_by(db, users.alice)] == [early.id, late.id]

    def test_get_slots_skips_missing_ids(self, db, users):
        slot = _new_slot(db, users.alice)
        assert list(slot_store.get_slots(db, [slot.id, 12345, None])) == [slot.id]


class TestConditionalWrites:
    def test_set_status_compare_and_set(self, db, users):
        slot = _new_slot(db, users.alice)
        assert slot_store.set_slot_status(db, slot.id, SlotStatus.SWAP_PENDING, expected=SlotStatus.SWAPPABLE) is False
        assert slot_store.set_slot_status(db, slot.id, SlotStatus.SWAPPABLE, expected=SlotStatus.BUSY) is True
        db.commit()
        assert slot_store.get_slot(db, slot.id).status == SlotStatus.SWAPPABLE

    def test_set_owner_and_status(self, db, users):
        slot = _new_slot(db, users.alice)
        slot_store.set_slot_status(db, slot.id, SlotStatus.SWAP_PENDING)
        assert slot_store.set_slot_owner_and_status(
            db, slot.id, users.bob, SlotStatus.BUSY, expected=SlotStatus.SWAP_PENDING
        ) is True
        db.commit()
        loaded = slot_store.get_slot(db, slot.id)
        assert (loaded.owner_id, loaded.status) == (users.bob, SlotStatus.BUSY)

    def test_update_fields_requires_owner(self, db, users):
        slot = _new_slot(db, users.alice)
        assert slot_store.update_slot_fields(db, slot.id, users.bob, {"title": "Hijacked"}) is False
        assert slot_store.update_slot_fields(db, slot.id, users.alice, {"title": "Retro"}) is True
        db.commit()
        assert slot_store.get_slot(db, slot.id).title == "Retro"

    def test_update_fields_respects_allowed_statuses(self, db, users):
        slot = _new_slot(db, users.alice)
        slot_store.set_slot_status(db, slot.id, SlotStatus.SWAP_PENDING)
        db.commit()
        assert slot_store.update_slot_fields(
            db, slot.id, users.alice, {"title": "Nope"}, allowed_statuses=OWNER_EDITABLE_STATUSES
        ) is False
        db.rollback()
        assert slot_store.get_slot(db, slot.id).title == "Standup"

    def test_update_fields_with_empty_patch_reports_match(self, db, users):
        slot = _new_slot(db, users.alice)
        assert slot_store.update_slot_fields(db, slot.id, users.alice, {}) is True
        assert slot_store.update_slot_fields(db, slot.id, users.bob, {}) is False

    def test_update_fields_rejects_unknown_fields(self, db, users):
        slot = _new_slot(db, users.alice)
        with pytest.raises(ValueError):
            slot_store.update_slot_fields(db, slot.id, users.alice, {"owner_id": users.bob})

    def test_delete_requires_owner_and_allowed_status(self, db, users):
        slot = _new_slot(db, users.alice)
        assert slot_store.delete_slot(db, slot.id, users.bob) is False
        slot_store.set_slot_status(db, slot.id, SlotStatus.SWAP_PENDING)
        assert slot_store.delete_slot(db, slot.id, users.alice, allowed_statuses=OWNER_EDITABLE_STATUSES) is False
        slot_store.set_slot_status(db, slot.id, SlotStatus.BUSY)
        assert slot_store.delete_slot(db, slot.id, users.alice, allowed_statuses=OWNER_EDITABLE_STATUSES) is True
        db.commit()
        assert slot_store.get_slot(db, slot.id) is None
