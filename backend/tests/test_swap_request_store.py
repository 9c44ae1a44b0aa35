"""Swap request store: creation, listings, status compare-and-set and the cascade primitive."""
from datetime import timedelta

from slotswap.models.swap_request import SwapRequestStatus
from slotswap.services import slot_store, swap_request_store

from conftest import BASE_TIME


def _slots(db, *owners):
    out = []
    for i, owner_id in enumerate(owners):
        start = BASE_TIME + timedelta(hours=i)
        out.append(slot_store.create_slot(db, owner_id, f"slot {i}", start, start + timedelta(hours=1)))
    db.commit()
    return out


def test_create_is_pending(db, users):
    s1, s2 = _slots(db, users.alice, users.bob)
    created = swap_request_store.create_swap_request(db, users.alice, users.bob, s1.id, s2.id)
    db.commit()
    loaded = swap_request_store.get_swap_request(db, created.id)
    assert loaded.status == SwapRequestStatus.PENDING
    assert loaded.slot_ids == (s1.id, s2.id)
    assert loaded.created_at is not None
    assert loaded.responded_at is None


def test_set_status_only_from_expected(db, users):
    s1, s2 = _slots(db, users.alice, users.bob)
    req = swap_request_store.create_swap_request(db, users.alice, users.bob, s1.id, s2.id)
    assert swap_request_store.set_swap_request_status(db, req.id, SwapRequestStatus.ACCEPTED) is True
    # Terminal: a second transition from PENDING matches nothing
    assert swap_request_store.set_swap_request_status(db, req.id, SwapRequestStatus.REJECTED) is False
    db.commit()
    loaded = swap_request_store.get_swap_request(db, req.id)
    assert loaded.status == SwapRequestStatus.ACCEPTED
    assert loaded.responded_at is not None


def test_listings(db, users):
    s1, s2, s3 = _slots(db, users.alice, users.bob, users.carol)
    first = swap_request_store.create_swap_request(db, users.alice, users.bob, s1.id, s2.id)
    second = swap_request_store.create_swap_request(db, users.carol, users.bob, s3.id, s2.id)
    swap_request_store.set_swap_request_status(db, second.id, SwapRequestStatus.REJECTED)
    third = swap_request_store.create_swap_request(db, users.alice, users.carol, s1.id, s3.id)
    db.commit()

    assert [r.id for r in swap_request_store.list_incoming(db, users.bob)] == [first.id, second.id]
    pending = swap_request_store.list_incoming(db, users.bob, status=SwapRequestStatus.PENDING)
    assert [r.id for r in pending] == [first.id]
    assert [r.id for r in swap_request_store.list_outgoing(db, users.alice)] == [third.id, first.id]


def test_reject_all_pending_referencing(db, users):
    s1, s2, s3, s4 = _slots(db, users.alice, users.bob, users.carol, users.carol)
    on_s1 = swap_request_store.create_swap_request(db, users.alice, users.bob, s1.id, s2.id)
    on_s2 = swap_request_store.create_swap_request(db, users.carol, users.bob, s3.id, s2.id)
    unrelated = swap_request_store.create_swap_request(db, users.carol, users.alice, s4.id, s1.id)
    swap_request_store.set_swap_request_status(db, unrelated.id, SwapRequestStatus.ACCEPTED)
    untouched = swap_request_store.create_swap_request(db, users.alice, users.carol, s3.id, s4.id)
    db.commit()

    rejected = swap_request_store.reject_all_pending_referencing(db, {s2.id})
    db.commit()

    assert sorted(r.id for r in rejected) == [on_s1.id, on_s2.id]
    assert swap_request_store.get_swap_request(db, on_s1.id).status == SwapRequestStatus.REJECTED
    assert swap_request_store.get_swap_request(db, on_s2.id).status == SwapRequestStatus.REJECTED
    assert swap_request_store.get_swap_request(db, unrelated.id).status == SwapRequestStatus.ACCEPTED
    assert swap_request_store.get_swap_request(db, untouched.id).status == SwapRequestStatus.PENDING


def test_reject_all_pending_referencing_nothing(db, users):
    assert swap_request_store.reject_all_pending_referencing(db, set()) == []


def test_is_slot_referenced_counts_terminal_requests(db, users):
    s1, s2, s3 = _slots(db, users.alice, users.bob, users.carol)
    done = swap_request_store.create_swap_request(db, users.alice, users.bob, s1.id, s2.id)
    swap_request_store.set_swap_request_status(db, done.id, SwapRequestStatus.REJECTED)
    db.commit()

    assert swap_request_store.is_slot_referenced(db, s1.id) is True
    assert swap_request_store.is_slot_referenced(db, s2.id) is True
    assert swap_request_store.is_slot_referenced(db, s3.id) is False
