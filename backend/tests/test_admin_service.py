"""Admin reset of negotiation state: requests go, slots and owners stay, locks are released."""
from slotswap.db.tables import NEGOTIATION_TABLE_NAMES
from slotswap.models.slot import SlotStatus
from slotswap.services.admin_service import reset_negotiations
from slotswap.services.invariant_audit import find_invariant_violations


class TestResetNegotiations:
    def test_clears_requests_and_unlocks_slots(self, db, negotiation, users, make_slot, reload_slot, reload_request):
        s1 = make_slot(users.alice)
        s2 = make_slot(users.bob)
        s3 = make_slot(users.carol)
        s4 = make_slot(users.bob)
        accepted = negotiation.propose(users.alice, s1.id, s2.id)
        negotiation.accept(users.bob, accepted.id)
        pending = negotiation.propose(users.carol, s3.id, s4.id)

        result = reset_negotiations(db)

        assert result == {"swap_requests": 2, "released_slots": 2}
        assert set(NEGOTIATION_TABLE_NAMES) <= set(result)
        assert reload_request(accepted.id) is None
        assert reload_request(pending.id) is None
        assert [(reload_slot(s).owner_id, reload_slot(s).status) for s in (s3.id, s4.id)] == [
            (users.carol, SlotStatus.SWAPPABLE),
            (users.bob, SlotStatus.SWAPPABLE),
        ]
        # Swapped slots keep their new owners
        assert reload_slot(s1.id).owner_id == users.bob
        assert find_invariant_violations(db) == []

    def test_slots_can_be_deleted_after_reset(self, db, negotiation, users, make_slot, reload_slot):
        s1 = make_slot(users.alice)
        s2 = make_slot(users.bob)
        negotiation.reject(users.bob, negotiation.propose(users.alice, s1.id, s2.id).id)

        reset_negotiations(db)
        negotiation.delete_slot(users.alice, s1.id)

        assert reload_slot(s1.id) is None

    def test_empty_store(self, db, users):
        assert reset_negotiations(db) == {"swap_requests": 0, "released_slots": 0}
