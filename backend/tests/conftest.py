"""
Shared fixtures: a fresh SQLite file database per test, the negotiation engine on top of it,
three users and helpers to create slots in a given status.
"""
import os

# Before any slotswap import: settings are read once at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

import slotswap.models  # noqa: F401  (registers tables on Base.metadata)
from slotswap.db.base import Base
from slotswap.db.session import make_engine, make_session_factory
from slotswap.models.slot import Slot, SlotStatus
from slotswap.models.swap_request import SwapRequest
from slotswap.services.negotiation import NegotiationEngine, SlotPatch
from slotswap.services.user_service import create_user

BASE_TIME = datetime(2026, 11, 2, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'slotswap.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return make_session_factory(db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def negotiation(session_factory):
    return NegotiationEngine(session_factory)


@pytest.fixture
def users(db):
    alice = create_user(db, "Alice", "alice@example.com")
    bob = create_user(db, "Bob", "bob@example.com")
    carol = create_user(db, "Carol", "carol@example.com")
    return SimpleNamespace(alice=alice.id, bob=bob.id, carol=carol.id)


@pytest.fixture
def make_slot(negotiation):
    """make_slot(owner_id, hour_offset=0, swappable=True, title=None) -> Slot."""
    counter = {"n": 0}

    def _make(owner_id, hour_offset=None, swappable=True, title=None):
        counter["n"] += 1
        offset = counter["n"] if hour_offset is None else hour_offset
        start = BASE_TIME + timedelta(hours=offset)
        slot = negotiation.create_slot(owner_id, title or f"Slot {counter['n']}", start, start + timedelta(hours=1))
        if swappable:
            slot = negotiation.update_slot(owner_id, slot.id, SlotPatch(status=SlotStatus.SWAPPABLE))
        return slot

    return _make


@pytest.fixture
def reload(session_factory):
    """reload(Model, pk): fresh committed state from a new session."""

    def _reload(model, pk):
        with session_factory() as session:
            return session.get(model, pk)

    return _reload


@pytest.fixture
def reload_slot(reload):
    return lambda slot_id: reload(Slot, slot_id)


@pytest.fixture
def reload_request(reload):
    return lambda request_id: reload(SwapRequest, request_id)
