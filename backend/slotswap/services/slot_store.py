"""
Slot store: rows of the slots table.

Functions flush but never commit; callers run them inside a unit of work. Mutations that take part in
the swap state machine are conditional UPDATE/DELETE statements and return whether a row matched, so a
concurrent writer that got there first is detected at write time rather than overwritten.
"""
from datetime import datetime
from typing import Iterable

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from slotswap.core.timeutil import as_utc
from slotswap.models.slot import Slot, SlotStatus

# Fields an owner may change through update_slot_fields
UPDATABLE_FIELDS = ("title", "start_time", "end_time", "status")


def _status_values(statuses: Iterable[SlotStatus]) -> list[str]:
    return [SlotStatus(s).value for s in statuses]


def get_slot(db: Session, slot_id: int, for_update: bool = False) -> Slot | None:
    """Load a slot fresh from the database (never a stale identity-map copy)."""
    return db.get(Slot, slot_id, with_for_update=for_update, populate_existing=True)


def get_slots(db: Session, slot_ids: Iterable[int], for_update: bool = False) -> dict[int, Slot]:
    """Load several slots by id. Row locks (for_update) are taken in id order so lockers never deadlock."""
    ids = sorted({i for i in slot_ids if i is not None})
    if not ids:
        return {}
    stmt = select(Slot).where(Slot.id.in_(ids)).order_by(Slot.id.asc())
    if for_update:
        stmt = stmt.with_for_update()
    rows = db.execute(stmt.execution_options(populate_existing=True)).scalars().all()
    return {r.id: r for r in rows}


def get_slots_owned_by(db: Session, owner_id: int) -> list[Slot]:
    """All slots of one owner, earliest first."""
    return list(
        db.execute(
            select(Slot)
            .where(Slot.owner_id == owner_id)
            .order_by(Slot.start_time.asc(), Slot.id.asc())
            .execution_options(populate_existing=True)
        ).scalars().all()
    )


def create_slot(db: Session, owner_id: int, title: str, start_time: datetime, end_time: datetime) -> Slot:
    """New slots always start BUSY."""
    row = Slot(
        owner_id=owner_id,
        title=title,
        start_time=as_utc(start_time),
        end_time=as_utc(end_time),
        status=SlotStatus.BUSY.value,
    )
    db.add(row)
    db.flush()
    return row


def update_slot_fields(
    db: Session,
    slot_id: int,
    owner_id: int,
    patch: dict,
    allowed_statuses: Iterable[SlotStatus] | None = None,
) -> bool:
    """
    Apply patch (subset of UPDATABLE_FIELDS) to the slot if owner_id owns it and, when given, its current
    status is one of allowed_statuses. Returns False when no row matched.
    """
    unknown = set(patch) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update slot fields: {sorted(unknown)}")
    values = dict(patch)
    for key in ("start_time", "end_time"):
        if values.get(key) is not None:
            values[key] = as_utc(values[key])
    if values.get("status") is not None:
        values["status"] = SlotStatus(values["status"]).value
    conditions = [Slot.id == slot_id, Slot.owner_id == owner_id]
    if allowed_statuses is not None:
        conditions.append(Slot.status.in_(_status_values(allowed_statuses)))
    if not values:
        # Nothing to write; still report whether the guarded row exists
        return db.execute(select(Slot.id).where(*conditions)).first() is not None
    result = db.execute(
        update(Slot).where(*conditions).values(**values).execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def delete_slot(
    db: Session,
    slot_id: int,
    owner_id: int,
    allowed_statuses: Iterable[SlotStatus] | None = None,
) -> bool:
    """Delete the slot if owner_id owns it (and its status is allowed). Returns False when no row matched."""
    stmt = delete(Slot).where(Slot.id == slot_id, Slot.owner_id == owner_id)
    if allowed_statuses is not None:
        stmt = stmt.where(Slot.status.in_(_status_values(allowed_statuses)))
    result = db.execute(stmt.execution_options(synchronize_session=False))
    return result.rowcount == 1


def set_slot_status(
    db: Session,
    slot_id: int,
    status: SlotStatus,
    expected: SlotStatus | None = None,
) -> bool:
    """Set status; with expected, only if the row still has that status (compare-and-set)."""
    stmt = update(Slot).where(Slot.id == slot_id)
    if expected is not None:
        stmt = stmt.where(Slot.status == SlotStatus(expected).value)
    result = db.execute(
        stmt.values(status=SlotStatus(status).value).execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def set_slot_owner_and_status(
    db: Session,
    slot_id: int,
    owner_id: int,
    status: SlotStatus,
    expected: SlotStatus | None = None,
) -> bool:
    """Hand the slot to owner_id and set status in one statement; compare-and-set on expected."""
    stmt = update(Slot).where(Slot.id == slot_id)
    if expected is not None:
        stmt = stmt.where(Slot.status == SlotStatus(expected).value)
    result = db.execute(
        stmt.values(owner_id=owner_id, status=SlotStatus(status).value).execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
