"""
Users known to the swap core. Identity (passwords, tokens) belongs to the external identity service;
rows here exist so slots have owners and views can show names.
"""
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from slotswap.models.user import User


def create_user(db: Session, name: str, email: str) -> User:
    """Insert a user and commit. Email is normalized to lower case."""
    row = User(name=(name or "").strip(), email=(email or "").strip().lower())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == (email or "").strip().lower()).first()


def get_user_names(db: Session, user_ids: Iterable[int]) -> dict[int, str]:
    """Display names by id for the given users (unknown ids are left out)."""
    ids = sorted(set(user_ids))
    if not ids:
        return {}
    return dict(db.execute(select(User.id, User.name).where(User.id.in_(ids))).all())
