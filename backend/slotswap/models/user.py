"""Known users. Credentials live with the identity service; we only keep what views display."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from slotswap.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
