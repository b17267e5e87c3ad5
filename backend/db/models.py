from datetime import datetime
from sqlalchemy import Column, Text, DateTime
from db.database import Base


class StorageSlot(Base):
    """One durable key-value slot; each calculator owns exactly one key."""

    __tablename__ = "storage_slots"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
