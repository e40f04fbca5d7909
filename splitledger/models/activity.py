"""Activity log model (append-only)"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, String, Uuid

from splitledger.database import Base


class ActivityType(str, enum.Enum):
    """Kinds of ledger mutations recorded in the activity log"""
    EXPENSE_CREATED = "EXPENSE_CREATED"
    EXPENSE_UPDATED = "EXPENSE_UPDATED"
    EXPENSE_DELETED = "EXPENSE_DELETED"
    SETTLEMENT_CREATED = "SETTLEMENT_CREATED"
    SETTLEMENT_COMPLETED = "SETTLEMENT_COMPLETED"
    SETTLEMENT_CANCELLED = "SETTLEMENT_CANCELLED"


class Activity(Base):
    """
    One ledger mutation.

    expense_id and settlement_id carry no foreign key so the entry outlives
    the expense it describes.
    """

    __tablename__ = "activities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    type = Column(Enum(ActivityType), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    group_id = Column(Uuid, nullable=True, index=True)
    expense_id = Column(Uuid, nullable=True, index=True)
    settlement_id = Column(Uuid, nullable=True, index=True)
    action = Column(String(500), nullable=False)
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Activity(type={self.type}, user_id={self.user_id}, action={self.action})>"
