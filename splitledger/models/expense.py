"""Expense model"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (Boolean, CheckConstraint, Column, Date, DateTime, Enum,
                        ForeignKey, Numeric, String, Text, Uuid)
from sqlalchemy.orm import relationship

from splitledger.database import Base


class SplitType(str, enum.Enum):
    """Enum for split types"""
    EQUAL = "EQUAL"
    EXACT = "EXACT"
    PERCENTAGE = "PERCENTAGE"
    SHARES = "SHARES"


class Expense(Base):
    """Expense paid by one user and owed back through its splits"""

    __tablename__ = "expenses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    group_id = Column(Uuid, ForeignKey("groups.id"), nullable=True, index=True)
    paid_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    split_type = Column(Enum(SplitType), nullable=False)
    expense_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    # True iff every split is settled; refreshed whenever splits are settled
    is_settled = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_expense_amount_positive"),
    )

    payer = relationship("User", back_populates="expenses_paid", foreign_keys=[paid_by_id])
    group = relationship("Group")
    splits = relationship(
        "Split", back_populates="expense", cascade="all, delete-orphan", passive_deletes=True
    )
    tags = relationship(
        "ExpenseTag", back_populates="expense", cascade="all, delete-orphan", passive_deletes=True
    )
    receipts = relationship(
        "Receipt", back_populates="expense", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, description={self.description}, amount={self.amount})>"
