"""Split model"""

import uuid
from datetime import datetime

from sqlalchemy import (Boolean, CheckConstraint, Column, DateTime, ForeignKey,
                        Numeric, UniqueConstraint, Uuid)
from sqlalchemy.orm import relationship

from splitledger.database import Base


class Split(Base):
    """One participant's share of an expense, owed to the payer"""

    __tablename__ = "splits"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    expense_id = Column(Uuid, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    # Inputs kept for audit only; amount is authoritative
    percentage = Column(Numeric(5, 2), nullable=True)
    shares = Column(Numeric(10, 2), nullable=True)
    is_settled = Column(Boolean, default=False, nullable=False, index=True)
    settled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("expense_id", "user_id", name="uq_split_expense_user"),
        CheckConstraint("amount >= 0", name="check_split_amount_non_negative"),
        CheckConstraint(
            "percentage IS NULL OR (percentage >= 0 AND percentage <= 100)",
            name="check_split_percentage_range",
        ),
    )

    expense = relationship("Expense", back_populates="splits")
    user = relationship("User", back_populates="splits")

    def __repr__(self) -> str:
        return f"<Split(expense_id={self.expense_id}, user_id={self.user_id}, amount={self.amount}, settled={self.is_settled})>"
