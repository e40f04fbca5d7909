"""Settlement model"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (CheckConstraint, Column, DateTime, Enum, ForeignKey,
                        Numeric, String, Uuid)
from sqlalchemy.orm import relationship

from splitledger.database import Base


class SettlementStatus(str, enum.Enum):
    """PENDING is initial; COMPLETED and CANCELLED are terminal"""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SettlementMethod(str, enum.Enum):
    """How the payer says they paid"""
    CASH = "CASH"
    UPI = "UPI"
    BANK_TRANSFER = "BANK_TRANSFER"
    OTHER = "OTHER"


class Settlement(Base):
    """Recorded acknowledgement that paid_by paid paid_to"""

    __tablename__ = "settlements"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    paid_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    paid_to_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    group_id = Column(Uuid, ForeignKey("groups.id"), nullable=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(Enum(SettlementMethod), default=SettlementMethod.CASH, nullable=False)
    status = Column(Enum(SettlementStatus), default=SettlementStatus.PENDING, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    settled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_settlement_amount_positive"),
        CheckConstraint("paid_by_id <> paid_to_id", name="check_settlement_distinct_parties"),
    )

    paid_by = relationship("User", foreign_keys=[paid_by_id])
    paid_to = relationship("User", foreign_keys=[paid_to_id])
    group = relationship("Group")

    @property
    def is_terminal(self) -> bool:
        return self.status in (SettlementStatus.COMPLETED, SettlementStatus.CANCELLED)

    def __repr__(self) -> str:
        return (
            f"<Settlement(id={self.id}, paid_by={self.paid_by_id}, "
            f"paid_to={self.paid_to_id}, amount={self.amount}, status={self.status})>"
        )
