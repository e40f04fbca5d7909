"""Tag, expense-tag association and receipt models"""

import uuid
from datetime import datetime

from sqlalchemy import (Column, DateTime, ForeignKey, String, UniqueConstraint,
                        Uuid)
from sqlalchemy.orm import relationship

from splitledger.database import Base


class Tag(Base):
    """Free-form label attachable to expenses"""

    __tablename__ = "tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(50), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Tag(name={self.name})>"


class ExpenseTag(Base):
    """Association between an expense and a tag"""

    __tablename__ = "expense_tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    expense_id = Column(Uuid, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id = Column(Uuid, ForeignKey("tags.id"), nullable=False)

    __table_args__ = (
        UniqueConstraint("expense_id", "tag_id", name="uq_expense_tag"),
    )

    expense = relationship("Expense", back_populates="tags")
    tag = relationship("Tag")


class Receipt(Base):
    """Uploaded receipt reference for an expense"""

    __tablename__ = "receipts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    expense_id = Column(Uuid, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    file_url = Column(String(1000), nullable=False)
    uploaded_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    expense = relationship("Expense", back_populates="receipts")
