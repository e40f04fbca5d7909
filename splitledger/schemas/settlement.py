"""Settlement schemas"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from splitledger.models.settlement import SettlementMethod, SettlementStatus
from splitledger.schemas.common import PaginationMeta
from splitledger.schemas.user import UserBrief


class SettlementCreate(BaseModel):
    """Schema for recording a settlement paid by the caller"""

    paid_to_id: UUID
    group_id: Optional[UUID] = None
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    method: SettlementMethod = SettlementMethod.CASH
    note: Optional[str] = Field(default=None, max_length=500)

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return Decimal(str(v))


class SettlementResponse(BaseModel):
    """Settlement as returned to clients"""

    id: UUID
    paid_by_id: UUID
    paid_to_id: UUID
    group_id: Optional[UUID] = None
    amount: Decimal
    method: SettlementMethod
    status: SettlementStatus
    description: Optional[str] = None
    settled_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SettlementListResponse(BaseModel):
    """Paginated settlements"""

    items: List[SettlementResponse]
    pagination: PaginationMeta


class PendingSettlementListResponse(SettlementListResponse):
    """Paginated pending settlements with their total"""

    total_pending_amount: Decimal


class SettlementSuggestion(BaseModel):
    """Suggested settle-up action for one counterparty"""

    user: UserBrief
    amount: Decimal
    type: str  # "COLLECT" or "PAY"
    suggested_method: SettlementMethod
