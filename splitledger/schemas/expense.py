"""Expense schemas"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from splitledger.models.expense import SplitType
from splitledger.schemas.common import PaginationMeta
from splitledger.schemas.user import UserBrief


class SplitInput(BaseModel):
    """Input for one participant; which field is read depends on split_type"""

    user_id: UUID
    amount: Optional[Decimal] = Field(default=None, ge=0)
    percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    shares: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("amount", "percentage", "shares", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal"""
        if v is None:
            return v
        return Decimal(str(v))


class ExpenseBase(BaseModel):
    """Base expense schema"""

    description: str = Field(..., max_length=500, min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    expense_date: date
    group_id: Optional[UUID] = None
    split_type: SplitType
    notes: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Convert amount to Decimal"""
        return Decimal(str(v))


class ExpenseCreate(ExpenseBase):
    """Schema for creating an expense; the caller is the payer"""

    splits: List[SplitInput] = Field(..., min_length=1)
    tag_ids: List[UUID] = Field(default_factory=list)


class ExpenseUpdate(ExpenseBase):
    """Schema for updating an expense; splits and tags are replaced wholesale"""

    splits: List[SplitInput] = Field(..., min_length=1)
    tag_ids: List[UUID] = Field(default_factory=list)


class SplitResponse(BaseModel):
    """Response schema for a split"""

    user: UserBrief
    amount: Decimal
    percentage: Optional[Decimal] = None
    shares: Optional[Decimal] = None
    is_settled: bool
    settled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ExpenseResponse(BaseModel):
    """Complete expense response schema"""

    id: UUID
    group_id: Optional[UUID] = None
    description: str
    amount: Decimal
    currency: str
    split_type: SplitType
    expense_date: date
    notes: Optional[str] = None
    is_settled: bool
    paid_by: UserBrief = Field(..., validation_alias="payer")
    splits: List[SplitResponse]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ExpenseListItem(BaseModel):
    """Schema for expense in list view"""

    id: UUID
    expense_date: date
    group_id: Optional[UUID] = None
    description: str
    amount: Decimal
    your_share: Decimal
    share_type: str  # "credit" or "debit"
    paid_by: UserBrief


class ExpenseListResponse(BaseModel):
    """Response schema for expense list"""

    items: List[ExpenseListItem]
    pagination: PaginationMeta
