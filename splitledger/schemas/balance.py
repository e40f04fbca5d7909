"""Balance and debt-simplification schemas"""
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from splitledger.schemas.settlement import SettlementResponse


class RelationshipBalance(BaseModel):
    """Balance between the current user and one counterparty"""
    counterparty_id: UUID
    owed_to_me: Decimal
    i_owe: Decimal
    net_balance: Decimal


class BalanceSummary(BaseModel):
    """Everything a user owes and is owed, optionally within one group"""
    total_owed: Decimal
    total_owing: Decimal
    net_balance: Decimal
    relationships: List[RelationshipBalance]
    recent_settlements: List[SettlementResponse] = []


class MemberBalance(BaseModel):
    """Net position of one participant (positive = is owed money)"""
    user_id: UUID
    net_balance: Decimal


class Transfer(BaseModel):
    """One settling payment produced by debt simplification"""
    from_user_id: UUID = Field(..., alias="from")
    to_user_id: UUID = Field(..., alias="to")
    amount: Decimal

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class OptimizedSettlementPlan(BaseModel):
    """Minimal transfers that zero a group's balances"""
    group_id: UUID
    original_transactions: int
    optimized_transactions: int
    savings: int
    balances: List[MemberBalance]
    transactions: List[Transfer]
