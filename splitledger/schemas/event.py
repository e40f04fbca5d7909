"""Ledger events handed to the notifier"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from splitledger.models.activity import ActivityType


class LedgerEvent(BaseModel):
    """A committed ledger mutation, addressed to the users it concerns"""
    type: ActivityType
    actor_id: UUID
    recipient_ids: List[UUID]
    group_id: Optional[UUID] = None
    expense_id: Optional[UUID] = None
    settlement_id: Optional[UUID] = None
    summary: str
    payload: Dict[str, Any] = {}
    created_at: datetime = Field(default_factory=datetime.utcnow)
