"""User schemas"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserBrief(BaseModel):
    """Public view of a user inside ledger responses"""

    id: UUID
    username: str
    full_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
