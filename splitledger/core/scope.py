"""Expense scope: personal or group-bound"""

from typing import Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel


class PersonalScope(BaseModel):
    """Expense or settlement outside any group"""

    kind: Literal["personal"] = "personal"

    @property
    def group_id(self) -> None:
        return None


class GroupScope(BaseModel):
    """Expense or settlement bound to a group; membership must be checked"""

    kind: Literal["group"] = "group"
    group_id: UUID


LedgerScope = Union[PersonalScope, GroupScope]


def scope_for(group_id: Optional[UUID]) -> LedgerScope:
    """Build the scope for an optional group id"""
    if group_id is None:
        return PersonalScope()
    return GroupScope(group_id=group_id)
