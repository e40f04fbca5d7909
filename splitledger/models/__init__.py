"""SQLAlchemy models"""
from splitledger.models.user import User
from splitledger.models.group import Group, GroupMember, MemberRole
from splitledger.models.expense import Expense, SplitType
from splitledger.models.split import Split
from splitledger.models.settlement import Settlement, SettlementMethod, SettlementStatus
from splitledger.models.activity import Activity, ActivityType
from splitledger.models.tag import ExpenseTag, Receipt, Tag

__all__ = [
    "User",
    "Group",
    "GroupMember",
    "MemberRole",
    "Expense",
    "SplitType",
    "Split",
    "Settlement",
    "SettlementMethod",
    "SettlementStatus",
    "Activity",
    "ActivityType",
    "Tag",
    "ExpenseTag",
    "Receipt",
]
