"""Activity log data access (append-only)"""
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.models.activity import Activity


class ActivityRepository:
    """Appends activity entries; entries are never updated or deleted"""

    @staticmethod
    async def append(db: AsyncSession, activity: Activity) -> Activity:
        """
        Append an activity entry inside the caller's transaction.

        Args:
            db: Database session
            activity: Activity to append

        Returns:
            The flushed activity
        """
        db.add(activity)
        await db.flush()
        return activity
