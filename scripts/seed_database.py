"""Database seeding script (5 users, one group, dev tokens)"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import splitledger modules
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import select

from splitledger.core.security import create_access_token
from splitledger.database import AsyncSessionLocal, Base, engine
from splitledger.models.group import Group, GroupMember, MemberRole
from splitledger.models.user import User

USERS = [
    {"email": "user1@example.com", "username": "user1", "full_name": "User One"},
    {"email": "user2@example.com", "username": "user2", "full_name": "User Two"},
    {"email": "user3@example.com", "username": "user3", "full_name": "User Three"},
    {"email": "user4@example.com", "username": "user4", "full_name": "User Four"},
    {"email": "user5@example.com", "username": "user5", "full_name": "User Five"},
]

GROUP_NAME = "Flatmates"


async def seed_users(session) -> list:
    """Create the seed users that don't exist yet and return all of them"""
    users = []
    created_count = 0

    for user_data in USERS:
        result = await session.execute(
            select(User).where(User.email == user_data["email"])
        )
        user = result.scalar_one_or_none()

        if user:
            print(f"  User '{user_data['username']}' already exists, skipping")
        else:
            user = User(is_active=True, **user_data)
            session.add(user)
            created_count += 1
            print(f"  Created user '{user_data['username']}' ({user_data['email']})")

        users.append(user)

    await session.flush()
    print(f"  Created: {created_count} users")
    return users


async def seed_group(session, users: list) -> Group:
    """Create the seed group owned by the first user, with everyone as a member"""
    result = await session.execute(select(Group).where(Group.name == GROUP_NAME))
    group = result.scalar_one_or_none()
    if group:
        print(f"  Group '{GROUP_NAME}' already exists, skipping")
        return group

    owner = users[0]
    group = Group(name=GROUP_NAME, description="Shared flat expenses", owner_id=owner.id)
    session.add(group)
    await session.flush()

    for user in users:
        session.add(
            GroupMember(
                group_id=group.id,
                user_id=user.id,
                role=MemberRole.OWNER if user.id == owner.id else MemberRole.MEMBER,
            )
        )
    await session.flush()
    print(f"  Created group '{GROUP_NAME}' with {len(users)} members")
    return group


async def main():
    """Create tables, seed data and print bearer tokens for local testing"""
    print("Seeding database...\n")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        async with AsyncSessionLocal() as session:
            users = await seed_users(session)
            group = await seed_group(session, users)
            await session.commit()

        print(f"\nGroup id: {group.id}")
        print("Bearer tokens:")
        for user in users:
            print(f"  {user.username}: {create_access_token(user.id)}")
        print("\nDatabase seeding completed successfully!")
    except Exception as e:
        print(f"\nError seeding database: {str(e)}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
