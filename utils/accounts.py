from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from models.role import Role, ADMIN_ROLE, BUILTIN_ROLES
from models.user import User
from utils.security import hash_password, validate_password_policy


async def get_or_create_role(db: AsyncSession, name: str, description: Optional[str] = None) -> Role:
    result = await db.execute(select(Role).where(Role.name == name))
    role = result.scalars().first()
    if role is None:
        role = Role(name=name, description=description or BUILTIN_ROLES.get(name))
        db.add(role)
        await db.flush()
    return role


async def create_user(db: AsyncSession, username: str, email: str, password: str, roles=()) -> User:
    validate_password_policy(password)
    result = await db.execute(select(User).where(User.username == username))
    if result.scalars().first():
        raise ValueError(f"Username already registered: {username}")
    user = User(username=username, email=email, hashed_password=hash_password(password))
    user.roles = [await get_or_create_role(db, name) for name in roles]
    db.add(user)
    await db.commit()
    # 관계 미리 로드
    result = await db.execute(
        select(User).options(selectinload(User.roles)).where(User.id == user.id)
    )
    return result.scalar_one()


async def create_admin_user(db: AsyncSession, username: str, email: str, password: str) -> User:
    return await create_user(db, username, email, password, roles=[ADMIN_ROLE])


async def set_user_active(db: AsyncSession, username: str, active: bool) -> User:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalars().first()
    if user is None:
        raise ValueError(f"Unknown user: {username}")
    user.is_active = active
    await db.commit()
    return user
