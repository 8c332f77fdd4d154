import logging
from typing import Optional, List
from fastapi import HTTPException, Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from core.db import get_db
from models.role import ADMIN_ROLE
from models.user import User
from utils.exceptions import AdminRequired
from utils.jwt import decode_token, JWTError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"


class TokenData(BaseModel):
    username: Optional[str] = None
    scopes: List[str] = []


class UserOut(BaseModel):
    id: int
    username: str
    disabled: Optional[bool] = None
    scopes: List[str] = []
    roles: List[str] = []


# 관리자 화면은 브라우저에서 열리므로 Authorization 헤더 없으면 쿠키 확인
security = HTTPBearer(auto_error=False)


def _credentials_exception():
    return HTTPException(
        status_code=401,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


# DB 기반 사용자 조회 (roles 포함)
async def get_user_by_username(username: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(
        select(User).options(selectinload(User.roles)).where(User.username == username)
    )
    return result.scalars().first()


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: AsyncSession = Depends(get_db),
) -> UserOut:
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise _credentials_exception()
    try:
        payload = decode_token(token)
    except JWTError:
        raise _credentials_exception()
    username = payload.get("sub")
    if username is None:
        raise _credentials_exception()
    token_data = TokenData(username=username, scopes=payload.get("scopes", []))
    user = await get_user_by_username(token_data.username, db)
    if user is None:
        raise _credentials_exception()
    return UserOut(
        id=user.id,
        username=user.username,
        disabled=not user.is_active,
        scopes=token_data.scopes,
        roles=user.role_names,
    )


async def get_current_active_user(current_user: UserOut = Depends(get_current_user)) -> UserOut:
    if current_user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


def has_role(required_role: str):
    async def _has_role(current_user: UserOut = Depends(get_current_active_user)):
        if required_role not in current_user.roles:
            logger.warning("User %s lacks role %s", current_user.username, required_role)
            raise AdminRequired(dev_message=f"user={current_user.username} required_role={required_role}")
        return current_user
    return _has_role


require_admin = has_role(ADMIN_ROLE)
