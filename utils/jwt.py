from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

ACCESS_TOKEN_TYPE = "access"

__all__ = [
    "SECRET_KEY", "ALGORITHM", "ACCESS_TOKEN_EXPIRE_MINUTES", "JWTError",
    "encode_token", "create_access_token", "decode_token",
]


def encode_token(claims: dict, expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    claims = dict(data, typ=ACCESS_TOKEN_TYPE)
    return encode_token(claims, expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> dict:
    # 만료/서명 오류는 JWTError로 전파
    payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    if payload.get("typ") != expected_type:
        raise JWTError(f"Unexpected token type: {payload.get('typ')!r}")
    return payload
