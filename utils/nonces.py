"""Single-purpose tokens guarding the two trust boundaries.

SubmissionNonce proves that an error report comes from a page this service
rendered. It is a signed, stateless JWT handed to every viewer, so any holder
may submit. ClearLogsNonce is the per-render anti-replay token of the
"clear logs" form: it is stored server side, bound to the administrator that
rendered the form and deleted on first use.

The two are never interchangeable: different `typ` claims, different
storage, different validation functions and different failure messages.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from core.config import SUBMISSION_TOKEN_TTL_HOURS, CLEAR_TOKEN_TTL_MINUTES
from models.action_nonce import ActionNonce
from utils.exceptions import InvalidSubmissionToken, InvalidClearLogsToken
from utils.jwt import encode_token, decode_token, JWTError

logger = logging.getLogger(__name__)

SUBMIT_ERROR_ACTION = "jel_log_error"
CLEAR_LOGS_ACTION = "jel_clear_logs"

SUBMISSION_TOKEN_TYPE = "submission"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SubmissionNonce:
    action = SUBMIT_ERROR_ACTION

    @classmethod
    def issue(cls, ttl: Optional[timedelta] = None) -> str:
        ttl = ttl or timedelta(hours=SUBMISSION_TOKEN_TTL_HOURS)
        return encode_token({"typ": SUBMISSION_TOKEN_TYPE, "act": cls.action}, ttl)

    @classmethod
    def verify(cls, token: Optional[str]) -> None:
        if not token or not isinstance(token, str):
            raise InvalidSubmissionToken("missing security field")
        try:
            payload = decode_token(token, expected_type=SUBMISSION_TOKEN_TYPE)
        except JWTError as e:
            raise InvalidSubmissionToken(str(e))
        if payload.get("act") != cls.action:
            raise InvalidSubmissionToken(f"token scoped to {payload.get('act')!r}")


class ClearLogsNonce:
    action = CLEAR_LOGS_ACTION

    @classmethod
    async def issue(cls, db: AsyncSession, user_id: int) -> str:
        now = _utcnow()
        # 만료된 토큰 정리
        await db.execute(
            delete(ActionNonce).where(
                ActionNonce.created_at < now - timedelta(minutes=CLEAR_TOKEN_TTL_MINUTES)
            )
        )
        token = secrets.token_urlsafe(32)
        db.add(ActionNonce(token=token, action=cls.action, user_id=user_id, created_at=now))
        await db.commit()
        return token

    @classmethod
    async def consume(cls, db: AsyncSession, token: Optional[str], user_id: int) -> None:
        if not token or not isinstance(token, str):
            raise InvalidClearLogsToken("missing jel_clear_logs_nonce")
        cutoff = _utcnow() - timedelta(minutes=CLEAR_TOKEN_TTL_MINUTES)
        # 삭제 성공 = 검증 성공 (동시 요청 중 하나만 통과)
        result = await db.execute(
            delete(ActionNonce).where(
                ActionNonce.token == token,
                ActionNonce.action == cls.action,
                ActionNonce.user_id == user_id,
                ActionNonce.created_at >= cutoff,
            )
        )
        await db.commit()
        if result.rowcount != 1:
            raise InvalidClearLogsToken(f"unknown, used or expired nonce for user {user_id}")


def create_submission_nonce() -> str:
    return SubmissionNonce.issue()


def verify_submission_nonce(token: Optional[str]) -> None:
    SubmissionNonce.verify(token)


async def create_clear_logs_nonce(db: AsyncSession, user_id: int) -> str:
    return await ClearLogsNonce.issue(db, user_id)


async def consume_clear_logs_nonce(db: AsyncSession, token: Optional[str], user_id: int) -> None:
    await ClearLogsNonce.consume(db, token, user_id)
