import logging
from datetime import datetime, timezone
from typing import Callable, List, Mapping, Any
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine
from sqlalchemy.future import select
from core.db import Base
from models.error_log import JsErrorLog
from models.action_nonce import ActionNonce
from models.role import Role, user_role
from models.user import User
from schemas.error_log import ErrorReportForm

logger = logging.getLogger(__name__)

# 플러그인이 소유하는 테이블 (비활성화 시 삭제 대상)
OWNED_TABLES = [JsErrorLog.__table__, ActionNonce.__table__]
# 관리자 계정 테이블은 생성만 하고 삭제하지 않음
SUPPORT_TABLES = [User.__table__, Role.__table__, user_role]

IP_ADDRESS_MAX_LENGTH = 100


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ErrorLogStore:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    async def append(self, raw_fields: Mapping[str, Any], peer_address: str) -> JsErrorLog:
        # 입력 검증은 실패하지 않음: 잘못된 값은 기본값으로 강등
        form = ErrorReportForm.model_validate(dict(raw_fields or {}))
        record = JsErrorLog(
            timestamp=self.clock(),
            message=form.message,
            source=form.source,
            lineno=form.lineno,
            colno=form.colno,
            stack=form.stack,
            user_agent=form.user_agent,
            ip_address=(peer_address or "")[:IP_ADDRESS_MAX_LENGTH],
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        logger.info("JS error #%s logged from %s (%s:%s)", record.id, record.ip_address, record.source, record.lineno)
        return record

    async def list_all(self) -> List[JsErrorLog]:
        result = await self.db.execute(
            select(JsErrorLog).order_by(JsErrorLog.timestamp.desc(), JsErrorLog.id.desc())
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(JsErrorLog))
        return result.scalar_one()

    async def clear_all(self) -> int:
        # 단일 DELETE: autoincrement 시퀀스를 초기화하지 않으므로 id 재사용 없음
        result = await self.db.execute(delete(JsErrorLog))
        await self.db.commit()
        removed = result.rowcount or 0
        logger.info("Cleared %d JS error log(s)", removed)
        return removed


async def initialize_storage(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, tables=SUPPORT_TABLES + OWNED_TABLES, checkfirst=True)
    logger.info("JS error log storage initialized")


async def teardown_storage(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all, tables=OWNED_TABLES, checkfirst=True)
    logger.info("JS error log storage dropped")
