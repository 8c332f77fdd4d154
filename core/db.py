from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from core.config import DATABASE_URL

# Base 정의 (모델에서 import)
Base = declarative_base()

# 싱글턴 엔진/세션
engine = None
SessionLocal = None


def init_engine(db_url=None):
    global engine, SessionLocal
    if engine is None:
        db_url = db_url or DATABASE_URL
        connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
        engine = create_async_engine(db_url, future=True, connect_args=connect_args)
        SessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine


async def dispose_engine():
    global engine, SessionLocal
    if engine is not None:
        await engine.dispose()
    engine = None
    SessionLocal = None


def get_db_url():
    return DATABASE_URL


def get_sync_db_url(db_url=None):
    # Alembic용 동기 드라이버 URL
    db_url = db_url or DATABASE_URL
    return db_url.replace("+aiosqlite", "").replace("+asyncpg", "+psycopg2").replace("+aiomysql", "+pymysql")


def get_engine():
    return init_engine()


def get_sessionmaker():
    init_engine()
    return SessionLocal


# FastAPI 의존성 주입용 세션 생성 함수
async def get_db():
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        yield session
