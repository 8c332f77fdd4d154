import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from models.base import Base
from models.user import User
from models.role import ADMIN_ROLE
from utils.accounts import create_admin_user, create_user
from utils.security import hash_password, verify_password, validate_password_policy


@pytest.mark.asyncio
async def test_user_create_and_authenticate():
    # 임시 DB 엔진/세션
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        pw = "Test1234!"
        user = await create_user(session, "testuser", "test@example.com", pw)
        assert user.role_names == []

        # DB에서 직접 조회
        result = await session.execute(User.__table__.select().where(User.username == "testuser"))
        row = result.first()
        assert row is not None
        # 비밀번호 검증
        assert verify_password(pw, row.hashed_password)
        assert not verify_password("WrongPass!", row.hashed_password)

        admin = await create_admin_user(session, "boss", "boss@example.com", "Boss1234!")
        assert admin.role_names == [ADMIN_ROLE]

        with pytest.raises(ValueError):
            await create_user(session, "testuser", "other@example.com", pw)

    await engine.dispose()


def test_verify_password_with_invalid_hash():
    # 평문이 저장된 계정은 로그인 불가
    assert not verify_password("admin1234", "admin1234")
    assert verify_password("Test1234!", hash_password("Test1234!"))


def test_password_policy():
    # 정상 케이스
    validate_password_policy("Test1234!")
    # 실패 케이스
    with pytest.raises(ValueError):
        validate_password_policy("short")
    with pytest.raises(ValueError):
        validate_password_policy("test1234!")  # 대문자 없음
    with pytest.raises(ValueError):
        validate_password_policy("Testtest!")  # 숫자 없음
    with pytest.raises(ValueError):
        validate_password_policy("Test1234")   # 특수문자 없음
