import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# 테스트에서는 startup 자동 테이블 생성 대신 fixture 에서 직접 초기화
os.environ.setdefault("JEL_AUTO_INITIALIZE_STORAGE", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import re
import tempfile
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
import core.db as dbmod
from error_store import initialize_storage
from utils.accounts import create_admin_user, create_user
from utils.jwt import create_access_token
from utils.nonces import create_submission_nonce

CLEAR_NONCE_RE = re.compile(r'name="jel_clear_logs_nonce" value="([^"]+)"')


@pytest.fixture
def temp_db_url():
    db_fd, db_path = tempfile.mkstemp(suffix=".sqlite3")
    os.close(db_fd)
    yield f"sqlite+aiosqlite:///{db_path}"
    os.remove(db_path)


@pytest_asyncio.fixture
async def engine(temp_db_url):
    await dbmod.dispose_engine()
    engine = dbmod.init_engine(temp_db_url)
    await initialize_storage(engine)
    yield engine
    await dbmod.dispose_engine()


@pytest_asyncio.fixture
async def db(engine):
    async with dbmod.get_sessionmaker()() as session:
        yield session


@pytest.fixture
def app(engine):
    from api.rest import create_app
    return create_app()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_user(db):
    return await create_admin_user(db, "admin", "admin@example.com", "Admin1234!")


@pytest_asyncio.fixture
async def normal_user(db):
    return await create_user(db, "viewer", "viewer@example.com", "Viewer1234!")


def bearer(user):
    token = create_access_token({"sub": user.username, "scopes": []})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def user_headers(normal_user):
    return bearer(normal_user)


@pytest.fixture
def submission_nonce():
    return create_submission_nonce()


async def render_clear_nonce(client, headers) -> str:
    resp = await client.get("/admin/error-logs", headers=headers)
    assert resp.status_code == 200, resp.text
    match = CLEAR_NONCE_RE.search(resp.text)
    assert match, "clear form nonce not rendered"
    return match.group(1)


async def list_records():
    # 요청과 별개의 새 세션으로 조회 (identity map 영향 없음)
    from error_store import ErrorLogStore
    async with dbmod.get_sessionmaker()() as session:
        return await ErrorLogStore(session).list_all()
