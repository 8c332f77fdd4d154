import os
from dotenv import load_dotenv

# .env 파일에서 환경변수 로드
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./app.db")

# JWT 설정
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)

# 에러 수집 설정
SUBMISSION_TOKEN_TTL_HOURS = int(os.getenv("JEL_SUBMISSION_TOKEN_TTL_HOURS", "24"))
CLEAR_TOKEN_TTL_MINUTES = int(os.getenv("JEL_CLEAR_TOKEN_TTL_MINUTES", "60"))
MAX_FIELD_LENGTH = int(os.getenv("JEL_MAX_FIELD_LENGTH", "65535"))
MAX_STACK_LENGTH = int(os.getenv("JEL_MAX_STACK_LENGTH", str(1024 * 1024)))
AUTO_INITIALIZE_STORAGE = _env_bool("JEL_AUTO_INITIALIZE_STORAGE", True)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
