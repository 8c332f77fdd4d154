import re
import logging
import bcrypt

logger = logging.getLogger(__name__)


# 비밀번호 해싱
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


# 비밀번호 검증
def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())
    except ValueError as e:
        # 해시 형식이 잘못된 계정 (예: 평문 저장)
        logger.warning("[verify_password] invalid hash: %s", e)
        return False


# 비밀번호 정책 검사 (최소 8자, 대/소문자, 숫자, 특수문자 포함)
def validate_password_policy(password: str) -> None:
    if len(password) < 8:
        raise ValueError("비밀번호는 최소 8자 이상이어야 합니다.")
    if not re.search(r"[A-Z]", password):
        raise ValueError("비밀번호에 대문자가 포함되어야 합니다.")
    if not re.search(r"[a-z]", password):
        raise ValueError("비밀번호에 소문자가 포함되어야 합니다.")
    if not re.search(r"[0-9]", password):
        raise ValueError("비밀번호에 숫자가 포함되어야 합니다.")
    if not re.search(r"[!@#$%^&*()_+\-=\[\]{};':\",.<>/?]", password):
        raise ValueError("비밀번호에 특수문자가 포함되어야 합니다.")
