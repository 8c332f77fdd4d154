from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
from core.config import MAX_FIELD_LENGTH, MAX_STACK_LENGTH
from utils.sanitize import sanitize_text_field, sanitize_textarea_field, coerce_int


class ErrorReportForm(BaseModel):
    """브라우저가 보낸 에러 리포트 (신뢰할 수 없는 입력).

    모든 필드는 선택값이며 검증 실패 대신 기본값('' 또는 0)으로 강등된다.
    id, timestamp, ip_address 등 서버가 정하는 값은 무시한다.
    """
    model_config = ConfigDict(extra="ignore")

    message: str = ""
    source: str = ""
    lineno: int = 0
    colno: int = 0
    stack: str = ""
    user_agent: str = ""

    @field_validator("message", "source", "user_agent", mode="before")
    @classmethod
    def _clean_text(cls, value):
        return sanitize_text_field(value, MAX_FIELD_LENGTH)

    @field_validator("stack", mode="before")
    @classmethod
    def _clean_stack(cls, value):
        return sanitize_textarea_field(value, MAX_STACK_LENGTH)

    @field_validator("lineno", "colno", mode="before")
    @classmethod
    def _clean_int(cls, value):
        return coerce_int(value)


class ErrorLogRead(BaseModel):
    id: int
    timestamp: datetime
    message: str
    source: str
    lineno: int
    colno: int
    stack: str
    user_agent: str
    ip_address: str

    model_config = ConfigDict(from_attributes=True)
