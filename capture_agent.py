"""Python counterpart of ``api/static/js/error-catcher.js``.

Builds the same canonical reports for the three error channels and sends
them the same way: one form-encoded POST per report, at most one attempt,
transport failures logged and swallowed.
"""
import asyncio
import logging
import traceback
from typing import Any, Dict, Optional, Set
import httpx
from pydantic import BaseModel, field_validator
from utils.sanitize import as_text, coerce_int

logger = logging.getLogger(__name__)

SUBMIT_ERROR_ACTION = "jel_log_error"
RESOURCE_LOAD_ERROR = "Resource Load Error"
UNKNOWN_ERROR = "Unknown error"
UNHANDLED_REJECTION = "Unhandled promise rejection"


class ErrorReport(BaseModel):
    action: str = SUBMIT_ERROR_ACTION
    security: str = ""
    message: str = ""
    source: str = ""
    lineno: int = 0
    colno: int = 0
    stack: str = ""
    user_agent: str = ""

    @field_validator("action", "security", "message", "source", "stack", "user_agent", mode="before")
    @classmethod
    def _text_or_empty(cls, value):
        return _text(value)

    @field_validator("lineno", "colno", mode="before")
    @classmethod
    def _int_or_zero(cls, value):
        return coerce_int(value)

    def to_form(self) -> Dict[str, str]:
        return {k: str(v) for k, v in self.model_dump().items()}


def _text(value) -> str:
    # 에러 훅 안에서 호출되므로 어떤 값이 와도 예외 없이 문자열로
    if isinstance(value, BaseException):
        return str(value) or type(value).__name__
    return as_text(value)


def _get(obj: Any, name: str, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _exception_stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def report_script_error(message=None, source=None, lineno=None, colno=None, error=None) -> ErrorReport:
    # window.onerror(message, source, lineno, colno, error)
    if isinstance(error, BaseException):
        stack = _exception_stack(error)
    elif error is not None:
        stack = _get(error, "stack") or ""
    else:
        stack = ""
    return ErrorReport(
        message=_text(message) or UNKNOWN_ERROR,
        source=source or "",
        lineno=lineno or 0,
        colno=colno or 0,
        stack=stack,
    )


def report_rejection(reason: Any) -> ErrorReport:
    if isinstance(reason, str) and reason:
        return ErrorReport(message=reason)
    if reason is None or isinstance(reason, (str, int, float, bool)):
        return ErrorReport(message=UNHANDLED_REJECTION)
    if isinstance(reason, BaseException):
        # 마지막 프레임 위치를 source/lineno로 사용
        frames = traceback.extract_tb(reason.__traceback__)
        last = frames[-1] if frames else None
        return ErrorReport(
            message=str(reason) or type(reason).__name__,
            source=last.filename if last else "",
            lineno=(last.lineno or 0) if last else 0,
            stack=_exception_stack(reason),
        )
    return ErrorReport(
        message=_text(_get(reason, "message")) or UNHANDLED_REJECTION,
        source=_get(reason, "fileName") or "",
        lineno=_get(reason, "lineNumber") or 0,
        colno=_get(reason, "columnNumber") or 0,
        stack=_get(reason, "stack") or "",
    )


def report_resource_error(target: Any) -> Optional[ErrorReport]:
    """Only elements that reference a resource (src/href) produce a report."""
    if target is None:
        return None
    url = _get(target, "currentSrc") or _get(target, "src") or _get(target, "href")
    if not url:
        return None
    return ErrorReport(message=RESOURCE_LOAD_ERROR, source=url, lineno=0, colno=0, stack="")


class ReportSender:
    def __init__(self, ajax_url: str, nonce: str, user_agent: str = "", client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self.ajax_url = ajax_url
        self.nonce = nonce
        self.user_agent = user_agent
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self._pending: Set[asyncio.Task] = set()

    def _prepare(self, report: ErrorReport) -> ErrorReport:
        return report.model_copy(update={
            "security": self.nonce,
            "user_agent": report.user_agent or self.user_agent,
        })

    async def send(self, report: ErrorReport) -> bool:
        report = self._prepare(report)
        try:
            resp = await self.client.post(self.ajax_url, data=report.to_form())
        except Exception as e:  # 전송 실패는 호출자에게 전파하지 않음
            logger.warning("Failed to send error data: %s", e)
            return False
        if resp.status_code >= 400:
            logger.warning("Failed to send error data: HTTP %s", resp.status_code)
            return False
        return True

    def dispatch(self, report: ErrorReport) -> asyncio.Task:
        # fire-and-forget: 결과를 기다리지 않음
        task = asyncio.get_running_loop().create_task(self.send(report))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def aclose(self) -> None:
        await self.drain()
        if self._owns_client:
            await self.client.aclose()
