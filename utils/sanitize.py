import re

INT32_MAX = 2 ** 31 - 1

# <script>, <style> 블록은 내용까지 제거
_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r"<!--.*?(-->|$)", re.DOTALL)
# 닫히지 않은 태그는 문자열 끝까지 제거 (PHP strip_tags 동작)
_TAG_RE = re.compile(r"</?[A-Za-z!?/][^>]*(>|$)", re.DOTALL)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def as_text(value) -> str:
    """폼 값에서 문자열만 취함. 숫자는 문자열로, 그 외(None, 리스트, 파일)는 빈 문자열."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def strip_all_tags(text: str) -> str:
    text = _SCRIPT_STYLE_RE.sub("", text)
    text = _COMMENT_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    return _CONTROL_RE.sub("", text)


def sanitize_text_field(value, max_length: int = None) -> str:
    """한 줄 텍스트: 태그 제거 후 줄바꿈/연속 공백을 공백 하나로."""
    text = _WHITESPACE_RE.sub(" ", strip_all_tags(as_text(value))).strip()
    if max_length is not None:
        text = text[:max_length]
    return text


def sanitize_textarea_field(value, max_length: int = None) -> str:
    """여러 줄 텍스트(stack trace): 줄바꿈과 들여쓰기는 유지."""
    text = as_text(value).replace("\r\n", "\n").replace("\r", "\n")
    text = strip_all_tags(text).strip()
    if max_length is not None:
        text = text[:max_length]
    return text


def coerce_int(value) -> int:
    """앞부분 숫자만 정수로 해석 ("42px" -> 42, "bad" -> 0), 0..INT32_MAX 범위로 제한."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        number = int(value) if value == value and value not in (float("inf"), float("-inf")) else 0
    else:
        match = _LEADING_INT_RE.match(as_text(value))
        number = int(match.group(1)) if match else 0
    return min(max(number, 0), INT32_MAX)
