import logging
from types import SimpleNamespace
from urllib.parse import parse_qs
import httpx
import pytest
from httpx import ASGITransport
from capture_agent import (
    ErrorReport,
    ReportSender,
    report_script_error,
    report_rejection,
    report_resource_error,
    RESOURCE_LOAD_ERROR,
)
from conftest import list_records


def test_script_error_defaults():
    report = report_script_error()
    assert report.message == "Unknown error"
    assert report.source == ""
    assert report.lineno == 0
    assert report.colno == 0
    assert report.stack == ""


def test_script_error_with_js_error_object():
    error = {"stack": "TypeError: x is undefined\n    at app.js:42:7"}
    report = report_script_error("TypeError: x is undefined", "app.js", 42, 7, error)
    assert report.lineno == 42
    assert report.colno == 7
    assert report.stack.startswith("TypeError")


def test_script_error_with_python_exception():
    try:
        raise ValueError("bad value")
    except ValueError as e:
        report = report_script_error(str(e), error=e)
    assert report.message == "bad value"
    assert "ValueError: bad value" in report.stack


def test_rejection_variants():
    assert report_rejection(None).message == "Unhandled promise rejection"
    assert report_rejection("plain reason").message == "plain reason"
    reason = SimpleNamespace(message="fetch failed", fileName="api.js", lineNumber=3, columnNumber=9, stack="s")
    report = report_rejection(reason)
    assert (report.message, report.source, report.lineno, report.colno, report.stack) == ("fetch failed", "api.js", 3, 9, "s")
    assert report_rejection(SimpleNamespace()).message == "Unhandled promise rejection"


def test_rejection_from_exception():
    try:
        raise RuntimeError("task died")
    except RuntimeError as e:
        report = report_rejection(e)
    assert report.message == "task died"
    assert report.source.endswith("test_capture_agent.py")
    assert report.lineno > 0


def test_builders_never_raise_on_malformed_values():
    report = report_script_error("boom", "app.js", "bad", None)
    assert (report.message, report.lineno, report.colno) == ("boom", 0, 0)

    report = report_rejection(SimpleNamespace(message="x", lineNumber="12:3", columnNumber=object()))
    assert (report.message, report.lineno, report.colno) == ("x", 12, 0)

    assert report_rejection(SimpleNamespace(message=ValueError("inner"))).message == "inner"
    assert report_rejection(SimpleNamespace(message=object())).message == "Unhandled promise rejection"

    report = report_script_error(["not", "text"], {"src": 1}, -4, 2.5, {"stack": 123})
    assert (report.message, report.source, report.lineno, report.colno, report.stack) == ("Unknown error", "", 0, 2, "123")


def test_resource_error_only_for_resource_targets():
    report = report_resource_error(SimpleNamespace(src="https://example.com/missing.png"))
    assert report.message == RESOURCE_LOAD_ERROR
    assert report.source == "https://example.com/missing.png"
    assert (report.lineno, report.colno, report.stack) == (0, 0, "")
    assert report_resource_error({"href": "https://example.com/site.css"}).source == "https://example.com/site.css"
    # src/href 가 없는 요소나 window 자체는 무시
    assert report_resource_error(SimpleNamespace(tagName="DIV")) is None
    assert report_resource_error(None) is None


@pytest.mark.asyncio
async def test_sender_posts_form_once():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"success": True})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    sender = ReportSender("http://logger/ajax", nonce="tok", user_agent="pytest-agent", client=client)
    ok = await sender.send(report_script_error("boom", "app.js", 1, 2))
    await client.aclose()

    assert ok is True
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert request.headers["content-type"].startswith("application/x-www-form-urlencoded")
    form = {k: v[0] for k, v in parse_qs(request.content.decode(), keep_blank_values=True).items()}
    assert form["action"] == "jel_log_error"
    assert form["security"] == "tok"
    assert form["message"] == "boom"
    assert form["lineno"] == "1"
    assert form["user_agent"] == "pytest-agent"


@pytest.mark.asyncio
async def test_sender_swallows_transport_failure(caplog):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    sender = ReportSender("http://logger/ajax", nonce="tok", client=client)
    with caplog.at_level(logging.WARNING, logger="capture_agent"):
        ok = await sender.send(ErrorReport(message="x"))
    await client.aclose()

    assert ok is False
    # 재시도 없음
    assert len(calls) == 1
    assert "Failed to send error data" in caplog.text


@pytest.mark.asyncio
async def test_sender_reports_rejected_submission():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(403)))
    sender = ReportSender("http://logger/ajax", nonce="bad", client=client)
    assert await sender.send(ErrorReport(message="x")) is False
    await client.aclose()


@pytest.mark.asyncio
async def test_dispatch_end_to_end(app, submission_nonce):
    client = httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    sender = ReportSender("http://test/ajax", nonce=submission_nonce, user_agent="Mozilla/5.0", client=client)

    sender.dispatch(report_resource_error(SimpleNamespace(src="https://example.com/missing.png")))
    sender.dispatch(report_script_error("TypeError: x is undefined", "app.js", "42", None))
    await sender.aclose()
    await client.aclose()

    records = await list_records()
    assert len(records) == 2
    resource = next(r for r in records if r.message == "Resource Load Error")
    assert resource.source == "https://example.com/missing.png"
    assert (resource.lineno, resource.colno, resource.stack) == (0, 0, "")
    assert resource.user_agent == "Mozilla/5.0"
    script = next(r for r in records if r.source == "app.js")
    assert script.lineno == 42
