import csv
import json
import logging
import os
from io import StringIO
from typing import List
from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse, HTMLResponse, RedirectResponse, Response, StreamingResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.config import AUTO_INITIALIZE_STORAGE, COOKIE_SECURE, ACCESS_TOKEN_EXPIRE_MINUTES
from core.db import get_db, init_engine
from error_store import ErrorLogStore, initialize_storage
from api.auth import ACCESS_TOKEN_COOKIE, UserOut, get_current_user, get_user_by_username, require_admin
from schemas.error_log import ErrorLogRead
from schemas.user import UserLogin, UserRead, Token
from utils.exceptions import CustomException, UnknownAction
from utils.jwt import create_access_token
from utils.nonces import (
    SUBMIT_ERROR_ACTION,
    CLEAR_LOGS_ACTION,
    create_submission_nonce,
    verify_submission_nonce,
    create_clear_logs_nonce,
    consume_clear_logs_nonce,
)
from utils.security import verify_password

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
STATIC_DIR = os.path.join(BASE_DIR, "static")
AGENT_SCRIPT_PATH = os.path.join(STATIC_DIR, "js", "error-catcher.js")

ERROR_LOGS_PAGE = "/admin/error-logs"
CLEAR_LOGS_URL = "/admin/error-logs/clear"

CSV_COLUMNS = ["id", "timestamp", "message", "source", "lineno", "colno", "stack", "user_agent", "ip_address"]

NO_STORE = {"Cache-Control": "no-store"}

# 스프레드시트가 수식으로 해석하는 첫 글자
CSV_FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def csv_safe(value):
    if isinstance(value, str) and value.startswith(CSV_FORMULA_PREFIXES):
        return "'" + value
    return value


def get_peer_address(request: Request) -> str:
    # 전송 계층에서 관측한 주소만 사용 (클라이언트가 보낸 값은 무시)
    return request.client.host if request.client else ""


def create_app() -> FastAPI:
    app = FastAPI(title="JS Error Logger", description="Browser error ingestion and storage service")
    templates = Jinja2Templates(directory=os.path.join(BASE_DIR, "templates"))
    with open(AGENT_SCRIPT_PATH, "r", encoding="utf-8") as f:
        agent_script = f.read()
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.on_event("startup")
    async def on_startup():
        engine = init_engine()
        if AUTO_INITIALIZE_STORAGE:
            await initialize_storage(engine)

    def get_error_store(db: AsyncSession = Depends(get_db)) -> ErrorLogStore:
        return ErrorLogStore(db)

    # ---- 에러 수집 (익명 접근 가능) ----

    async def log_error(request: Request, form, store: ErrorLogStore):
        verify_submission_nonce(form.get("security"))
        try:
            await store.append(form, get_peer_address(request))
        except SQLAlchemyError:
            logger.exception("Failed to persist JS error report")
            raise
        return JSONResponse({"success": True})

    ajax_actions = {SUBMIT_ERROR_ACTION: log_error}

    @app.post("/ajax")
    async def ajax(request: Request, store: ErrorLogStore = Depends(get_error_store)):
        form = await request.form()
        action = form.get("action")
        handler = ajax_actions.get(action) if isinstance(action, str) else None
        if handler is None:
            raise UnknownAction(action if isinstance(action, str) else "")
        return await handler(request, form, store)

    @app.get("/error-catcher.js")
    async def error_catcher_script(request: Request):
        config = {
            "ajax_url": str(request.url_for("ajax")),
            "nonce": create_submission_nonce(),
        }
        body = f"window.jel_ajax_object = {json.dumps(config)};\n{agent_script}"
        return Response(body, media_type="application/javascript", headers=NO_STORE)

    # ---- 관리자 화면 ----

    @app.get(ERROR_LOGS_PAGE, response_class=HTMLResponse)
    async def error_logs_page(
        request: Request,
        jel_cleared: str = None,
        db: AsyncSession = Depends(get_db),
        current_user: UserOut = Depends(require_admin),
    ):
        store = ErrorLogStore(db)
        errors = await store.list_all()
        # 렌더링마다 새 1회용 토큰 발급
        clear_nonce = await create_clear_logs_nonce(db, current_user.id)
        return templates.TemplateResponse(
            request,
            "error_logs.html",
            {
                "errors": errors,
                "cleared": jel_cleared == "1",
                "clear_nonce": clear_nonce,
                "clear_url": CLEAR_LOGS_URL,
            },
            headers=NO_STORE,
        )

    @app.post(CLEAR_LOGS_URL)
    async def clear_logs(
        request: Request,
        db: AsyncSession = Depends(get_db),
        current_user: UserOut = Depends(require_admin),
    ):
        form = await request.form()
        if form.get("action", CLEAR_LOGS_ACTION) != CLEAR_LOGS_ACTION:
            raise UnknownAction(str(form.get("action")))
        await consume_clear_logs_nonce(db, form.get("jel_clear_logs_nonce"), current_user.id)
        removed = await ErrorLogStore(db).clear_all()
        logger.info("Admin %s cleared %d JS error log(s)", current_user.username, removed)
        return RedirectResponse(url=f"{ERROR_LOGS_PAGE}?jel_cleared=1", status_code=303)

    @app.get("/api/logs/errors", response_model=List[ErrorLogRead])
    async def get_error_logs(
        store: ErrorLogStore = Depends(get_error_store),
        current_user: UserOut = Depends(require_admin),
    ):
        return await store.list_all()

    @app.get("/api/logs/errors/download")
    async def download_error_logs(
        store: ErrorLogStore = Depends(get_error_store),
        current_user: UserOut = Depends(require_admin),
    ):
        logs = await store.list_all()
        # CSV 변환
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_COLUMNS)
        for l in logs:
            writer.writerow([
                l.id, l.timestamp.isoformat(), csv_safe(l.message), csv_safe(l.source), l.lineno, l.colno,
                csv_safe(l.stack), csv_safe(l.user_agent), l.ip_address
            ])
        output.seek(0)
        return StreamingResponse(output, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=js_error_logs.csv"})

    # ---- 인증 ----

    @app.post("/auth/login", response_model=Token)
    async def login(form: UserLogin, db: AsyncSession = Depends(get_db)):
        user = await get_user_by_username(form.username, db)
        if not user or not verify_password(form.password, user.hashed_password):
            logger.warning("Failed login for %s", form.username)
            raise HTTPException(status_code=401, detail="Incorrect username or password")
        if not user.is_active:
            raise HTTPException(status_code=400, detail="Inactive user")
        access_token = create_access_token({"sub": user.username, "scopes": []})
        response = JSONResponse({"access_token": access_token, "token_type": "bearer"})
        response.set_cookie(
            ACCESS_TOKEN_COOKIE,
            access_token,
            max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            httponly=True,
            secure=COOKIE_SECURE,
            samesite="lax",
        )
        logger.info("User %s logged in", user.username)
        return response

    @app.get("/users/me", response_model=UserRead)
    async def get_profile(current_user: UserOut = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
        return await get_user_by_username(current_user.username, db)

    # DB 연결 상태 확인 엔드포인트
    @app.get("/health/db")
    async def health_check(db: AsyncSession = Depends(get_db)):
        try:
            await db.execute(text("SELECT 1"))
            return {"status": "ok"}
        except SQLAlchemyError as e:
            return {"status": "error", "detail": str(e)}

    @app.exception_handler(CustomException)
    async def custom_exception_handler(request: Request, exc: CustomException):
        logger.warning(f"[{exc.code}] {exc.dev_message} | {request.url}")
        if exc.render_html and "text/html" in request.headers.get("accept", ""):
            return templates.TemplateResponse(
                request, "error.html", {"message": exc.message}, status_code=exc.status_code
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict()
        )

    return app


app = create_app()
