import sys
import traceback
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
# 注: dotenv.load_dotenv() は config.py で実行済み

from formboard import config
from formboard.errors import ConfigurationError
from formboard.models import FormRegistration, LoginRequest, PasswordUpdateRequest
from formboard.services.aggregator import calculate_submission_status
from formboard.services.auth_service import authenticate_user, update_password
from formboard.services.form_registry import register_form
from formboard.services.reports import list_teams, managed_forms, submission_rate, team_summaries
from formboard.services.sheets_client import GoogleSheetsDataSource, SheetsDataSource
from formboard.utils.session import load_session, session_user, sign_session

GENERIC_ERROR = "サーバーエラーが発生しました"

app = FastAPI(title="Form Submission Dashboard (Google Sheets)")

# =========================
# 依存関係
# =========================
_data_source: Optional[GoogleSheetsDataSource] = None


def get_data_source() -> SheetsDataSource:
    """データソース（認証情報を保持）はプロセス内で1つだけ作る。APIクライアントは呼び出しごとに作られる"""
    global _data_source
    if _data_source is None:
        _data_source = GoogleSheetsDataSource()
    return _data_source


def get_management_id() -> str:
    return config.require_management_sheet_id()


def get_session_user(request: Request) -> dict:
    """セッションCookieからログイン中のユーザーを取り出す。無効なら401"""
    session = load_session(request.cookies.get(config.SESSION_COOKIE_NAME), config.SESSION_SECRET)
    if not session or not session.get("name"):
        raise HTTPException(status_code=401, detail="認証されていません")
    return session


# =========================
# 例外ハンドラ
# =========================
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    print(f"[API] リクエスト形式エラー: {exc.errors()} ({request.method} {request.url.path})")
    sys.stdout.flush()
    return JSONResponse({"error": "リクエストの形式が正しくありません"}, status_code=400)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    # 詳細はサーバーログのみに出す
    print(f"[API] 設定エラー: {exc} ({request.method} {request.url.path})")
    sys.stdout.flush()
    return JSONResponse({"error": GENERIC_ERROR}, status_code=500)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    print(f"[API] Unexpected error: {exc} ({request.method} {request.url.path})")
    print(f"[API] Traceback: {traceback.format_exc()}")
    sys.stdout.flush()
    return JSONResponse({"error": GENERIC_ERROR}, status_code=500)


# =========================
# FastAPIエンドポイント
# =========================
@app.get("/health")
def health():
    return {"ok": True}


@app.post("/api/auth/login")
def login(
    body: LoginRequest,
    response: Response,
    source: SheetsDataSource = Depends(get_data_source),
):
    user = authenticate_user(body.name, body.password, source=source)
    if user is None:
        raise HTTPException(status_code=401, detail="名前またはパスワードが違います")
    token = sign_session(user.model_dump(), config.SESSION_SECRET, config.SESSION_MAX_AGE)
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        token,
        max_age=config.SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
    )
    print(f"[Auth] ログイン: {user.id}")
    return {"user": user.model_dump()}


@app.post("/api/auth/logout")
def logout(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return {"success": True}


@app.get("/api/auth/me")
def me(session: dict = Depends(get_session_user)):
    return {"user": session_user(session)}


@app.post("/api/auth/update-password")
def change_password(
    body: PasswordUpdateRequest,
    session: dict = Depends(get_session_user),
    source: SheetsDataSource = Depends(get_data_source),
):
    if not body.new_password or len(body.new_password) < config.MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="パスワードが短すぎます")
    if not update_password(session["name"], body.new_password, source=source):
        raise HTTPException(status_code=500, detail="更新に失敗しました")
    return {"success": True}


@app.get("/api/sheets/submission-status")
def submission_status(
    form_id: Optional[str] = Query(None, alias="formId"),
    session: dict = Depends(get_session_user),
    source: SheetsDataSource = Depends(get_data_source),
    management_id: str = Depends(get_management_id),
):
    statuses = calculate_submission_status(
        session["name"], form_id, source=source, management_id=management_id
    )
    viewer = statuses[0] if statuses else None
    return {
        "statuses": [s.model_dump(by_alias=True) for s in statuses],
        "currentUserRole": viewer.user_role if viewer else "一般",
        "currentUserTeam": viewer.user_team if viewer else "",
        "teams": list_teams(statuses),
        "rates": {s.user_id: submission_rate(s) for s in statuses},
    }


@app.get("/api/forms/managed")
def my_forms(
    session: dict = Depends(get_session_user),
    source: SheetsDataSource = Depends(get_data_source),
    management_id: str = Depends(get_management_id),
):
    statuses = calculate_submission_status(session["name"], source=source, management_id=management_id)
    return {"forms": [f.model_dump(by_alias=True) for f in managed_forms(statuses)]}


@app.get("/api/forms/{form_id}/summary")
def form_summary(
    form_id: str,
    session: dict = Depends(get_session_user),
    source: SheetsDataSource = Depends(get_data_source),
    management_id: str = Depends(get_management_id),
):
    """フォーム詳細画面: チーム別の提出状況"""
    statuses = calculate_submission_status(
        session["name"], form_id, source=source, management_id=management_id
    )
    if not statuses:
        raise HTTPException(status_code=403, detail="名簿に登録されていません")
    form = next((f for f in statuses[0].forms if f.form_id == form_id), None)
    if form is None:
        raise HTTPException(status_code=404, detail="フォームが見つかりません")
    return {
        "formId": form_id,
        "formName": form.form_name,
        "totalMembers": len(statuses),
        "teams": [t.model_dump(by_alias=True) for t in team_summaries(statuses, form_id)],
    }


@app.post("/api/forms/add")
def add_form(
    body: FormRegistration,
    source: SheetsDataSource = Depends(get_data_source),
    management_id: str = Depends(get_management_id),
):
    try:
        register_form(body, source=source, management_id=management_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError:
        raise
    except Exception as e:
        print(f"[Forms] フォーム追加エラー: {e}")
        sys.stdout.flush()
        raise HTTPException(status_code=500, detail="登録に失敗しました")
    return {"success": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
