"""アクセス制御ミドルウェア: ログイン状態とロールによるリダイレクト"""
import re

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from subgate.services import clerk_service
from subgate.core.logging import get_logger

logger = get_logger(__name__)

SIGN_IN_PATH = "/sign-in"
DASHBOARD_PATH = "/dashboard"
ADMIN_DASHBOARD_PATH = "/admin/dashboard"
ADMIN_PREFIX = "/admin"
ERROR_PATH = "/error"

# 未ログインでもアクセス可能なパス
PUBLIC_ROUTES = [
    re.compile(r"^/$"),
    re.compile(r"^/api/webhooks/register$"),
    re.compile(r"^/sign-in(.*)$"),
    re.compile(r"^/sign-up(.*)$"),
]

# ミドルウェアを通さないパス
EXEMPT_PATHS = {"/health", "/api/health"}
EXEMPT_PREFIXES = ("/_next", "/static")


def is_public_route(path: str) -> bool:
    return any(p.match(path) for p in PUBLIC_ROUTES)


def is_exempt(path: str) -> bool:
    """静的ファイル (パスに "." を含む)・ヘルスチェックは対象外"""
    if path in EXEMPT_PATHS or path.startswith(EXEMPT_PREFIXES):
        return True
    return "." in path


def dashboard_for(role) -> str:
    return ADMIN_DASHBOARD_PATH if role == clerk_service.ADMIN_ROLE else DASHBOARD_PATH


def _redirect(request: Request, path: str) -> RedirectResponse:
    return RedirectResponse(str(request.url.replace(path=path, query="")), status_code=307)


class AccessMiddleware(BaseHTTPMiddleware):
    """Clerkセッションとロールに応じたリダイレクト"""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if is_exempt(path):
            return await call_next(request)

        try:
            user_id = await run_in_threadpool(clerk_service.authenticate_request, request)
        except Exception as e:
            logger.warning(f"Clerkセッション検証エラー: path={path}, error={e}")
            user_id = None
        request.state.clerk_user_id = user_id

        if not user_id:
            if not is_public_route(path):
                return _redirect(request, SIGN_IN_PATH)
            return await call_next(request)

        try:
            role = await run_in_threadpool(clerk_service.get_user_role, user_id)
        except Exception as e:
            logger.error(f"Clerkユーザー情報取得エラー: user_id={user_id}, error={e}")
            return _redirect(request, ERROR_PATH)

        is_admin = role == clerk_service.ADMIN_ROLE
        if is_admin and path == DASHBOARD_PATH:
            return _redirect(request, ADMIN_DASHBOARD_PATH)
        if not is_admin and path.startswith(ADMIN_PREFIX):
            return _redirect(request, DASHBOARD_PATH)
        if is_public_route(path):
            return _redirect(request, dashboard_for(role))

        return await call_next(request)
