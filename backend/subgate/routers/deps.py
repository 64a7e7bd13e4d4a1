"""共通依存関数: 認証"""
from typing import Optional
from fastapi import Request, HTTPException, Depends
from starlette.concurrency import run_in_threadpool

from subgate.services import clerk_service
from subgate.core.logging import get_logger

logger = get_logger(__name__)


async def get_current_user_id(request: Request) -> Optional[str]:
    """AccessMiddlewareで解決済みのClerkユーザーID。未解決ならここで検証"""
    if hasattr(request.state, "clerk_user_id"):
        return request.state.clerk_user_id
    try:
        return await run_in_threadpool(clerk_service.authenticate_request, request)
    except Exception as e:
        logger.warning(f"Clerkセッション検証エラー: {e}")
        return None


async def require_user_id(
    user_id: Optional[str] = Depends(get_current_user_id),
) -> str:
    """ログイン必須。未ログインなら401"""
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id
