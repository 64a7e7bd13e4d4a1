"""Clerk API操作サービス (セッション検証・ユーザーディレクトリ)"""
from typing import Any, Optional

from clerk_backend_api import Clerk
from clerk_backend_api.security.types import AuthenticateRequestOptions

from subgate.core.config import settings
from subgate.core.logging import get_logger

logger = get_logger(__name__)

ADMIN_ROLE = "admin"

_client: Optional[Clerk] = None


def _get_client() -> Clerk:
    global _client
    if _client is None:
        _client = Clerk(bearer_auth=settings.CLERK_SECRET_KEY)
    return _client


def authenticate_request(request) -> Optional[str]:
    """セッショントークンを検証し、ClerkユーザーIDを返す。未ログインならNone"""
    state = _get_client().authenticate_request(
        request,
        AuthenticateRequestOptions(
            secret_key=settings.CLERK_SECRET_KEY,
            authorized_parties=settings.authorized_parties_list,
        ),
    )
    if not state.is_signed_in:
        logger.debug(f"Clerkセッション未検証: {getattr(state, 'reason', None)}")
        return None
    return (state.payload or {}).get("sub")


def get_user(user_id: str):
    """Clerkディレクトリからユーザー取得"""
    return _get_client().users.get(user_id=user_id)


def get_user_role(user_id: str) -> Optional[str]:
    """public_metadata.role を取得"""
    user = get_user(user_id)
    metadata = user.public_metadata or {}
    return metadata.get("role")


def _field(obj: Any, name: str):
    # Webhookペイロード(dict) と SDKモデル(属性) の両方に対応
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def select_primary_email(email_addresses, primary_email_address_id: Optional[str]) -> Optional[str]:
    """プライマリメールを優先し、なければ先頭のメールアドレスを返す"""
    if not email_addresses:
        return None
    for entry in email_addresses:
        if _field(entry, "id") == primary_email_address_id:
            email = _field(entry, "email_address")
            if email:
                return email
            break
    return _field(email_addresses[0], "email_address") or None


def get_primary_email(user_id: str) -> Optional[str]:
    """Clerkディレクトリのユーザー情報からメールアドレスを解決"""
    user = get_user(user_id)
    return select_primary_email(user.email_addresses, user.primary_email_address_id)
