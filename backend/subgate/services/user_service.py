"""ユーザー登録ロジック (Clerk user.created イベント)"""
from typing import Optional

from sqlalchemy.orm import Session

from subgate.models.user import User
from subgate.services import clerk_service
from subgate.core.logging import get_logger

logger = get_logger(__name__)


def build_display_name(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    """「名 姓」を結合。片方のみならそれを使う"""
    if first_name and last_name:
        return f"{first_name} {last_name}"
    return first_name or last_name or None


def resolve_email(data: dict) -> Optional[str]:
    """イベントペイロード → Clerk API の順でメールアドレスを解決"""
    email = clerk_service.select_primary_email(
        data.get("email_addresses"), data.get("primary_email_address_id"),
    )
    if email:
        return email

    user_id = data.get("id")
    if not user_id:
        return None

    logger.info(f"ペイロードにメールなし、Clerk APIから取得: user_id={user_id}")
    try:
        return clerk_service.get_primary_email(user_id)
    except Exception as e:
        logger.error(f"Clerk APIユーザー取得失敗: user_id={user_id}, error={e}")
        return None


def user_exists(db: Session, user_id: str) -> bool:
    return db.query(User).filter(User.id == user_id).first() is not None


def create_user(db: Session, user_id: str, email: str, name: Optional[str]) -> User:
    """ユーザーレコード作成 (購読なし)"""
    user = User(id=user_id, email=email, name=name, is_subscribed=False)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"ユーザー作成: user_id={user.id}")
    return user
