"""購読ビジネスロジック"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from subgate.models.user import User
from subgate.core.logging import get_logger

logger = get_logger(__name__)


def utcnow() -> datetime:
    """DB保存用の現在時刻 (naive UTC)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def add_one_month(dt: datetime) -> datetime:
    """1暦月後の日時。翌月に同じ日がなければ超過分だけ繰り越す (1/31 → 3/3)"""
    year = dt.year + dt.month // 12
    month = dt.month % 12 + 1
    return dt.replace(year=year, month=month, day=1) + timedelta(days=dt.day - 1)


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def activate_subscription(db: Session, user: User, now: Optional[datetime] = None) -> datetime:
    """購読開始: 期限を現在から1ヶ月後に設定 (決済処理は未実装)"""
    subscription_ends = add_one_month(now or utcnow())
    user.is_subscribed = True
    user.subscription_ends = subscription_ends
    db.commit()
    db.refresh(user)
    logger.info(f"購読開始: user_id={user.id}, subscription_ends={subscription_ends.isoformat()}")
    return user.subscription_ends


def get_subscription_status(db: Session, user: User, now: Optional[datetime] = None) -> dict:
    """購読状態取得。期限切れなら読み出し時に失効させる"""
    now = now or utcnow()
    if user.subscription_ends and user.subscription_ends < now:
        user.is_subscribed = False
        user.subscription_ends = None
        db.commit()
        logger.info(f"購読期限切れ: user_id={user.id}")
        return {"is_subscribed": False, "subscription_ends": None}

    return {
        "is_subscribed": user.is_subscribed,
        "subscription_ends": user.subscription_ends,
    }
