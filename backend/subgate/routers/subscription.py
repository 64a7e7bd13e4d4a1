"""購読ルーター: 購読状態取得・購読開始"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from subgate.core.database import get_db
from subgate.schemas.subscription import SubscriptionStatus, SubscriptionActivated
from subgate.services import subscription_service
from subgate.routers.deps import require_user_id
from subgate.core.logging import get_logger

router = APIRouter(prefix="/api", tags=["subscription"])
logger = get_logger(__name__)


@router.post("/subscription", response_model=SubscriptionActivated)
async def activate_subscription(
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    """購読開始 (期限 = 現在 + 1ヶ月)"""
    try:
        user = subscription_service.get_user(db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        subscription_ends = subscription_service.activate_subscription(db, user)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"購読更新エラー: user_id={user_id}, error={e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"message": "Subscription updated", "subscription_ends": subscription_ends}


@router.get("/subscription", response_model=SubscriptionStatus)
async def subscription_status(
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    """購読状態取得 (期限切れは読み出し時に失効)"""
    try:
        user = subscription_service.get_user(db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        return subscription_service.get_subscription_status(db, user)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"購読状態取得エラー: user_id={user_id}, error={e}")
        raise HTTPException(status_code=500, detail="Internal server error")
