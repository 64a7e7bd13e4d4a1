"""Clerk Webhook ルーター (user.created → ユーザー登録)"""
import json

from fastapi import APIRouter, Request, HTTPException, Depends
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from svix.webhooks import Webhook, WebhookVerificationError

from subgate.core.config import settings
from subgate.core.database import get_db
from subgate.services import user_service
from subgate.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


class WebhookConfigError(RuntimeError):
    """Webhookシークレット未設定"""


@router.post("/api/webhooks/register")
async def clerk_webhook(request: Request, db: Session = Depends(get_db)):
    """Clerk Webhook エンドポイント (認証不要、Svix署名検証)"""
    webhook_secret = settings.WEBHOOK_SECRET
    if not webhook_secret:
        raise WebhookConfigError(
            "WEBHOOK_SECRET が未設定です。Clerkダッシュボードの署名シークレットを .env に設定してください"
        )

    headers = {name: request.headers.get(name) for name in SVIX_HEADERS}
    if not all(headers.values()):
        logger.warning("Clerk webhook: svixヘッダー不足")
        raise HTTPException(status_code=400, detail="Missing svix headers")

    payload = await request.body()
    try:
        Webhook(webhook_secret).verify(payload, headers)
    except WebhookVerificationError as e:
        logger.error(f"Clerk webhook署名検証失敗: {e}")
        raise HTTPException(status_code=400, detail="Invalid signature")

    try:
        event = json.loads(payload)
    except ValueError as e:
        logger.error(f"Clerk webhookペイロード不正: {e}")
        raise HTTPException(status_code=400, detail="Invalid payload")

    event_type = event.get("type", "")
    data = event.get("data") or {}
    logger.info(
        f"Clerk webhook受信: type={event_type}",
        extra={"extra_data": {"svix_id": headers["svix-id"], "user_id": data.get("id"), "type": event_type}},
    )

    if event_type == "user.created":
        return await _handle_user_created(db, data)

    logger.info(f"未処理のClerkイベント: {event_type}")
    return PlainTextResponse("Webhook received successfully")


async def _handle_user_created(db: Session, data: dict) -> PlainTextResponse:
    """user.created: ローカルにユーザーを作成 (重複は無視)"""
    user_id = data.get("id")
    # Clerk APIは同期呼び出しのためスレッドプールで実行
    email = await run_in_threadpool(user_service.resolve_email, data)
    if not email:
        # 後続イベントでメールが取得できた時点で作成する
        logger.error(f"メールアドレス未解決のためユーザー作成をスキップ: user_id={user_id}")
        return PlainTextResponse("User created but no email available")

    try:
        if user_service.user_exists(db, user_id):
            logger.info(f"ユーザー既存のためスキップ: user_id={user_id}")
            return PlainTextResponse("User already exists")

        name = user_service.build_display_name(data.get("first_name"), data.get("last_name"))
        user_service.create_user(db, user_id, email, name)
    except IntegrityError:
        # 同一ユーザーの同時配信 (主キー制約)
        db.rollback()
        if user_service.user_exists(db, user_id):
            logger.info(f"同時配信によりユーザー既存: user_id={user_id}")
            return PlainTextResponse("User already exists")
        logger.error(f"ユーザー作成失敗 (制約違反): user_id={user_id}")
        return PlainTextResponse("Error creating user", status_code=500)
    except Exception as e:
        db.rollback()
        logger.error(f"ユーザー作成エラー: user_id={user_id}, error={e}")
        return PlainTextResponse("Error creating user", status_code=500)

    return PlainTextResponse("Webhook received successfully")
