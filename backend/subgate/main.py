from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from subgate.core.config import settings
from subgate.core.logging import setup_logging, get_logger
from subgate.core.access import AccessMiddleware
from subgate.core.database import reset_engine
from subgate.routers import health, subscription, webhooks_clerk

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションライフサイクル管理"""
    setup_logging(debug=settings.DEBUG)
    logger.info(f"アプリケーション起動: env={settings.ENV}")
    if not settings.WEBHOOK_SECRET:
        logger.error("WEBHOOK_SECRET が未設定です。Clerk webhookは処理できません")
    if not settings.CLERK_SECRET_KEY:
        logger.warning("CLERK_SECRET_KEY が未設定です")
    yield
    reset_engine()
    logger.info("アプリケーション終了")


_docs_enabled = settings.DEBUG and not settings.is_production

app = FastAPI(
    title=settings.SITE_NAME,
    lifespan=lifespan,
    docs_url="/api/docs" if _docs_enabled else None,
    redoc_url="/api/redoc" if _docs_enabled else None,
)

# ミドルウェア (登録順序: 後に登録したものが先に実行される)
# アクセス制御
app.add_middleware(AccessMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ルーター登録
app.include_router(health.router)
app.include_router(subscription.router)
app.include_router(webhooks_clerk.router)
