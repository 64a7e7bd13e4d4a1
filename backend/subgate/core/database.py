"""DBクライアント: プロセス内で1つだけ生成し、以降は再利用する"""
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from subgate.core.config import settings
from subgate.core.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


class Base(DeclarativeBase):
    pass


def _engine_options(url: str) -> dict:
    options = {
        "pool_pre_ping": True,
        # 本番ではSQLログを出さない
        "echo": settings.DEBUG and not settings.is_production,
    }
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(pool_size=10, max_overflow=20, pool_recycle=3600)
    return options


def get_engine() -> Engine:
    """初回呼び出し時にEngineを生成し、以降は同じインスタンスを返す"""
    global _engine
    if _engine is None:
        _engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
        logger.info(f"DBエンジン生成: dialect={_engine.dialect.name}")
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _session_factory


def reset_engine() -> None:
    """キャッシュ済みEngineを破棄 (シャットダウン・テスト用)"""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def get_db():
    """FastAPI依存関数: DBセッション取得"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    """DB接続チェック"""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"DB接続チェック失敗: {e}")
        return False
