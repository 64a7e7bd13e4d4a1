import base64
import json
import os
from datetime import datetime, timezone
from types import SimpleNamespace

# subgate の Settings 読み込み前にテスト用環境変数を設定
TEST_WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"subgate-test-signing-secret-0001").decode()
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["WEBHOOK_SECRET"] = TEST_WEBHOOK_SECRET
os.environ["CLERK_SECRET_KEY"] = "sk_test_dummy"
os.environ["ENV"] = "test"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from svix.webhooks import Webhook

import subgate.models  # noqa: F401
from subgate.core.database import Base, get_db
from subgate.main import app
from subgate.models.user import User
from subgate.services import clerk_service

engine_test = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine_test)


@pytest.fixture()
def db_session():
    """テストごとにスキーマを作り直したセッション"""
    Base.metadata.drop_all(bind=engine_test)
    Base.metadata.create_all(bind=engine_test)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def clerk(monkeypatch):
    """Clerk呼び出しの差し替え。user_id=None で未ログイン扱い"""
    state = SimpleNamespace(user_id=None, role=None, role_error=None)

    def _authenticate(request):
        return state.user_id

    def _get_user_role(user_id):
        if state.role_error is not None:
            raise state.role_error
        return state.role

    monkeypatch.setattr(clerk_service, "authenticate_request", _authenticate)
    monkeypatch.setattr(clerk_service, "get_user_role", _get_user_role)
    return state


@pytest.fixture()
def client(db_session, clerk):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app, follow_redirects=False) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def user_factory(db_session):
    def _create_user(user_id="user_1", email="a@x.com", name=None, is_subscribed=False, subscription_ends=None):
        user = User(
            id=user_id,
            email=email,
            name=name,
            is_subscribed=is_subscribed,
            subscription_ends=subscription_ends,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


def signed_headers(body: str, msg_id: str = "msg_test_1", secret: str = TEST_WEBHOOK_SECRET) -> dict:
    """Svix署名ヘッダーを生成"""
    now = datetime.now(timezone.utc)
    return {
        "svix-id": msg_id,
        "svix-timestamp": str(int(now.timestamp())),
        "svix-signature": Webhook(secret).sign(msg_id, now, body),
        "content-type": "application/json",
    }


@pytest.fixture()
def post_event(client):
    """署名済みClerkイベントを /api/webhooks/register に送信"""

    def _post(event: dict, headers: dict = None):
        body = json.dumps(event)
        return client.post(
            "/api/webhooks/register",
            content=body,
            headers=headers if headers is not None else signed_headers(body),
        )

    return _post
