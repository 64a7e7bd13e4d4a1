# 全モデルをインポート (Alembic autogenerate用)
from subgate.models.user import User

__all__ = [
    "User",
]
