from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """アプリケーション設定"""

    # データベース
    DATABASE_URL: str = "mysql+pymysql://subgate:subgatepassword@db:3306/subgate?charset=utf8mb4"

    # Clerk
    CLERK_SECRET_KEY: str = ""
    CLERK_AUTHORIZED_PARTIES: str = "http://localhost:3000"

    # Clerk Webhook (Svix署名シークレット)
    WEBHOOK_SECRET: str = ""

    # サービス設定
    SITE_NAME: str = "Subscription Gate"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # 環境
    ENV: str = "development"
    DEBUG: bool = True

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def authorized_parties_list(self) -> list[str]:
        return [p.strip() for p in self.CLERK_AUTHORIZED_PARTIES.split(",") if p.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
