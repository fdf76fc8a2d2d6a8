from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """アプリケーション設定"""

    # データベース
    DATABASE_URL: str = "mysql+pymysql://advisory:advisorypassword@db:3306/advisory_system?charset=utf8mb4"

    # サービス設定
    SITE_NAME: str = "Advisory System"
    ALLOWED_ORIGINS: str = "http://localhost:8000,http://localhost:3000"

    # セッション (固定期限、延長なし)
    SESSION_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "session"

    # セキュリティ
    CSRF_ENABLED: bool = True
    RATE_LIMIT_ENABLED: bool = True

    # 環境
    ENV: str = "development"
    DEBUG: bool = True

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
