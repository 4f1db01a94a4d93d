from typing import List, Optional
from pydantic_settings import BaseSettings
from urllib.parse import quote_plus

class Settings(BaseSettings):
    ENV: str = "local"

    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "discounts"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # e.g. sqlite:///./discounts.db for local runs and tests
    database_url_override: Optional[str] = None

    log_level: str = "INFO"
    currency: str = "USD"

    # storefront preview
    proxy_cache_seconds: int = 300
    preview_proxy_url: str = "http://localhost:8000/apps/proxy"
    preview_timeout_seconds: float = 5.0

    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:8000",
    ]

    @property
    def database_url(self):
        if self.database_url_override:
            return self.database_url_override

        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
