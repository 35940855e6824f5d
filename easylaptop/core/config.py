from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


# repository root (the directory holding easylaptop/)
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    # 기본 앱 설정
    app_name: str = "EasyLaptop API"
    app_env: str = "dev"
    log_level: str = "INFO"

    # 보안 / JWT
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_days: int = 7
    bcrypt_rounds: int = 12

    # DB
    database_url: str = f"sqlite:///{BASE_DIR / 'easylaptop.db'}"

    # HTTP
    api_prefix: str = "/api"
    cors_allow_origins: List[str] = ["*"]

    # 업로드 이미지 저장용
    media_root: Path = BASE_DIR / "uploads"
    media_url: str = "/uploads"
    max_images: int = 5
    max_image_bytes: int = 5 * 1024 * 1024

    # frozen: built once at startup and shared read-only afterwards
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
