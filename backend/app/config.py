from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    SECRET_KEY: str = "change-this-secret-before-going-live"
    ADMIN_PASS: str = "magic123"
    TOKEN_TTL_SECONDS: int = 3600
    BCRYPT_ROUNDS: int = 12
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PREFIX: str = "/uploads/"
    PLACEHOLDER_IMAGE: str = "assets/images/placeholder.png"
    WHATSAPP_PHONE: str = "972598439251"
    DEFAULT_LOCALE: str = "ar"
    DEFAULT_REGION: str = "wb"
    CART_TTL_DAYS: int = 30
    CART_PURGE_INTERVAL_SECONDS: int = 3600
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
