# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    DATABASE_URL: str = "sqlite:///./database_filamentstore.db"

    FRONTEND_URL: Optional[str] = None

    # Identity provider group whose members get the admin role
    ADMIN_GROUP: str = "ADMINS"

    # Local object store for product images (served under /uploads)
    UPLOAD_DIR: str = "static/uploads"

    # Transactional email API; notifications are skipped when any of these is missing
    MAIL_API_URL: Optional[str] = None
    MAIL_API_KEY: Optional[str] = None
    MAIL_FROM: Optional[str] = None
    MAIL_ADMIN: Optional[str] = None

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
