"""
Application settings for the receipt upload service.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/receipts.db"
    DB_CONNECT_RETRIES: int = 5
    DB_RETRY_DELAY_SECONDS: float = 5.0

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    VERSION: str = "1.0.0"
    PORT: int = 3001

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # File storage
    DATA_DIR: str = "./data"
    UPLOAD_DIR: str = "./data/uploads"

    # Public origin used to build fileUrl
    BACKEND_URL: str = ""
    RENDER_EXTERNAL_HOSTNAME: str = ""

    # Upload policy
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024
    ALLOWED_CONTENT_TYPES: List[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "application/pdf",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def base_url(self) -> str:
        if self.BACKEND_URL:
            return self.BACKEND_URL.rstrip("/")
        if self.RENDER_EXTERNAL_HOSTNAME:
            return f"https://{self.RENDER_EXTERNAL_HOSTNAME}"
        return f"http://localhost:{self.PORT}"


settings = Settings()
