from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import os

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str = os.getenv("db_url", "sqlite:///./stockive.db")
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_EXPIRE_SECONDS: int = 60
    RATE_LIMIT_ENABLED: bool = True
    IMPORT_RATE_LIMIT: str = "10/minute"
    SIGNUP_RATE_LIMIT: str = "5/minute"
    AUTO_CREATE_DEFAULT_STORE: bool = True
    DEFAULT_STORE_NAME: str = "My First Store"
    LOG_LEVEL: str = "INFO"

    # Bootstrap admin, created on startup when missing
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "admin"

    class Config:
        env_file = ".env"
        extra = "allow"  # This allows extra fields


settings = Settings()
