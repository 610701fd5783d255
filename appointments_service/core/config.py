from pydantic_settings import BaseSettings
from typing import Optional
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Appointments Service"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")
    PORT: int = 8000

    # Database - either a full URL or the individual PostgreSQL parts
    DATABASE_URL: Optional[str] = None
    DB_ADDR: str = "localhost:5432"
    DB_USER: str = "appointments"
    DB_PASSWORD: str = ""
    DB_DATABASE: str = "appointments"
    TEST_DATABASE_URL: str = os.getenv("TEST_DATABASE_URL", "sqlite://")
    SQL_ECHO: bool = False

    # Token verification
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    ADMIN_ROLE: str = "admin"

    # Pagination
    MAX_PAGINATION_LIMIT: int = 50
    DEFAULT_PAGINATION_LIMIT: int = 10

    @property
    def get_database_url(self) -> str:
        """Return the appropriate database URL based on if we're testing"""
        if self.TESTING:
            return self.TEST_DATABASE_URL
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_ADDR}/{self.DB_DATABASE}"
        )

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
