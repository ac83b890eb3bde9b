from pydantic_settings import BaseSettings
from typing import List
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Hospital Pharmacy Service"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")

    # Database - the SQL storage backend keeps prescriptions in a key-value table
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmacy.db")
    TEST_DATABASE_URL: str = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

    # Prescription storage: "sql" or "redis"
    STORAGE_BACKEND: str = "sql"
    REDIS_URL: str = "redis://localhost:6379"
    PRESCRIPTIONS_KEY: str = "prescriptions"

    # Identity provider tokens (HS256 shared secret)
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Dispense attachments
    MAX_PHOTOS: int = 5
    MAX_PHOTO_SIZE: int = 5 * 1024 * 1024
    MAX_DOCUMENT_SIZE: int = 10 * 1024 * 1024

    # Analytics
    ANALYTICS_MAX_EVENTS: int = 100

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173", "http://testserver"]

    @property
    def get_database_url(self):
        """Return the appropriate database URL based on if we're testing"""
        if self.TESTING:
            return self.TEST_DATABASE_URL
        return self.DATABASE_URL

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
