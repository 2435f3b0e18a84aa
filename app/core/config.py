from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "Quinceañera Invitations"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./invitations.db"
    AUTO_CREATE_TABLES: bool = True

    # Security
    JWT_SECRET: str = "your-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    SESSION_HOURS: int = 24
    REMEMBER_ME_DAYS: int = 7

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:4321",
        "http://localhost:3000",
        "http://127.0.0.1:4321",
    ]

    # Analytics
    DEFAULT_TIMEZONE: str = "America/Mexico_City"

    # File Upload
    MAX_UPLOAD_SIZE_MB: int = 5
    ALLOWED_IMPORT_EXTENSIONS: List[str] = [".csv", ".xlsx"]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
