from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Any
import json


DEV_SESSION_SECRET = "dev-secret-key-change-in-production"


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Student Records"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./students.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes

    # ==========================================
    # Sessions
    # ==========================================
    SESSION_SECRET: str = DEV_SESSION_SECRET
    SESSION_COOKIE_NAME: str = "student_mgmt_session"
    SESSION_TTL_DAYS: int = 7
    SESSION_COOKIE_SECURE: bool = False  # True behind HTTPS
    SESSION_PRUNE_INTERVAL_MINUTES: int = 60  # 0 disables the prune loop
    SESSION_ALGORITHM: str = "HS256"

    # ==========================================
    # Authentication
    # ==========================================
    BCRYPT_ROUNDS: int = 12  # 4 for dev/tests (fast), 12 for prod (secure)
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "pass123"
    DEFAULT_ADMIN_FIRST_NAME: str = "Admin"
    DEFAULT_ADMIN_LAST_NAME: str = "User"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5000,http://127.0.0.1:3000,http://127.0.0.1:5000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    LOGIN_RATE_LIMIT: str = "10/minute"

    # ==========================================
    # Requests
    # ==========================================
    MAX_REQUEST_SIZE_MB: int = 1

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    @field_validator("SESSION_TTL_DAYS")
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        if v < 1:
            raise ValueError("SESSION_TTL_DAYS must be at least 1")
        return v

    @property
    def SESSION_TTL_SECONDS(self) -> int:
        return self.SESSION_TTL_DAYS * 24 * 60 * 60

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Create settings instance
settings = Settings()
