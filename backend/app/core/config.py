from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field, SecretStr
from typing import List, Optional
from functools import lru_cache

class DataBaseConfig(BaseModel):
    DB_HOST: str = Field("localhost", description="Database host")
    DB_PORT: int = Field(5432, description="Database port")
    DB_NAME: str = Field("roadmap_progress", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: SecretStr = Field(SecretStr("postgres"), description="Database password")  # SecretStr скрывает значение в логах
    DB_URL: Optional[str] = Field(None, description="Полный URL БД, перекрывает host/port/name")
    DB_ECHO: bool = Field(False, description="Enable SQL echo")
    DB_POOL_SIZE: int = Field(5, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(10, description="Database max overflow")

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        # SecretStr.get_secret_value() чтобы получить реальное значение
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD.get_secret_value()}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    naming_convention: dict[str, str] = {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }

class SecurityConfig(BaseModel):
    JWT_SECRET_KEY: SecretStr = Field(..., description="JWT secret key")  # Обязательное поле!
    JWT_ALGORITHM: str = Field("HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration")

class ProgressConfig(BaseModel):
    XP_PER_TASK: int = Field(10, description="XP за выполнение задачи")
    XP_PER_LEVEL: int = Field(300, description="XP на один уровень")
    WEEKLY_GOAL: int = Field(10, description="Недельная цель по задачам")
    WEEKLY_WINDOW_DAYS: int = Field(7, description="Размер скользящего окна недели")
    STREAK_GRACE_TODAY: bool = Field(True, description="Не обрывать серию, пока текущий день не закончился")
    RATE_LIMIT_ENABLED: bool = Field(True, description="Enable rate limiting")
    TOGGLE_RATE_LIMIT: str = Field("60/minute", description="Лимит отметок задач")

class AdminConfig(BaseModel):
    ADMIN_TITLE: str = Field("Roadmap Progress Admin", description="Admin panel title")

class Settings(BaseSettings):
    app_name: str = Field("Roadmap Progress Tracker", description="Application name")
    debug: bool = Field(False, description="Debug mode")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:3000",
        ],
        description="CORS origins"
    )

    db: DataBaseConfig = Field(default_factory=DataBaseConfig)
    security: SecurityConfig
    progress: ProgressConfig = Field(default_factory=ProgressConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        case_sensitive = False
        env_nested_delimiter = '__'  # Для вложенных объектов

@lru_cache()
def get_settings() -> Settings:
    """Кэшированный экземпляр настроек"""
    return Settings()

settings = get_settings()
