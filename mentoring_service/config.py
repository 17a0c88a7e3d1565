from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./mentoring.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    SECRET_KEY: str = "dev-secret-mentoring"
    JWT_ALGORITHM: str = "HS256"
    LOG_LEVEL: str = "INFO"
    CACHE_TTL: int = 300  # 5 минут
    CORS_ORIGINS: str = "http://localhost:3000"

    # Календарная лента
    CALENDAR_TOKEN_BYTES: int = 32
    CALENDAR_FEED_RATE_LIMIT: str = "30/minute"
    CALENDAR_EVENT_URL: str = "http://localhost:3000/dashboard/sessions"
    CALENDAR_DEFAULT_DURATION_MINUTES: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
