from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ARENA_", env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./arena.db"
    log_level: str = "INFO"

    # Upper bound for a single simulator call before the battle is left pending
    simulator_timeout_seconds: float = 10.0

    cors_origins: list[str] = ["http://localhost:8000", "http://127.0.0.1:8000"]


settings = Settings()
