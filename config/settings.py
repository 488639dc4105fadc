from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Matching engine (defaults match the engine's local dev port)
    ENGINE_BASE_URL: str = "http://localhost:8080"
    # None = no timeout; a hung read never gates the poll timer
    ENGINE_TIMEOUT_SECONDS: float | None = None
    # Always bounded: startup and /health must answer even if the engine hangs
    ENGINE_HEALTH_TIMEOUT_SECONDS: float = 5.0

    # Polling
    POLL_INTERVAL_MS: int = 1000
    # Ticks are skipped while this many cycles are still waiting on the engine
    POLL_MAX_IN_FLIGHT: int = 8
    TRADE_WINDOW: int = 10
    DEDUPE_TRADES: bool = False

    # App
    APP_NAME: str = "Order Monitor"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000


settings = Settings()
