from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Auth
    SECRET_KEY: str = "dev-secret-change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database
    DATABASE_URL: str = "sqlite:///./shiftswap.db"

    # Swaps
    SWAP_RESPONSE_WINDOW_HOURS: int = 48
    SWAP_SWEEP_INTERVAL_SECONDS: int = 3600
    SWAP_SWEEPER_ENABLED: bool = True

    # Notifications ("inapp" or "log")
    NOTIFIER: str = "inapp"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
