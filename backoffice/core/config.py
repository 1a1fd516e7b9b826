from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    TELEGRAM_BOT_TOKEN: str | None = None
    TELEGRAM_RECEIVE_CHAT_ID: str | None = None
    TELEGRAM_WEBHOOK_SECRET: str | None = None
    TELEGRAM_API_BASE: str = "https://api.telegram.org"

    WHATSAPP_TOKEN: str | None = None
    WHATSAPP_PHONE_NUMBER_ID: str | None = None
    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str | None = None
    WHATSAPP_GRAPH_API_VERSION: str = "v16.0"

    STORE_PROVIDER: str = "json"
    STORE_DATA_DIR: str = "./data/records"

    CLEANUP_DELAY_SECONDS: float = 3.0
    EARNINGS_CLEANUP_DELAY_SECONDS: float = 30.0

    CURRENCY: str = "AED"
    STAFF_OPTIONS: list[str] = ["Praw", "Jenny"]
    PROFIT_PARTY_A: str = "Ranjeet"
    PROFIT_PARTY_B: str = "Nora"
    PARTY_A_DEDUCTION: int = 6000
    PARTY_A_DEDUCTION_LABEL: str = "Jenny & Praw salary"
    PARTY_B_DEDUCTION: int = 4000
    PARTY_B_DEDUCTION_LABEL: str = "driver salary"

    BOOKING_ID_ATTEMPTS: int = 5


settings = Settings()
