import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./shopsense.db")
    database_echo: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"
    # seconds a SQLite writer waits for another writer's lock
    sqlite_busy_timeout: float = float(os.getenv("SQLITE_BUSY_TIMEOUT", "30"))

    cors_origins: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]

    # seconds an untouched cart is kept before it is dropped
    cart_session_ttl: float = float(os.getenv("CART_SESSION_TTL", "28800"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Receipts
    receipt_dir: str = os.getenv("RECEIPT_DIR", "generated")
    currency: str = os.getenv("SHOP_DISPLAY_CURRENCY", "Rs.")

    # Notifications
    low_stock_threshold: float = float(os.getenv("LOW_STOCK_THRESHOLD", "5"))
    low_margin_percent: float = float(os.getenv("LOW_MARGIN_PERCENT", "10"))
    margin_window_days: int = int(os.getenv("MARGIN_WINDOW_DAYS", "30"))


settings = Settings()
