from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CardLedger"
    debug: bool = False

    # Single JSON file holding the whole collection
    cards_file: Path = Path("cards.json")

    details_url: str = "https://mp-search-api.tcgplayer.com/v1/product/{card_id}/details"
    latest_sales_url: str = "https://mpapi.tcgplayer.com/v2/product/{card_id}/latestsales?mpfev=4622"
    product_url: str = "https://www.tcgplayer.com/product/{card_id}?Language=English"

    request_timeout: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Number of cards fetched at once during a bulk refresh.
    # 1 keeps the refresh strictly sequential.
    refresh_concurrency: int = 1


settings = Settings()
