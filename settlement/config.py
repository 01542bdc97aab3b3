from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SETTLEMENT_",
        extra="ignore",
    )

    # Seller id the platform uses when it is the seller-of-record
    platform_seller_id: str = "platform"

    # Dashboards
    sales_window_days: int = 7
    top_products_limit: int = 5
    recent_events_limit: int = 10

    # Withdrawals
    withdrawal_reference_prefix: str = "ADM_WDL"
    payout_reference_prefix: str = "SLR_PAY"

    log_level: str = "INFO"
    seed_demo_data: bool = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
