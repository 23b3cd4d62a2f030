from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "LOAN_METRICS_",
    }

    # Decimal arithmetic
    decimal_precision: int = 28
    rounding: str = "ROUND_HALF_UP"

    # Input bounds
    max_annual_rate_percent: Decimal = Decimal("100")

    # DSCR thresholds: minimum (aggressive products) and conventional
    min_dscr: Decimal = Decimal("1.00")
    standard_dscr: Decimal = Decimal("1.25")

    # Blanket allocation: max |total - sum(allocations)| still considered balanced
    balance_tolerance: Decimal = Decimal("1.00")

    # App
    debug: bool = False
    log_level: str = "INFO"


settings = Settings()
