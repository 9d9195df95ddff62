from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Florist Operations"
    DATABASE_URL: str = "sqlite:///./florist.db"

    LOG_LEVEL: str = "INFO"

    # Oversell is allowed unless switched off; negative results are always logged
    ALLOW_NEGATIVE_STOCK: bool = True

    # Purchase totalAmount must equal sum(item finalValue) + deliveryCost
    VALIDATE_PURCHASE_TOTALS: bool = True
    TOTALS_TOLERANCE: float = 0.01

    model_config = {"env_file": ".env"}


settings = Settings()
