from typing import Dict, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DATABASE: str = "Cart"

    # "mongo" for Beanie/Motor, "memory" for the process-local store
    DOCUMENT_STORE: str = "mongo"

    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    CLIENT_ORIGIN: str = "*"
    ENVIRONMENT: str = "development"
    PORT: int = 3002

    REDIS_URL: str = "redis://localhost:6379"
    RATE_LIMITING_ENABLED: bool = False

    # Read once at startup, never mutated afterwards
    DISCOUNT_CODES: Dict[str, float] = {
        "SAVE10": 0.10,
        "SAVE20": 0.20,
        "WELCOME": 0.15,
        "FIRSTORDER": 0.25,
    }

    @field_validator("DISCOUNT_CODES")
    @classmethod
    def normalise_discount_codes(cls, codes: Dict[str, float]) -> Dict[str, float]:
        for code, rate in codes.items():
            if not 0 <= rate < 1:
                raise ValueError(f"Discount rate for {code} must be in [0, 1), got {rate}")
        return {code.upper(): rate for code, rate in codes.items()}

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CLIENT_ORIGIN.split(",") if origin.strip()]

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# create a singleton instance
settings = Settings()
