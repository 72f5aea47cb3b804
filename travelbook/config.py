from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PROD = "https://api.travelbook.dev"
SANDBOX = "https://sandbox.travelbook.dev"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TRAVELBOOK_", env_file=".env", extra="ignore")

    API_URL: str = PROD
    API_TOKEN: SecretStr = SecretStr("")
    TIMEOUT_SECONDS: float = 30
    PAGE_SIZE: int = 20

    @field_validator("API_URL", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """The HTTP session joins absolute paths onto this, so keep it bare."""
        return v.rstrip("/")

    @field_validator("PAGE_SIZE", mode="after")
    @classmethod
    def positive_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("PAGE_SIZE must be at least 1")
        return v
