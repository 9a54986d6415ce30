from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GKTAX_", env_file=".env", extra="ignore")

    APP_NAME: str = Field("GKTax", description="Logger namespace and report title")
    LOG_LEVEL: str = Field("INFO", description="Level for tenant loggers")
    AUDIT_LOG_PATH: str = Field("./data/logs", description="Directory for rotating logs and audit trails")

    # Tax tables
    DEFAULT_TAX_YEAR: int = Field(2025, description="Year used when a caller does not pin one")
    CURRENCY: str = Field("GYD", description="Currency code for formatted amounts")
    TAX_TABLES_PATH: Optional[str] = Field(None, description="JSON file with additional tax-year tables")

settings = Settings()
