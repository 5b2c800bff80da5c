from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = Field("TZPayroll", description="Logger namespace and export prefix")
    LOG_LEVEL: str = Field("INFO", description="Root level for tenant loggers")
    LOG_PATH: str = Field("./data/logs", description="Directory for rotating log files")
    EXPORT_DIR: str = Field("./data/exports", description="Default directory for payroll exports")

    # Display
    CURRENCY_SYMBOL: str = "TSh"

    # Optional JSON tax table, loaded on top of the built-in 2024 schedule
    TAX_TABLE_FILE: Optional[str] = Field(None, description="Path to a JSON tax table")

settings = Settings()
