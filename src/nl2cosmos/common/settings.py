from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env into os.environ
load_dotenv()


PartitionFilterPolicy = Literal["inject", "reject", "warn"]


class Settings(BaseSettings):
    """Engine configuration settings backed by environment variables."""

    openai_api_key: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")

    azure_openai_endpoint: Optional[str] = Field(default=None, validation_alias="AZURE_OPENAI_ENDPOINT")
    azure_openai_api_key: Optional[str] = Field(default=None, validation_alias="AZURE_OPENAI_API_KEY")
    azure_openai_deployment: Optional[str] = Field(
        default=None,
        validation_alias="AZURE_OPENAI_CHAT_DEPLOYMENT_NAME",
        description="Chat deployment used for query generation."
    )
    azure_openai_api_version: str = Field(default="2024-06-01", validation_alias="AZURE_OPENAI_API_VERSION")

    cosmos_endpoint: Optional[str] = Field(default=None, validation_alias="COSMOS_ENDPOINT")
    cosmos_key: Optional[str] = Field(default=None, validation_alias="COSMOS_KEY")
    cosmos_database_name: str = Field(default="TwinHumanDB", validation_alias="COSMOS_DATABASE_NAME")

    partition_key_field: str = Field(
        default="TwinID",
        validation_alias="PARTITION_KEY_FIELD",
        description="Document field holding the partition key (the twin identifier)."
    )
    container_alias: str = Field(default="c", validation_alias="CONTAINER_ALIAS")

    page_size_cap: int = Field(
        default=100,
        gt=0,
        validation_alias="QUERY_PAGE_SIZE_CAP",
        description="Maximum number of records read per query, across all pages."
    )

    partition_filter_policy: PartitionFilterPolicy = Field(
        default="inject",
        validation_alias="PARTITION_FILTER_POLICY",
        description="Action when a generated query lacks the partition filter: inject, reject, or warn."
    )

    llm_breaker_fail_max: int = Field(default=5, validation_alias="LLM_BREAKER_FAIL_MAX")
    store_breaker_fail_max: int = Field(default=5, validation_alias="STORE_BREAKER_FAIL_MAX")
    breaker_reset_timeout_sec: int = Field(default=30, validation_alias="BREAKER_RESET_TIMEOUT_SEC")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def store_configured(self) -> bool:
        """A live store needs both an endpoint and a key."""
        return bool(self.cosmos_endpoint and self.cosmos_key)

    def configure_env(self, env: str) -> None:
        """Loads environment-specific variables and reloads settings."""
        if not env:
            return

        load_dotenv(f".env.{env}", override=True)
        new_settings = Settings()
        self.__dict__.update(new_settings.__dict__)


settings = Settings()

# Configure logging during import
from nl2cosmos.common.logger import configure_logging
configure_logging(level=settings.log_level, json_format=settings.log_json)
