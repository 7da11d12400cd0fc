"""Configuration management for the application."""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_version: str = "v1"
    service_name: str = "inspection-checklist"

    # Persistence backend for inspection aggregates: "memory" or "cosmos"
    inspection_store_backend: str = "memory"

    # Upper bound on a single aggregate save
    persistence_save_timeout_seconds: float = 10.0

    # Azure Cosmos DB
    azure_cosmosdb_endpoint: Optional[str] = None
    azure_cosmosdb_database_name: str = "building-inspection"
    azure_cosmosdb_container_name: str = "property-inspections"

    # Defect capture handoff
    checklist_return_path_template: str = "/properties/{property_id}/inspection-checklist"

    # Optional Azure Identity
    azure_tenant_id: Optional[str] = None
    azure_client_id: Optional[str] = None

    @property
    def uses_cosmos(self) -> bool:
        """Whether aggregates are persisted to Cosmos DB."""
        return self.inspection_store_backend.lower() == "cosmos"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
