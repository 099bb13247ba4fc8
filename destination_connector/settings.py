from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    vcap_application: str | None = None
    vcap_services: str | None = None
    connector_local_mode: bool | None = None
    connector_timeout_seconds: float = 30.0
    connector_connect_timeout_seconds: float = 5.0
    destination_api_path: str = "/destination-configuration/v1/destinations"
    scc_location_header: str = "SAP-Connectivity-SCC-Location_ID"

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @property
    def is_local_mode(self) -> bool:
        if self.connector_local_mode is not None:
            return self.connector_local_mode
        return not (self.vcap_application or "").strip()


def load_settings() -> Settings:
    # Not cached: the platform marker is read fresh for every call.
    return Settings()
