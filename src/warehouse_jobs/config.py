"""Client configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Service
    api_endpoint: str = "https://bigquery.googleapis.com/bigquery/v2"
    project_id: str = ""
    location: str | None = None

    # Auth (bearer token obtained out of band)
    access_token: str | None = None

    # HTTP
    request_timeout: float = 30.0

    # Completion / pagination drivers
    poll_interval: float = 0.5
    poll_max_interval: float = 10.0
    poll_backoff: float = 1.5
    wait_timeout: float | None = None

    # Logging
    log_level: str = "info"
    log_json: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "WAREHOUSE_",
    }

    @property
    def auth_headers(self) -> dict[str, str]:
        """Authorization headers for the configured token, if any."""
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}


settings = Settings()
