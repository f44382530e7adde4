"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Limits and exporter names are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_TELEMETRY_EXPORTERS = ("console", "otlp", "none")


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Firestore credentials are optional: without them the app starts but
    export endpoints answer 503 until a service account is configured.
    """

    # App
    app_name: str = "passdesk"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    # Admin dashboard sends the selected project on every request.
    project_header_name: str = "X-Project-ID"

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file
    # Verify Firebase ID tokens (Authorization: Bearer) against the service account project.
    auth_verify_tokens: bool = True

    # Export
    export_query_limit: int = 10_000  # max documents per category query
    export_output_dir: str = "/var/passdesk/exports"
    export_max_users_per_batch: int = 200
    export_include_summary_file: bool = True

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_limits_and_telemetry(self) -> "Settings":
        """Validate export limits and telemetry exporter.

        - EXPORT_QUERY_LIMIT and EXPORT_MAX_USERS_PER_BATCH must be >= 1.
        - TELEMETRY_EXPORTER must be one of console, otlp, none.
        """
        if self.export_query_limit < 1:
            raise ValueError(
                f"EXPORT_QUERY_LIMIT must be >= 1, got: {self.export_query_limit}"
            )
        if self.export_max_users_per_batch < 1:
            raise ValueError(
                "EXPORT_MAX_USERS_PER_BATCH must be >= 1, "
                f"got: {self.export_max_users_per_batch}"
            )
        if self.telemetry_exporter not in _TELEMETRY_EXPORTERS:
            raise ValueError(
                f"Invalid telemetry_exporter '{self.telemetry_exporter}'. "
                f"Must be one of: {', '.join(_TELEMETRY_EXPORTERS)}"
            )
        if not 0.0 <= self.telemetry_sample_rate <= 1.0:
            raise ValueError(
                f"TELEMETRY_SAMPLE_RATE must be between 0 and 1, got: {self.telemetry_sample_rate}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
