"""Server configuration via environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from ipaddress import ip_address
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

VALID_DEPLOYMENT_ENVS = {"production", "preview", "local"}
VALID_PDF_STRATEGIES = {"text", "heuristic"}
VALID_TRANSPORTS = {"stdio", "http"}

# Environments where the analysis service endpoint is not served.
LOCAL_PREVIEW_ENVS = {"preview", "local"}


def _is_env_placeholder(value: str) -> bool:
    """Return True when *value* looks like an unresolved shell placeholder."""
    if value.startswith("${") and value.endswith("}"):
        inner = value[2:-1].strip()
        if ":-" in inner:
            inner = inner.split(":-", 1)[0].strip()
        return bool(inner) and all(ch.isalnum() or ch == "_" for ch in inner)
    if value.startswith("$"):
        inner = value[1:].strip()
        return bool(inner) and all(ch.isalnum() or ch == "_" for ch in inner)
    return False


def _normalize_url(raw: str) -> str:
    """Normalize a service URL read from env.

    Accepts bare hostnames by adding a default scheme:
    - local/private hosts -> ``http://``
    - everything else -> ``https://``

    Unresolved placeholder values (``${WEAVIATE_URL}``) are treated as unset.
    """
    value = raw.strip()
    if not value or _is_env_placeholder(value):
        return ""

    if "://" in value:
        return value.rstrip("/")

    host = (urlparse(f"//{value}").hostname or "").lower()
    if not host:
        return ""

    is_local_or_private = host == "localhost"
    if not is_local_or_private:
        try:
            ip = ip_address(host)
            is_local_or_private = ip.is_loopback or ip.is_private
        except ValueError:
            is_local_or_private = False

    scheme = "http" if is_local_or_private else "https"
    normalized = f"{scheme}://{value}".rstrip("/")
    return normalized if urlparse(normalized).hostname else ""


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``PORTFLOW_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


def _env_secret(name: str) -> str:
    value = os.getenv(name, "").strip()
    return "" if _is_env_placeholder(value) else value


@dataclass(frozen=True)
class PipelineSettings:
    """Capability switches handed to the analysis orchestrator.

    Built once from :class:`ServerConfig` so the pipeline never reads
    process-wide state while it runs.
    """

    remote_service_enabled: bool = False
    remote_service_url: str = ""
    remote_service_token: str = ""
    remote_service_timeout: float = 30.0
    model_credential: str = ""
    storage_credential: str = ""
    deployment_env: str = "production"
    model: str = "gemini-3-flash-preview"
    vision_model: str = "gemini-3-flash-preview"
    fetch_timeout: float = 10.0
    pdf_strategy: str = "text"
    temperature: float = 0.7
    max_output_tokens: int = 400
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0

    @property
    def is_local_preview(self) -> bool:
        return self.deployment_env in LOCAL_PREVIEW_ENVS


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    gemini_api_key: str = Field(default="")
    default_model: str = Field(default="gemini-3-flash-preview")
    vision_model: str = Field(default="gemini-3-flash-preview")
    default_temperature: float = Field(default=0.7)
    max_output_tokens: int = Field(default=400)
    retry_max_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=1.0)
    retry_max_delay: float = Field(default=30.0)
    analysis_service_url: str = Field(default="")
    analysis_service_token: str = Field(default="")
    analysis_service_timeout: float = Field(default=30.0)
    deployment_env: str = Field(default="production")
    fetch_timeout_seconds: float = Field(default=10.0)
    pdf_strategy: str = Field(default="text")
    public_base_url: str = Field(default="http://localhost:8000")
    local_db_path: str = Field(default="")
    weaviate_url: str = Field(default="")
    weaviate_api_key: str = Field(default="")
    weaviate_enabled: bool = Field(default=False)
    transport: str = Field(default="stdio")
    http_host: str = Field(default="127.0.0.1")
    http_port: int = Field(default=8000)
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="portflow-mcp")

    @field_validator("deployment_env")
    @classmethod
    def validate_deployment_env(cls, value: str) -> str:
        env = value.strip().lower()
        if env not in VALID_DEPLOYMENT_ENVS:
            allowed = ", ".join(sorted(VALID_DEPLOYMENT_ENVS))
            raise ValueError(f"Invalid deployment env '{value}'. Allowed: {allowed}")
        return env

    @field_validator("pdf_strategy")
    @classmethod
    def validate_pdf_strategy(cls, value: str) -> str:
        strategy = value.strip().lower()
        if strategy not in VALID_PDF_STRATEGIES:
            allowed = ", ".join(sorted(VALID_PDF_STRATEGIES))
            raise ValueError(f"Invalid PDF strategy '{value}'. Allowed: {allowed}")
        return strategy

    @field_validator("transport")
    @classmethod
    def validate_transport(cls, value: str) -> str:
        transport = value.strip().lower()
        if transport not in VALID_TRANSPORTS:
            allowed = ", ".join(sorted(VALID_TRANSPORTS))
            raise ValueError(f"Invalid transport '{value}'. Allowed: {allowed}")
        return transport

    @field_validator("retry_max_attempts", "max_output_tokens", "http_port")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Configuration values must be >= 1")
        return value

    @field_validator(
        "retry_base_delay", "retry_max_delay", "analysis_service_timeout", "fetch_timeout_seconds",
    )
    @classmethod
    def validate_positive_floats(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Delays and timeouts must be > 0")
        return value

    @field_validator("default_temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return value

    @property
    def analysis_service_enabled(self) -> bool:
        """True when an analysis service URL is set and the env can serve it."""
        return bool(self.analysis_service_url) and self.deployment_env not in LOCAL_PREVIEW_ENVS

    def pipeline_settings(self) -> PipelineSettings:
        """Snapshot the capability switches the orchestrator needs."""
        return PipelineSettings(
            remote_service_enabled=self.analysis_service_enabled,
            remote_service_url=self.analysis_service_url,
            remote_service_token=self.analysis_service_token,
            remote_service_timeout=self.analysis_service_timeout,
            model_credential=self.gemini_api_key,
            storage_credential=self.weaviate_api_key,
            deployment_env=self.deployment_env,
            model=self.default_model,
            vision_model=self.vision_model,
            fetch_timeout=self.fetch_timeout_seconds,
            pdf_strategy=self.pdf_strategy,
            temperature=self.default_temperature,
            max_output_tokens=self.max_output_tokens,
            retry_max_attempts=self.retry_max_attempts,
            retry_base_delay=self.retry_base_delay,
            retry_max_delay=self.retry_max_delay,
        )

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        from pathlib import Path

        db_default = str(Path.home() / ".cache" / "portflow-mcp" / "portfolios.db")
        weaviate_url = _normalize_url(os.getenv("WEAVIATE_URL", ""))
        return cls(
            gemini_api_key=_env_secret("GEMINI_API_KEY"),
            default_model=os.getenv("GEMINI_MODEL", "gemini-3-flash-preview"),
            vision_model=os.getenv("GEMINI_VISION_MODEL", "gemini-3-flash-preview"),
            default_temperature=float(os.getenv("GEMINI_TEMPERATURE", "0.7")),
            max_output_tokens=int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", "400")),
            retry_max_attempts=int(os.getenv("PORTFLOW_RETRY_MAX_ATTEMPTS", "3")),
            retry_base_delay=float(os.getenv("PORTFLOW_RETRY_BASE_DELAY", "1.0")),
            retry_max_delay=float(os.getenv("PORTFLOW_RETRY_MAX_DELAY", "30.0")),
            analysis_service_url=_normalize_url(os.getenv("PORTFLOW_ANALYSIS_SERVICE_URL", "")),
            analysis_service_token=_env_secret("PORTFLOW_ANALYSIS_SERVICE_TOKEN"),
            analysis_service_timeout=float(os.getenv("PORTFLOW_ANALYSIS_SERVICE_TIMEOUT", "30")),
            deployment_env=os.getenv("PORTFLOW_ENV", "production"),
            fetch_timeout_seconds=float(os.getenv("PORTFLOW_FETCH_TIMEOUT", "10")),
            pdf_strategy=os.getenv("PORTFLOW_PDF_STRATEGY", "text"),
            public_base_url=os.getenv("PORTFLOW_PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
            local_db_path=os.getenv("PORTFLOW_LOCAL_DB", db_default),
            weaviate_url=weaviate_url,
            weaviate_api_key=_env_secret("WEAVIATE_API_KEY"),
            weaviate_enabled=bool(weaviate_url),
            transport=os.getenv("PORTFLOW_TRANSPORT", "stdio"),
            http_host=os.getenv("PORTFLOW_HTTP_HOST", "127.0.0.1"),
            http_port=int(os.getenv("PORTFLOW_HTTP_PORT", "8000")),
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("PORTFLOW_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "portflow-mcp"),
        )


_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/portflow-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config (used by the ``infra_configure`` tool)."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config
