from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

DEFAULT_BEDROCK_MODEL = "amazon.titan-text-lite-v1"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - AWS_REGION: region for DynamoDB and Bedrock. Required for 'dynamodb';
      with 'memory' and no region, text generation is switched off
    - PERSISTENCE_BACKEND: 'dynamodb' (default) or 'memory'
    - DYNAMODB_TABLE: table holding the todos (required for 'dynamodb')
    - DYNAMODB_ENDPOINT_URL: optional endpoint override, e.g. DynamoDB Local
    - AWS_BEDROCK_MODEL_NAME: text model id. Default 'amazon.titan-text-lite-v1'
    - MOTD: message of the day shown above the list; hidden when empty
    - URL_PREFIX: prefix for form actions and redirects. Default '/'
    - AWS_CONNECT_TIMEOUT / AWS_READ_TIMEOUT: per-call limits in seconds
    - LOG_ENV: 'development' (console logs, default) or 'production' (JSON)
    - HOST / PORT: bind address for `python -m todo_web`
    """

    aws_region: Optional[str] = None
    persistence_backend: str = "dynamodb"
    dynamodb_table: Optional[str] = None
    dynamodb_endpoint_url: Optional[str] = None
    bedrock_model_name: str = DEFAULT_BEDROCK_MODEL
    motd: str = ""
    url_prefix: str = "/"
    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    log_env: str = "development"
    host: str = "0.0.0.0"
    port: int = 8080

    @property
    def generation_enabled(self) -> bool:
        """Bedrock is only called when a region is configured."""
        return self.aws_region is not None


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_number(name: str, value: str, kind: type) -> float:
    try:
        number = kind(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if number <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return number


def normalize_prefix(prefix: str) -> str:
    """Return `prefix` with exactly one leading and one trailing slash."""
    stripped = prefix.strip().strip("/")
    return f"/{stripped}/" if stripped else "/"


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """
    Return application settings loaded from environment variables.

    Raises:
        ConfigurationError: a required variable is missing or a value is malformed.
    """
    backend = _get_env("PERSISTENCE_BACKEND", "dynamodb").strip().lower()
    if backend not in {"dynamodb", "memory"}:
        raise ConfigurationError(f"unsupported PERSISTENCE_BACKEND {backend!r}")

    region = _get_env("AWS_REGION", "").strip() or None
    if backend == "dynamodb" and region is None:
        raise ConfigurationError("AWS_REGION environment variable not set")

    table = _get_env("DYNAMODB_TABLE", "").strip() or None
    if backend == "dynamodb" and table is None:
        raise ConfigurationError("DYNAMODB_TABLE environment variable not set")

    return Settings(
        aws_region=region,
        persistence_backend=backend,
        dynamodb_table=table,
        dynamodb_endpoint_url=os.getenv("DYNAMODB_ENDPOINT_URL") or None,
        bedrock_model_name=_get_env("AWS_BEDROCK_MODEL_NAME", DEFAULT_BEDROCK_MODEL).strip(),
        motd=os.getenv("MOTD", ""),
        url_prefix=normalize_prefix(_get_env("URL_PREFIX", "/")),
        connect_timeout=_parse_number("AWS_CONNECT_TIMEOUT", _get_env("AWS_CONNECT_TIMEOUT", "5"), float),
        read_timeout=_parse_number("AWS_READ_TIMEOUT", _get_env("AWS_READ_TIMEOUT", "30"), float),
        log_env=_get_env("LOG_ENV", "development").strip().lower(),
        host=_get_env("HOST", "0.0.0.0"),
        port=int(_parse_number("PORT", _get_env("PORT", "8080"), int)),
    )
