"""
Configuration models and validation for api-client.
"""
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .interceptors import Interceptor
from .types import Serializer

# Constants
DEFAULT_TIMEOUT = 5.0
DEFAULT_CONTENT_TYPE = "application/json"

ENV_BASE_URL = "API_CLIENT_BASE_URL"
ENV_TIMEOUT = "API_CLIENT_TIMEOUT"
ENV_LOGGING = "API_CLIENT_LOGGING"


class DefaultSerializer:
    """Default JSON serializer."""
    def serialize(self, data: Any) -> str:
        return json.dumps(data)

    def deserialize(self, data: str) -> Any:
        return json.loads(data)


class ClientConfig(BaseModel):
    """Client configuration."""
    model_config = {"arbitrary_types_allowed": True}

    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    logging: bool = False
    interceptor: Optional[Interceptor] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    content_type: str = DEFAULT_CONTENT_TYPE

    # Optional pre-configured client (httpx); never closed by ApiClient
    httpx_client: Any = None

    # Custom serializer
    serializer: Optional[Serializer] = None

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be greater than 0 seconds")
        return v

    @classmethod
    def from_env(
        cls,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        logging: Optional[bool] = None,
        config: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> "ClientConfig":
        """
        Build a config resolving each value in priority order:
        1. Direct argument
        2. Environment variable
        3. Config dictionary
        4. Default value
        """
        return cls(
            base_url=_resolve(base_url, ENV_BASE_URL, config, "base_url", ""),
            timeout=_resolve(timeout, ENV_TIMEOUT, config, "timeout", DEFAULT_TIMEOUT),
            logging=_resolve_bool(logging, ENV_LOGGING, config, "logging", False),
            **kwargs,
        )


def _resolve(
    arg: Any,
    env_keys: Union[str, List[str]],
    config: Optional[Dict[str, Any]],
    config_key: Optional[str],
    default: Any,
) -> Any:
    if arg is not None:
        return arg

    if isinstance(env_keys, str):
        env_keys = [env_keys]
    for key in env_keys:
        val = os.getenv(key)
        if val is not None:
            return val

    if config and config_key and config_key in config:
        return config[config_key]

    return default


def _resolve_bool(
    arg: Any,
    env_keys: Union[str, List[str]],
    config: Optional[Dict[str, Any]],
    config_key: Optional[str],
    default: bool,
) -> bool:
    val = _resolve(arg, env_keys, config, config_key, default)
    if isinstance(val, bool):
        return val
    if isinstance(val, str):
        return val.lower() in ("true", "1", "yes", "on")
    return bool(val)


@dataclass(frozen=True)
class ResolvedConfig:
    """Fully resolved configuration ready for usage."""
    base_url: str
    timeout: float
    logging: bool
    interceptor: Interceptor
    content_type: str
    serializer: Serializer
    headers: Dict[str, str] = field(default_factory=dict)


def resolve_config(config: ClientConfig) -> ResolvedConfig:
    """Apply defaults and return resolved config."""
    return ResolvedConfig(
        base_url=config.base_url,
        timeout=config.timeout,
        logging=config.logging,
        interceptor=config.interceptor or Interceptor(),
        content_type=config.content_type,
        serializer=config.serializer or DefaultSerializer(),
        headers=dict(config.headers),
    )
