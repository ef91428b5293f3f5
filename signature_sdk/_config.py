from __future__ import annotations

import os
import typing as tp
from dataclasses import dataclass, field

from ._cache import DEFAULT_MAX_SIZE, DEFAULT_TTL
from ._exceptions import ConfigurationError
from ._retry import DEFAULT_MAX_ATTEMPTS

__all__ = ("ClientConfig", "EtagCacheOptions", "DEFAULT_REFRESH_PATH", "DEFAULT_USER_AGENT")

DEFAULT_USER_AGENT = "signature-module-sdk/3.0.1"
DEFAULT_REFRESH_PATH = "/api/v1/auth/refresh"
DEFAULT_TIMEOUT = 30.0

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")


@dataclass
class EtagCacheOptions:
    """
    Configuration of the in-memory conditional cache.

    Attributes:
    ----------
    default_ttl : float
        Lifetime in seconds of entries whose response carries no ``max-age``.

        Default: 300.0

    max_size : int
        Number of entries kept before the oldest one is evicted.

        Default: 500
    """

    default_ttl: float = DEFAULT_TTL
    max_size: int = DEFAULT_MAX_SIZE


@dataclass
class ClientConfig:
    """
    Configuration of a signature platform client.

    Attributes:
    ----------
    base_url : str
        Root URL of the REST backend, e.g. ``https://api.example.com``. Required.

    access_token : str | None
        Bearer token sent in the ``Authorization`` header.

    api_key : str | None
        Legacy credential sent in the ``X-API-Key`` header. Either this or
        ``access_token`` must be set.

    refresh_token : str | None
        Token exchanged for a new access token when a request fails with 401.

    timeout : float
        Per request timeout in seconds. A request that times out is treated
        as a network failure and retried.

        Default: 30.0

    enable_etag_cache : bool
        Send GET requests conditionally and serve cached bodies on 304.

        Default: False

    etag_cache_options : EtagCacheOptions
        Size and lifetime of the conditional cache.

    max_retries : int
        How many times a retryable failure is retried before it surfaces.

        Default: 5

    user_agent : str
        Value of the ``User-Agent`` header.

    refresh_path : str
        Path of the token refresh endpoint.

        Default: "/api/v1/auth/refresh"
    """

    base_url: str = ""
    access_token: tp.Optional[str] = None
    api_key: tp.Optional[str] = None
    refresh_token: tp.Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    enable_etag_cache: bool = False
    etag_cache_options: EtagCacheOptions = field(default_factory=EtagCacheOptions)
    max_retries: int = DEFAULT_MAX_ATTEMPTS
    user_agent: str = DEFAULT_USER_AGENT
    refresh_path: str = DEFAULT_REFRESH_PATH

    def validate(self) -> None:
        if not self.base_url:
            raise ConfigurationError("base_url is required")
        if not self.access_token and not self.api_key:
            raise ConfigurationError("access_token or api_key is required")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must not be negative")
        if self.etag_cache_options.max_size <= 0:
            raise ConfigurationError("etag_cache_options.max_size must be positive")

    @classmethod
    def from_env(
        cls,
        prefix: str = "SIGNATURE_",
        environ: tp.Optional[tp.Mapping[str, str]] = None,
        **overrides: tp.Any,
    ) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        Reads ``<prefix>BASE_URL``, ``<prefix>ACCESS_TOKEN``, ``<prefix>API_KEY``,
        ``<prefix>REFRESH_TOKEN``, ``<prefix>TIMEOUT`` and
        ``<prefix>ENABLE_ETAG_CACHE``. Keyword arguments take precedence over
        the environment.
        """
        env = os.environ if environ is None else environ
        values: tp.Dict[str, tp.Any] = {}

        for name in ("base_url", "access_token", "api_key", "refresh_token"):
            value = env.get(prefix + name.upper())
            if value:
                values[name] = value

        timeout = env.get(prefix + "TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError:
                raise ConfigurationError(f"{prefix}TIMEOUT should be a number, but got {timeout!r}")

        enable_cache = env.get(prefix + "ENABLE_ETAG_CACHE")
        if enable_cache is not None:
            flag = enable_cache.strip().lower()
            if flag not in _TRUTHY and flag not in _FALSY:
                raise ConfigurationError(f"{prefix}ENABLE_ETAG_CACHE should be a boolean, but got {enable_cache!r}")
            values["enable_etag_cache"] = flag in _TRUTHY

        values.update(overrides)
        return cls(**values)
