from ._async import *  # noqa: F403
from ._cache import CacheEntry as CacheEntry, EtagCache as EtagCache
from ._config import ClientConfig as ClientConfig, EtagCacheOptions as EtagCacheOptions
from ._exceptions import (
    ApiError as ApiError,
    ConfigurationError as ConfigurationError,
    SignatureSDKError as SignatureSDKError,
)
from ._models import (
    CacheStats as CacheStats,
    RateLimitInfo as RateLimitInfo,
    RequestMetadata as RequestMetadata,
    ResponseMetadata as ResponseMetadata,
    TokenPair as TokenPair,
    ValidationErrorResponse as ValidationErrorResponse,
)
from ._retry import (
    RetryDecision as RetryDecision,
    RetryPolicy as RetryPolicy,
    RetryState as RetryState,
    backoff_delay as backoff_delay,
    fibonacci as fibonacci,
)

__version__ = "3.0.1"
