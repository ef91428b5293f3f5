from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TypedDict


class RequestMetadata(TypedDict, total=False):
    # All the names here should be prefixed with "signature_sdk_" to avoid collisions with httpx extensions
    signature_sdk_replay: bool
    """Set on requests replayed after a token refresh. Such requests never start a new refresh cycle."""

    signature_sdk_retry_state: Any
    """The `RetryState` shared by every attempt of one logical request."""

    signature_sdk_cached_entry: Any
    """The `CacheEntry` whose validator was sent in `If-None-Match`."""

    signature_sdk_if_none_match: bool
    """Whether `If-None-Match` was added by the conditional cache rather than the caller."""


class ResponseMetadata(TypedDict, total=False):
    signature_sdk_from_cache: bool
    """Indicates whether the body was served from the conditional cache after a 304."""

    signature_sdk_etag: Optional[str]
    """The validator associated with the body."""

    signature_sdk_last_modified: Optional[str]
    """The `Last-Modified` value associated with the body."""


class TokenPair(TypedDict, total=False):
    accessToken: str
    refreshToken: str
    expiresIn: int


@dataclass(frozen=True)
class RateLimitInfo:
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset: Optional[int] = None

    def __bool__(self) -> bool:
        return any(value is not None for value in (self.limit, self.remaining, self.reset))


@dataclass(frozen=True)
class CacheStats:
    size: int
    max_size: int


@dataclass
class ValidationErrorResponse:
    """
    Structured payload of a document validation rejection (image quality,
    face detection, document data checks).
    """

    code: str
    message: str
    human_tip: str
    can_retry: bool = True
    status: str = "REJECTED"
    metadata: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ValidationErrorResponse":
        message = str(data.get("message") or "")
        return cls(
            code=str(data.get("code") or ""),
            message=message,
            human_tip=str(data.get("humanTip") or data.get("human_tip") or message),
            can_retry=data.get("canRetry", data.get("can_retry")) is not False,
            status=str(data.get("status") or "REJECTED"),
            metadata=data.get("metadata"),
        )
