from __future__ import annotations

import socket
import time
import typing as tp
from datetime import datetime, timezone

import httpx

from ._models import RateLimitInfo, ValidationErrorResponse

__all__ = (
    "ApiError",
    "ConfigurationError",
    "SignatureSDKError",
)

NETWORK_ERROR_CODES = ("ECONNABORTED", "ENOTFOUND")
RETRYABLE_STATUS_CODES = (502, 503, 504)
NETWORK_ERROR_MESSAGE = "Network error or request timeout"

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


class SignatureSDKError(Exception): ...


class ConfigurationError(SignatureSDKError, ValueError): ...


def _decode_body(response: httpx.Response) -> tp.Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _extract_message(data: tp.Any) -> tp.Optional[str]:
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, dict):
            message = message.get("message")
        candidates = (
            message,
            data.get("error"),
            data.get("detail"),
            data.get("errorDescription"),
            data.get("error_description"),
        )
        for candidate in candidates:
            if isinstance(candidate, str) and candidate:
                return candidate
        return None
    if isinstance(data, str) and data:
        return data
    return None


def _parse_int(value: tp.Optional[str]) -> tp.Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _is_dns_failure(exc: BaseException) -> bool:
    current: tp.Optional[BaseException] = exc
    seen = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        if any(marker in str(current).lower() for marker in _DNS_FAILURE_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


class ApiError(SignatureSDKError):
    """
    The single error type surfaced by the client.

    Every HTTP error response and every transport failure (connection error,
    DNS failure, timeout) is converted into an `ApiError` exactly once, at the
    point where the failure is first observed. Network failures carry
    ``status == 0``.
    """

    def __init__(
        self,
        message: str,
        status: int = 500,
        status_text: str = "Internal Server Error",
        *,
        code: tp.Optional[str] = None,
        errors: tp.Optional[tp.List[tp.Any]] = None,
        rate_limit: tp.Optional[RateLimitInfo] = None,
        response: tp.Optional[httpx.Response] = None,
        request: tp.Optional[httpx.Request] = None,
        data: tp.Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.code = code
        self.errors = errors if errors is not None else []
        self.rate_limit = rate_limit if rate_limit is not None else RateLimitInfo()
        self.response = response
        self.request = request
        self.data = data
        self.timestamp = datetime.now(timezone.utc).isoformat()

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        data = _decode_body(response)
        message = _extract_message(data) or f"Request failed with status code {response.status_code}"

        code = None
        errors: tp.List[tp.Any] = []
        if isinstance(data, dict):
            if isinstance(data.get("code"), str):
                code = data["code"]
            if isinstance(data.get("errors"), list):
                errors = data["errors"]

        try:
            request: tp.Optional[httpx.Request] = response.request
        except RuntimeError:
            request = None

        return cls(
            message,
            response.status_code,
            response.reason_phrase,
            code=code,
            errors=errors,
            rate_limit=RateLimitInfo(
                limit=_parse_int(response.headers.get("x-ratelimit-limit")),
                remaining=_parse_int(response.headers.get("x-ratelimit-remaining")),
                reset=_parse_int(response.headers.get("x-ratelimit-reset")),
            ),
            response=response,
            request=request,
            data=data,
        )

    @classmethod
    def from_transport_error(
        cls,
        exc: httpx.TransportError,
        request: tp.Optional[httpx.Request] = None,
    ) -> "ApiError":
        if isinstance(exc, httpx.TimeoutException):
            code = "ECONNABORTED"
        elif isinstance(exc, httpx.ConnectError) and _is_dns_failure(exc):
            code = "ENOTFOUND"
        else:
            code = "ERR_NETWORK"

        if request is None:
            try:
                request = exc.request
            except RuntimeError:
                request = None

        return cls(
            NETWORK_ERROR_MESSAGE,
            0,
            "Network Error",
            code=code,
            request=request,
        )

    def is_authentication_error(self) -> bool:
        return self.status == 401

    def is_authorization_error(self) -> bool:
        return self.status == 403

    def is_not_found_error(self) -> bool:
        return self.status == 404

    def is_validation_error(self) -> bool:
        return self.status in (400, 422)

    def is_rate_limit_error(self) -> bool:
        return self.status == 429

    def is_server_error(self) -> bool:
        return 500 <= self.status < 600

    def is_network_error(self) -> bool:
        return self.status == 0 or self.code in NETWORK_ERROR_CODES

    def is_retryable(self) -> bool:
        return self.is_network_error() or self.is_rate_limit_error() or self.status in RETRYABLE_STATUS_CODES

    def is_document_validation_error(self) -> bool:
        """
        Image, face and document checks rejected an uploaded file, e.g.
        ``IMAGE_TOO_SMALL``, ``NO_FACE_DETECTED`` or ``DOC_NAME_MISMATCH``.
        """
        if self.status != 400 or not self.code:
            return False
        return self.code.startswith("IMAGE_") or "FACE" in self.code or "DOC_" in self.code

    def get_validation_error(self) -> tp.Optional[ValidationErrorResponse]:
        if not self.is_document_validation_error() or not isinstance(self.data, dict):
            return None

        structured = self.data.get("message")
        if isinstance(structured, dict):
            return ValidationErrorResponse.from_mapping({"code": self.data.get("code"), **structured})

        if self.data.get("code") and self.data.get("message"):
            return ValidationErrorResponse.from_mapping(self.data)

        return None

    def to_dict(self) -> tp.Dict[str, tp.Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "status": self.status,
            "statusText": self.status_text,
            "code": self.code,
            "errors": self.errors,
            "timestamp": self.timestamp,
            "rateLimit": {
                "limit": self.rate_limit.limit,
                "remaining": self.rate_limit.remaining,
                "reset": self.rate_limit.reset,
            },
        }

    def __str__(self) -> str:
        text = f"{self.message} ({self.status} {self.status_text})"
        if self.code:
            text += f" [{self.code}]"
        if self.errors:
            text += "\nValidation errors:\n" + "\n".join(f"  - {error}" for error in self.errors)
        if self.is_rate_limit_error() and self.rate_limit.reset is not None:
            reset_in = max(0, self.rate_limit.reset - int(time.time()))
            text += (
                f"\nRate limit: limit={self.rate_limit.limit}, "
                f"remaining={self.rate_limit.remaining}, resets in {reset_in}s"
            )
        return text

    def __repr__(self) -> str:
        return f"<{type(self).__name__} status={self.status} code={self.code!r} message={self.message!r}>"

    @classmethod
    def validation_error(cls, message: str, errors: tp.Optional[tp.List[tp.Any]] = None) -> "ApiError":
        return cls(message, 400, "Bad Request", code="VALIDATION_ERROR", errors=errors)

    @classmethod
    def authentication_error(cls, message: str = "Invalid or expired authentication token") -> "ApiError":
        return cls(message, 401, "Unauthorized", code="AUTHENTICATION_ERROR")

    @classmethod
    def authorization_error(cls, message: str = "Access denied") -> "ApiError":
        return cls(message, 403, "Forbidden", code="AUTHORIZATION_ERROR")

    @classmethod
    def not_found_error(cls, resource: str) -> "ApiError":
        return cls(f"{resource} not found", 404, "Not Found", code="NOT_FOUND_ERROR")

    @classmethod
    def rate_limit_error(cls, message: str = "Too many requests. Try again later.") -> "ApiError":
        return cls(message, 429, "Too Many Requests", code="RATE_LIMIT_ERROR")

    @classmethod
    def document_validation_error(
        cls,
        code: str,
        message: str,
        human_tip: str,
        metadata: tp.Optional[tp.Dict[str, tp.Any]] = None,
    ) -> "ApiError":
        return cls(
            message,
            400,
            "Bad Request",
            code=code,
            errors=[human_tip],
            data={"code": code, "message": message, "humanTip": human_tip, "metadata": metadata},
        )
