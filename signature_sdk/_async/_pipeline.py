from __future__ import annotations

import json
import logging
import re
import typing as tp

import anyio
import httpx

from .._cache import CacheEntry, EtagCache
from .._config import DEFAULT_REFRESH_PATH
from .._exceptions import ApiError
from .._headers import parse_max_age
from .._models import RequestMetadata, ResponseMetadata, TokenPair
from .._retry import RetryPolicy, RetryState
from .._utils import (
    MUTATING_METHODS,
    SAFE_METHODS,
    cache_key_for,
    generate_request_id,
    is_json_content_type,
    parent_path,
)
from ._refresh import AsyncTokenRefreshCoordinator, RefreshInterrupted

__all__ = (
    "AsyncPipelineTransport",
    "AsyncRequestPipeline",
    "AuthenticationMiddleware",
    "ConditionalCacheMiddleware",
    "DEFAULT_MIDDLEWARE_ORDER",
    "Middleware",
    "RequestIdMiddleware",
    "RetryMiddleware",
    "TokenRefreshMiddleware",
)

logger = logging.getLogger("signature_sdk.pipeline")
retry_logger = logging.getLogger("signature_sdk.retry")
cache_logger = logging.getLogger("signature_sdk.cache")

REPLAY = "signature_sdk_replay"
RETRY_STATE = "signature_sdk_retry_state"
CACHED_ENTRY = "signature_sdk_cached_entry"
IF_NONE_MATCH_ADDED = "signature_sdk_if_none_match"

FROM_CACHE = "signature_sdk_from_cache"
ETAG = "signature_sdk_etag"
LAST_MODIFIED = "signature_sdk_last_modified"

NextHandler = tp.Callable[[httpx.Request], tp.Awaitable[httpx.Response]]
SleepFunction = tp.Callable[[float], tp.Awaitable[tp.Any]]


class Middleware(tp.Protocol):
    async def __call__(self, request: httpx.Request, call_next: NextHandler) -> httpx.Response: ...


class RequestIdMiddleware:
    async def __call__(self, request: httpx.Request, call_next: NextHandler) -> httpx.Response:
        if "X-Request-ID" not in request.headers:
            request.headers["X-Request-ID"] = generate_request_id()
        return await call_next(request)


class RetryMiddleware:
    """
    Replays requests that failed with a retryable `ApiError`.

    Attempt bookkeeping lives in a `RetryState` stored in the request
    extensions, so every replay of one logical request shares the same
    counter no matter how deep in the chain the replay was started.
    """

    def __init__(self, pipeline: "AsyncRequestPipeline") -> None:
        self._pipeline = pipeline

    async def __call__(self, request: httpx.Request, call_next: NextHandler) -> httpx.Response:
        try:
            return await call_next(request)
        except ApiError as exc:
            state = self._state_for(request)
            decision = self._pipeline.retry_policy.should_retry(
                exc,
                state.attempt,
                max_attempts=state.max_attempts,
                is_replay=request.extensions.get(REPLAY, False),
            )
            if not decision.retry:
                raise
            attempt = state.record(exc)
            retry_logger.debug(
                f"Attempt {attempt}/{state.max_attempts} after {decision.delay_ms}ms "
                f"for {request.method} {request.url} ({exc.status} {exc.status_text})"
            )

        await self._pipeline.sleep(decision.delay_ms / 1000)
        return await self._pipeline.replay(request)

    def _state_for(self, request: httpx.Request) -> RetryState:
        state = request.extensions.get(RETRY_STATE)
        if state is None:
            state = self._pipeline.retry_policy.new_state()
            request.extensions[RETRY_STATE] = state
        return tp.cast(RetryState, state)


class TokenRefreshMiddleware:
    """
    Turns a 401 into a coordinated token refresh followed by a replay.

    The first 401 seen while no refresh is running starts one (provided a
    refresh token is configured); 401s arriving while it runs wait for its
    outcome. Either way the request is marked as a replay, so it can never
    start a second refresh and is never retried. When the refresh a request
    waits for is cancelled, the request starts a new one itself.
    """

    def __init__(self, pipeline: "AsyncRequestPipeline") -> None:
        self._pipeline = pipeline

    async def __call__(self, request: httpx.Request, call_next: NextHandler) -> httpx.Response:
        pipeline = self._pipeline
        try:
            return await call_next(request)
        except ApiError as exc:
            if not exc.is_authentication_error() or request.extensions.get(REPLAY, False):
                raise

            if not await self._await_fresh_token(request):
                raise

        return await pipeline.replay(request)

    async def _await_fresh_token(self, request: httpx.Request) -> bool:
        pipeline = self._pipeline
        coordinator = pipeline.coordinator
        while True:
            if coordinator.is_refreshing:
                request.extensions[REPLAY] = True
                logger.debug(f"Queued {request.method} {request.url} behind the running token refresh")
                try:
                    await coordinator.wait()
                except RefreshInterrupted:
                    logger.debug(f"Token refresh was cancelled, {request.method} {request.url} takes it over")
                    continue
                return True
            if pipeline.refresh_token:
                request.extensions[REPLAY] = True
                await coordinator.refresh(pipeline.refresh_token)
                return True
            return False


class ConditionalCacheMiddleware:
    """
    Sends GET requests conditionally and serves the cached body on 304.

    Successful GET responses carrying an ``ETag`` are stored under the
    request's cache key; successful mutations drop the entries for their
    path and for the parent collection.
    """

    def __init__(self, cache: EtagCache, base_url: tp.Optional[httpx.URL] = None) -> None:
        self._cache = cache
        self._base_url = base_url

    async def __call__(self, request: httpx.Request, call_next: NextHandler) -> httpx.Response:
        method = request.method.upper()
        key = cache_key_for(request.url, self._base_url)

        if method in SAFE_METHODS:
            self._attach_validator(request, key)

        try:
            response = await call_next(request)
        except ApiError as exc:
            entry = request.extensions.get(CACHED_ENTRY)
            if exc.status == 304 and entry is not None:
                cache_logger.debug(f"Not modified: serving cached body for {key}")
                return self._cached_response(request, tp.cast(CacheEntry, entry))
            raise

        if method in SAFE_METHODS:
            self._store(key, response)
        elif method in MUTATING_METHODS:
            self._invalidate(key)
        return response

    def _attach_validator(self, request: httpx.Request, key: str) -> None:
        entry = self._cache.get(key)
        if entry is None:
            # A replay may have outlived the entry it was sent with.
            if request.extensions.pop(IF_NONE_MATCH_ADDED, False):
                del request.headers["If-None-Match"]
            request.extensions.pop(CACHED_ENTRY, None)
            return

        if "If-None-Match" in request.headers and not request.extensions.get(IF_NONE_MATCH_ADDED, False):
            return

        request.headers["If-None-Match"] = entry.etag
        request.extensions[IF_NONE_MATCH_ADDED] = True
        request.extensions[CACHED_ENTRY] = entry

    def _store(self, key: str, response: httpx.Response) -> None:
        etag = response.headers.get("ETag")
        last_modified = response.headers.get("Last-Modified")

        if etag:
            self._cache.set(
                key,
                etag,
                _decode(response),
                max_age=_max_age(response),
                last_modified=last_modified,
            )

        response.extensions[FROM_CACHE] = False
        response.extensions[ETAG] = etag
        response.extensions[LAST_MODIFIED] = last_modified

    def _invalidate(self, key: str) -> None:
        path = key.split("?", 1)[0]
        self._cache.invalidate_pattern(_path_pattern(path))

        parent = parent_path(path)
        if parent is not None:
            self._cache.invalidate_pattern(_path_pattern(parent))

    def _cached_response(self, request: httpx.Request, entry: CacheEntry) -> httpx.Response:
        metadata = ResponseMetadata(
            signature_sdk_from_cache=True,
            signature_sdk_etag=entry.etag,
            signature_sdk_last_modified=entry.last_modified,
        )
        extensions = dict(metadata)
        if isinstance(entry.body, bytes):
            return httpx.Response(304, content=entry.body, request=request, extensions=extensions)
        return httpx.Response(304, json=entry.body, request=request, extensions=extensions)


class AuthenticationMiddleware:
    def __init__(self, pipeline: "AsyncRequestPipeline") -> None:
        self._pipeline = pipeline

    async def __call__(self, request: httpx.Request, call_next: NextHandler) -> httpx.Response:
        if self._pipeline.access_token:
            request.headers["Authorization"] = f"Bearer {self._pipeline.access_token}"
        if self._pipeline.api_key:
            request.headers["X-API-Key"] = self._pipeline.api_key
        return await call_next(request)


DEFAULT_MIDDLEWARE_ORDER: tp.Tuple[tp.Type[tp.Any], ...] = (
    RequestIdMiddleware,
    RetryMiddleware,
    TokenRefreshMiddleware,
    ConditionalCacheMiddleware,
    AuthenticationMiddleware,
)
"""
Order of the default chain, outermost first. Retries wrap the refresh
handling so retryable failures never reach it, and the cache lookup runs
before credentials are attached.
"""


def _decode(response: httpx.Response) -> tp.Any:
    if is_json_content_type(response.headers.get("Content-Type")):
        try:
            return response.json()
        except ValueError:
            return response.content
    return response.content


def _max_age(response: httpx.Response) -> tp.Optional[float]:
    max_age = parse_max_age(response.headers.get_list("Cache-Control"))
    if max_age is None:
        return None
    return float(max_age)


def _path_pattern(path: str) -> str:
    return f"^{re.escape(path)}(\\?|$)"


class AsyncRequestPipeline:
    """
    Runs every request through an ordered chain of middlewares around one
    transport call.

    The pipeline owns the mutable state shared by the requests of one
    client: the current credentials, the conditional cache and the token
    refresh coordinator.

    :param transport: Transport the terminal step forwards requests to
    :type transport: httpx.AsyncBaseTransport
    :param access_token: Bearer token attached to every request, defaults to None
    :type access_token: tp.Optional[str], optional
    :param refresh_token: Token exchanged for a new access token after a 401, defaults to None
    :type refresh_token: tp.Optional[str], optional
    :param api_key: Value of the legacy ``X-API-Key`` header, defaults to None
    :type api_key: tp.Optional[str], optional
    :param cache: Conditional cache; GET requests are not revalidated when omitted, defaults to None
    :type cache: tp.Optional[EtagCache], optional
    :param retry_policy: Policy for retryable failures, defaults to None
    :type retry_policy: tp.Optional[RetryPolicy], optional
    :param sleep: Coroutine function used to wait between retries, defaults to anyio.sleep
    :type sleep: SleepFunction, optional
    :param base_url: Base URL the cache keys and the refresh call are relative to, defaults to None
    :type base_url: tp.Union[httpx.URL, str, None], optional
    :param headers: Headers sent with the refresh call, defaults to None
    :type headers: tp.Optional[tp.Mapping[str, str]], optional
    :param timeout: Timeout of the refresh call, defaults to None
    :type timeout: tp.Optional[httpx.Timeout], optional
    :param refresh_path: Path of the token refresh endpoint, defaults to DEFAULT_REFRESH_PATH
    :type refresh_path: str, optional
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        *,
        access_token: tp.Optional[str] = None,
        refresh_token: tp.Optional[str] = None,
        api_key: tp.Optional[str] = None,
        cache: tp.Optional[EtagCache] = None,
        retry_policy: tp.Optional[RetryPolicy] = None,
        sleep: SleepFunction = anyio.sleep,
        base_url: tp.Union[httpx.URL, str, None] = None,
        headers: tp.Optional[tp.Mapping[str, str]] = None,
        timeout: tp.Optional[httpx.Timeout] = None,
        refresh_path: str = DEFAULT_REFRESH_PATH,
    ) -> None:
        self._transport = transport
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.api_key = api_key
        self.cache = cache
        self.retry_policy = retry_policy if retry_policy is not None else RetryPolicy()
        self.sleep = sleep
        self.base_url = httpx.URL(base_url) if base_url is not None else None
        self.headers = dict(headers) if headers is not None else {}
        self.timeout = timeout
        self.refresh_path = refresh_path

        self.coordinator = AsyncTokenRefreshCoordinator(
            self.refresh_tokens,
            on_success=self._install_tokens,
            on_failure=self._discard_refresh_token,
        )
        self.middlewares: tp.List[Middleware] = self.default_middlewares()

    def default_middlewares(self) -> tp.List[Middleware]:
        middlewares: tp.List[Middleware] = [
            RequestIdMiddleware(),
            RetryMiddleware(self),
            TokenRefreshMiddleware(self),
        ]
        if self.cache is not None:
            middlewares.append(ConditionalCacheMiddleware(self.cache, self.base_url))
        middlewares.append(AuthenticationMiddleware(self))
        return middlewares

    async def handle(self, request: httpx.Request) -> httpx.Response:
        """
        Sends a request through the whole chain.

        Any `ApiError` that reaches the caller is logged once on the
        ``signature_sdk.pipeline`` logger before it is re-raised.
        """
        try:
            return await self.replay(request)
        except ApiError as exc:
            if exc.response is not None:
                logger.error(f"{exc.status}: {json.dumps(exc.data, default=str)}")
            else:
                logger.error(exc.message)
            raise

    async def replay(self, request: httpx.Request) -> httpx.Response:
        return await self._dispatch(0, request)

    async def _dispatch(self, index: int, request: httpx.Request) -> httpx.Response:
        if index >= len(self.middlewares):
            return await self._send(request)

        async def call_next(next_request: httpx.Request) -> httpx.Response:
            return await self._dispatch(index + 1, next_request)

        return await self.middlewares[index](request, call_next)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            response = await self._transport.handle_async_request(request)
            await response.aread()
        except httpx.TransportError as exc:
            raise ApiError.from_transport_error(exc, request) from exc

        response.request = request
        if not response.is_success:
            raise ApiError.from_response(response)
        return response

    async def refresh_tokens(self, refresh_token: tp.Optional[str] = None) -> TokenPair:
        """
        Exchanges a refresh token for a new token pair.

        The call runs through the same chain as every other request but is
        marked as a replay, so a failing refresh is neither retried nor
        refreshed again.
        """
        token = refresh_token if refresh_token is not None else self.refresh_token
        if not token:
            raise ApiError.authentication_error("No refresh token available")

        extensions: tp.Dict[str, tp.Any] = dict(RequestMetadata(signature_sdk_replay=True))
        if self.timeout is not None:
            extensions["timeout"] = self.timeout.as_dict()

        # Sent with the current, possibly expired, bearer token like any other
        # request. Being a POST it also drops cached entries under the auth path.
        request = httpx.Request(
            "POST",
            self._url(self.refresh_path),
            headers=self.headers,
            json={"refreshToken": token},
            extensions=extensions,
        )
        response = await self.replay(request)

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = None
        if not isinstance(data, dict) or not data.get("accessToken"):
            raise ApiError(
                "Refresh response did not include an access token",
                response.status_code,
                response.reason_phrase,
                code="AUTHENTICATION_ERROR",
                response=response,
                request=request,
                data=data,
            )
        return tp.cast(TokenPair, data)

    def _url(self, path: str) -> httpx.URL:
        if self.base_url is None:
            return httpx.URL(path)
        return self.base_url.copy_with(path=self.base_url.path.rstrip("/") + "/" + path.lstrip("/"))

    def _install_tokens(self, tokens: TokenPair) -> None:
        self.access_token = tokens["accessToken"]
        if tokens.get("refreshToken"):
            self.refresh_token = tokens["refreshToken"]

    def _discard_refresh_token(self, error: Exception) -> None:
        self.refresh_token = None

    async def aclose(self) -> None:
        await self._transport.aclose()


class AsyncPipelineTransport(httpx.AsyncBaseTransport):
    """
    An HTTPX transport that sends every request through an `AsyncRequestPipeline`.

    :param pipeline: The pipeline requests are handed to
    :type pipeline: AsyncRequestPipeline
    """

    def __init__(self, pipeline: AsyncRequestPipeline) -> None:
        self.pipeline = pipeline

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self.pipeline.handle(request)

    async def aclose(self) -> None:
        await self.pipeline.aclose()
