from __future__ import annotations

import types
import typing as tp

import anyio
import httpx

from .._cache import EtagCache
from .._config import ClientConfig
from .._retry import RetryPolicy
from .._utils import is_json_content_type
from ._pipeline import (
    ETAG,
    FROM_CACHE,
    LAST_MODIFIED,
    AsyncPipelineTransport,
    AsyncRequestPipeline,
    SleepFunction,
)

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

__all__ = ("AsyncApiTransport",)

QueryParams = tp.Mapping[str, tp.Any]


def _clean_params(params: tp.Optional[QueryParams]) -> tp.Optional[tp.Dict[str, tp.Any]]:
    if params is None:
        return None
    return {key: value for key, value in params.items() if value is not None}


class AsyncApiTransport:
    """
    The HTTP surface the services are written against.

    Each verb method sends one request through the client's pipeline and
    returns the decoded body: parsed JSON, text for other content types, or
    bytes when ``raw=True``. Failures are raised as `ApiError`.

    :param config: Client configuration
    :type config: ClientConfig
    :param transport: Transport the pipeline sends requests with, defaults to `httpx.AsyncHTTPTransport`
    :type transport: tp.Optional[httpx.AsyncBaseTransport], optional
    :param sleep: Coroutine function used to wait between retries, defaults to anyio.sleep
    :type sleep: SleepFunction, optional
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: tp.Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunction = anyio.sleep,
    ) -> None:
        self._config = config
        self._cache = (
            EtagCache(
                default_ttl=config.etag_cache_options.default_ttl,
                max_size=config.etag_cache_options.max_size,
            )
            if config.enable_etag_cache
            else None
        )

        timeout = httpx.Timeout(config.timeout)
        headers = {
            "Accept": "application/json",
            "User-Agent": config.user_agent,
        }

        self.pipeline = AsyncRequestPipeline(
            transport if transport is not None else httpx.AsyncHTTPTransport(),
            access_token=config.access_token,
            refresh_token=config.refresh_token,
            api_key=config.api_key,
            cache=self._cache,
            retry_policy=RetryPolicy(max_attempts=config.max_retries),
            sleep=sleep,
            base_url=config.base_url,
            headers=headers,
            timeout=timeout,
            refresh_path=config.refresh_path,
        )
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=headers,
            timeout=timeout,
            transport=AsyncPipelineTransport(self.pipeline),
        )

    @property
    def cache(self) -> tp.Optional[EtagCache]:
        return self._cache

    @property
    def access_token(self) -> tp.Optional[str]:
        return self.pipeline.access_token

    @property
    def refresh_token(self) -> tp.Optional[str]:
        return self.pipeline.refresh_token

    def set_access_token(self, token: str) -> None:
        self.pipeline.access_token = token

    def set_refresh_token(self, token: str) -> None:
        self.pipeline.refresh_token = token

    def clear_refresh_token(self) -> None:
        self.pipeline.refresh_token = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: tp.Any = None,
        params: tp.Optional[QueryParams] = None,
        headers: tp.Optional[tp.Mapping[str, str]] = None,
        files: tp.Any = None,
        data: tp.Optional[tp.Mapping[str, tp.Any]] = None,
        raw: bool = False,
    ) -> tp.Any:
        response = await self._client.request(
            method,
            path,
            json=json,
            params=_clean_params(params),
            headers=headers,
            files=files,
            data=data,
        )
        return self._decode(response, raw)

    async def get(self, path: str, **kwargs: tp.Any) -> tp.Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, json: tp.Any = None, **kwargs: tp.Any) -> tp.Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: tp.Any = None, **kwargs: tp.Any) -> tp.Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: tp.Any = None, **kwargs: tp.Any) -> tp.Any:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs: tp.Any) -> tp.Any:
        return await self.request("DELETE", path, **kwargs)

    def _decode(self, response: httpx.Response, raw: bool) -> tp.Any:
        if raw:
            return response.content
        if not response.content:
            return None
        if not is_json_content_type(response.headers.get("Content-Type")):
            return response.text

        body = response.json()
        if isinstance(body, dict) and FROM_CACHE in response.extensions:
            body.update(
                fromCache=response.extensions[FROM_CACHE],
                etag=response.extensions.get(ETAG),
                lastModified=response.extensions.get(LAST_MODIFIED),
            )
        return body

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "Self":
        return self

    async def __aexit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        await self.aclose()
