import typing as tp

import httpx
import pytest

from signature_sdk import AsyncRequestPipeline, EtagCache, MockAsyncTransport

BASE_URL = "https://api.example.com"


@pytest.fixture()
def transport() -> MockAsyncTransport:
    return MockAsyncTransport()


@pytest.fixture()
def make_pipeline(
    transport: MockAsyncTransport, fake_sleep: tp.Callable[[float], tp.Awaitable[None]]
) -> tp.Callable[..., AsyncRequestPipeline]:
    def factory(
        cache: tp.Optional[EtagCache] = None,
        base_transport: tp.Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: tp.Any,
    ) -> AsyncRequestPipeline:
        kwargs.setdefault("access_token", "access-1")
        return AsyncRequestPipeline(
            base_transport if base_transport is not None else transport,
            cache=cache,
            sleep=fake_sleep,
            base_url=BASE_URL,
            **kwargs,
        )

    return factory
