import typing as tp

import httpx

__all__ = ("MockAsyncTransport",)

MockedResponse = tp.Union[httpx.Response, Exception]


class MockAsyncTransport(httpx.AsyncBaseTransport):
    """
    Transport that replays scripted responses in order.

    Queued exceptions are raised instead of returning a response, which is
    how transport failures such as `httpx.ConnectTimeout` are simulated.
    Every request handled is kept in `requests`.
    """

    def __init__(self, responses: tp.Optional[tp.List[MockedResponse]] = None) -> None:
        self.mocked_responses: tp.List[MockedResponse] = []
        self.requests: tp.List[httpx.Request] = []
        if responses:
            self.add_responses(responses)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        mocked = self.mocked_responses.pop(0)
        if isinstance(mocked, Exception):
            raise mocked
        return mocked

    def add_responses(self, responses: tp.List[MockedResponse]) -> None:
        self.mocked_responses.extend(responses)
