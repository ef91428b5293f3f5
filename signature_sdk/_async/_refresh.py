from __future__ import annotations

import enum
import logging
import typing as tp
from collections import deque

from .._models import TokenPair
from .._synchronization import Deferred

__all__ = ("AsyncTokenRefreshCoordinator", "RefreshInterrupted", "RefreshState")

logger = logging.getLogger("signature_sdk.refresh")


class RefreshInterrupted(Exception):
    """Raised to queued requests when the refresh they waited for was cancelled."""


class RefreshState(enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class AsyncTokenRefreshCoordinator:
    """
    Single-flight access token refresh.

    The first request that needs a new access token calls `refresh`, which
    performs the refresh call. Requests that need a token while that call is
    outstanding call `wait` and are released in FIFO order once it settles,
    either with the new access token or with the refresh error. If the
    refreshing task is cancelled, waiters get `RefreshInterrupted` and the
    failure callback is not called.

    :param refresher: Coroutine function that exchanges a refresh token for a new token pair
    :type refresher: tp.Callable[[str], tp.Awaitable[TokenPair]]
    :param on_success: Called with the new token pair before any waiter is released
    :type on_success: tp.Optional[tp.Callable[[TokenPair], None]], optional
    :param on_failure: Called with the refresh error before any waiter is released
    :type on_failure: tp.Optional[tp.Callable[[Exception], None]], optional
    """

    def __init__(
        self,
        refresher: tp.Callable[[str], tp.Awaitable[TokenPair]],
        on_success: tp.Optional[tp.Callable[[TokenPair], None]] = None,
        on_failure: tp.Optional[tp.Callable[[Exception], None]] = None,
    ) -> None:
        self._refresher = refresher
        self._on_success = on_success
        self._on_failure = on_failure
        self._state = RefreshState.IDLE
        self._waiters: tp.Deque[Deferred[str]] = deque()

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def is_refreshing(self) -> bool:
        return self._state is RefreshState.REFRESHING

    @property
    def queued(self) -> int:
        return len(self._waiters)

    async def refresh(self, refresh_token: str) -> str:
        if self.is_refreshing:
            raise RuntimeError("A token refresh is already in progress")

        # Flipped before the first await so concurrent requests queue instead of refreshing.
        self._state = RefreshState.REFRESHING
        logger.debug("Refreshing access token")

        try:
            tokens = await self._refresher(refresh_token)
        except Exception as exc:
            self._state = RefreshState.IDLE
            logger.debug(f"Token refresh failed, rejecting {len(self._waiters)} queued requests")
            if self._on_failure is not None:
                self._on_failure(exc)
            self._drain(error=exc)
            raise
        except BaseException:
            # Cancelled: the refresh token was never rejected, so it is kept.
            self._state = RefreshState.IDLE
            logger.debug(f"Token refresh was cancelled, releasing {len(self._waiters)} queued requests")
            self._drain(error=RefreshInterrupted("The token refresh was cancelled"))
            raise

        self._state = RefreshState.IDLE
        access_token = tokens["accessToken"]
        logger.debug(f"Token refresh succeeded, releasing {len(self._waiters)} queued requests")
        if self._on_success is not None:
            self._on_success(tokens)
        self._drain(token=access_token)
        return access_token

    async def wait(self) -> str:
        if not self.is_refreshing:
            raise RuntimeError("No token refresh is in progress")

        deferred: Deferred[str] = Deferred()
        self._waiters.append(deferred)
        return await deferred.wait()

    def _drain(self, token: tp.Optional[str] = None, error: tp.Optional[BaseException] = None) -> None:
        while self._waiters:
            deferred = self._waiters.popleft()
            if error is not None:
                deferred.reject(error)
            else:
                deferred.resolve(tp.cast(str, token))
