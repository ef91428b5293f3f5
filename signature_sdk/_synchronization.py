from __future__ import annotations

import typing as tp

import anyio

T = tp.TypeVar("T")


class Deferred(tp.Generic[T]):
    """
    A value that is settled exactly once, either resolved or rejected,
    and awaited by a single consumer.
    """

    def __init__(self) -> None:
        self._event = anyio.Event()
        self._value: tp.Optional[T] = None
        self._error: tp.Optional[BaseException] = None

    @property
    def settled(self) -> bool:
        return self._event.is_set()

    def resolve(self, value: T) -> None:
        if self.settled:
            raise RuntimeError("Deferred is already settled")
        self._value = value
        self._event.set()

    def reject(self, error: BaseException) -> None:
        if self.settled:
            raise RuntimeError("Deferred is already settled")
        self._error = error
        self._event.set()

    async def wait(self) -> T:
        await self._event.wait()
        if self._error is not None:
            raise self._error
        return tp.cast(T, self._value)
