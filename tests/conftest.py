import typing as tp

import pytest


@pytest.fixture()
def records_of(caplog: tp.Any) -> tp.Callable[[str], tp.List[tp.Tuple[str, int, str]]]:
    """Log records of one logger, in the `caplog.record_tuples` format."""

    def filter_records(logger_name: str) -> tp.List[tp.Tuple[str, int, str]]:
        return [record for record in caplog.record_tuples if record[0] == logger_name]

    return filter_records


@pytest.fixture()
def sleeps() -> tp.List[float]:
    return []


@pytest.fixture()
def fake_sleep(sleeps: tp.List[float]) -> tp.Callable[[float], tp.Awaitable[None]]:
    """Records retry delays instead of waiting for them."""

    async def sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return sleep
