import re
import time
from typing import Iterable, Optional

from ._utils import parse_date

__all__ = (
    'parse_max_age',
    'parse_retry_after',
)

# One directive of a Cache-Control value: a name, optionally followed by a token or a quoted string.
DIRECTIVE = re.compile(r'\s*([^\s=,]+)\s*(?:=\s*("(?:[^"\\]|\\.)*"|[^,]*))?\s*(?:,|$)')


def parse_max_age(cache_control_values: Iterable[str]) -> Optional[int]:
    """
    Extract the ``max-age`` directive from ``Cache-Control`` header values.

    Other directives are skipped whatever their form, so qualified
    directives such as ``private="Set-Cookie"`` or malformed ones do not hide
    a valid ``max-age``. Returns None when no directive carries a
    non-negative integer.

    Examples:
        >>> parse_max_age(['private="Set-Cookie", max-age=60'])
        60
        >>> parse_max_age(["no-store"]) is None
        True
    """
    for cache_control_value in cache_control_values:
        for match in DIRECTIVE.finditer(cache_control_value):
            name, value = match.groups()
            if name.lower() != "max-age" or value is None:
                continue
            value = value.strip()
            if value.startswith('"'):
                if len(value) < 2 or not value.endswith('"'):
                    continue
                value = value[1:-1]
            if value.isascii() and value.isdigit():
                return int(value)
    return None


def parse_retry_after(value: Optional[str], now: Optional[float] = None) -> Optional[float]:
    """
    Parse a ``Retry-After`` header value into a number of seconds.

    Both forms allowed by RFC 9110 are accepted: a delay in seconds
    (``"120"``) and an HTTP date (``"Wed, 21 Oct 2015 07:28:00 GMT"``).
    Dates in the past yield ``0``. Returns None when the value is missing
    or cannot be parsed.
    """
    if not value:
        return None

    value = value.strip()
    try:
        return max(0.0, float(int(value)))
    except ValueError:
        pass

    timestamp = parse_date(value)
    if timestamp is None:
        return None
    current = time.time() if now is None else now
    return max(0.0, timestamp - current)
