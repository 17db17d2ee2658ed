import re
from typing import Any

from app.exceptions import InvalidIdentifierError

_INTEGER_RE = re.compile(r"[+-]?\d+", re.ASCII)


def parse_id(value: Any, field: str = "id") -> int:
    """
    Parse an identifier received from a caller into an ``int``.

    Accepts ints and base-10 integer strings (surrounding whitespace is
    ignored).  Booleans, floats, ``None`` and any other text raise
    :class:`~app.exceptions.InvalidIdentifierError` instead of being
    silently coerced.
    """
    if isinstance(value, bool):
        raise InvalidIdentifierError(field, value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_RE.fullmatch(text):
            return int(text)
    raise InvalidIdentifierError(field, value)
