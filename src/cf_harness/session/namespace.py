"""Per-session namespace prefixes.

Every resource name a session creates is prefixed with a short random token so
that concurrent test runs against a shared platform do not collide. The token
is ``t`` followed by a uniformly random integer from ``[0, NAMESPACE_SPACE)``
in base 36, followed by ``-`` (for example ``t1x9kq2b7f-``).

Uniqueness is probabilistic only. With 2**48 possible values the chance that
any two of 10,000 concurrent sessions share a prefix is roughly 1.8e-7; it is
never zero, and nothing checks the platform for an existing prefix.
"""

import random
import secrets
import string
from typing import Optional

NAMESPACE_MARKER = "t"
NAMESPACE_SEPARATOR = "-"
NAMESPACE_SPACE = 2**48

_BASE36_DIGITS = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError(f"Cannot render negative value in base 36: {value}")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_namespace(rng: Optional[random.Random] = None) -> str:
    """Return a fresh namespace prefix.

    Args:
        rng: Random source to draw from (defaults to the OS CSPRNG)
    """
    value = rng.randrange(NAMESPACE_SPACE) if rng is not None else secrets.randbelow(NAMESPACE_SPACE)
    return f"{NAMESPACE_MARKER}{to_base36(value)}{NAMESPACE_SEPARATOR}"
