"""Birth-date numerology computed locally.

Everything else in jyotish is interpreted by the model; these numbers are
not.  For a date of birth ``YYYY-MM-DD``:

* **Mulank** (root number) -- the day of the month reduced to one digit.
* **Bhagyank** (destiny number) -- the sum of every digit in the date,
  reduced to one digit.
* **Loshu grid** -- the 3x3 magic square ``4 9 2 / 3 5 7 / 8 1 6`` with
  each cell kept when that digit occurs anywhere in the date and blanked
  (``None``) otherwise.  Zeros have no cell.

Example::

    >>> calculate("1990-07-23").mulank
    5
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from jyotish.exceptions import InvalidUsageError
from jyotish.models import NumerologyProfile

LOSHU_LAYOUT: tuple[tuple[int, int, int], ...] = (
    (4, 9, 2),
    (3, 5, 7),
    (8, 1, 6),
)


def sum_digits(number: int) -> int:
    """Add the decimal digits of *number* until a single digit remains."""
    total = abs(number)
    while total > 9:
        total = sum(int(d) for d in str(total))
    return total


def loshu_grid(digits: list[int]) -> list[list[Optional[int]]]:
    present = set(digits)
    return [[n if n in present else None for n in row] for row in LOSHU_LAYOUT]


def calculate(dob: str) -> NumerologyProfile:
    """Compute mulank, bhagyank and the Loshu grid for an ISO date.

    Raises:
        InvalidUsageError: If *dob* is not a valid ``YYYY-MM-DD`` date.
    """
    try:
        parsed = date.fromisoformat(dob.strip())
    except ValueError as exc:
        raise InvalidUsageError(f"Invalid date of birth {dob!r}; expected YYYY-MM-DD") from exc

    canonical = parsed.isoformat()
    digits = [int(c) for c in canonical if c.isdigit()]
    return NumerologyProfile(
        dob=canonical,
        mulank=sum_digits(parsed.day),
        bhagyank=sum_digits(sum(digits)),
        loshu=loshu_grid(digits),
    )
