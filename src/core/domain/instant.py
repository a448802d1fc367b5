"""
Instant — Local date-time with nanosecond resolution

Timestamps of transactions and rule boundaries are local date-times without
a zone. Python ``datetime`` stops at microseconds, while rule boundaries must
be distinguishable one nanosecond apart, so an instant is stored as a single
integer tick count (nanoseconds since 0001-01-01T00:00:00).

INVARIANTS:
1. Instants are immutable, hashable and totally ordered by ``ticks``
2. parse(format(x)) == x for every instant
3. Conversion to ``datetime`` truncates to microseconds (never rounds up)
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Final

# =============================================================================
# CONSTANTS
# =============================================================================

NANOS_PER_SECOND: Final[int] = 1_000_000_000
NANOS_PER_MICROSECOND: Final[int] = 1_000
SECONDS_PER_DAY: Final[int] = 86_400

# YYYY-MM-DD[T ]HH:MM[:SS[.fffffffff]]
_ISO_LOCAL_PATTERN: Final = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,9}))?)?$"
)


# =============================================================================
# INSTANT
# =============================================================================


@dataclass(frozen=True, order=True)
class Instant:
    """
    Local date-time with nanosecond resolution.

    Attributes:
        ticks: Nanoseconds since 0001-01-01T00:00:00 (local, no zone)
    """

    ticks: int

    def __post_init__(self) -> None:
        if isinstance(self.ticks, bool) or not isinstance(self.ticks, int):
            raise TypeError(f"Instant ticks must be int, got {type(self.ticks).__name__}")
        if self.ticks < 0:
            raise ValueError(f"Instant ticks must be non-negative, got {self.ticks}")

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def of(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        nanosecond: int = 0,
    ) -> "Instant":
        """
        Build an instant from calendar fields.

        Raises:
            ValueError: if any field is out of range
        """
        if not 0 <= nanosecond < NANOS_PER_SECOND:
            raise ValueError(f"nanosecond must be in [0, 1e9), got {nanosecond}")
        base = datetime(year, month, day, hour, minute, second)
        return cls(_whole_seconds(base) * NANOS_PER_SECOND + nanosecond)

    @classmethod
    def from_datetime(cls, value: datetime) -> "Instant":
        """
        Convert a naive ``datetime``; microseconds become nanoseconds.

        Raises:
            ValueError: if ``value`` carries a timezone
        """
        if value.tzinfo is not None:
            raise ValueError(f"Instant is a local date-time, got aware datetime {value!r}")
        nanos = value.microsecond * NANOS_PER_MICROSECOND
        return cls(_whole_seconds(value) * NANOS_PER_SECOND + nanos)

    @classmethod
    def parse(cls, text: str) -> "Instant":
        """
        Parse an ISO-8601 local date-time.

        Accepted forms: ``YYYY-MM-DDTHH:MM``, ``YYYY-MM-DDTHH:MM:SS`` and
        ``YYYY-MM-DDTHH:MM:SS.f`` with 1 to 9 fraction digits. A single space
        may replace the ``T`` separator.

        Raises:
            ValueError: on malformed text or impossible calendar values

        Examples:
            >>> Instant.parse("2023-10-12T20:15:30.000000001").nanosecond
            1
            >>> Instant.parse("2023-10-12 20:15") == Instant.of(2023, 10, 12, 20, 15)
            True
        """
        match = _ISO_LOCAL_PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid ISO-8601 local date-time: {text!r}")

        year, month, day, hour, minute, second, fraction = match.groups()
        nanosecond = int(fraction.ljust(9, "0")) if fraction else 0
        return cls.of(
            int(year),
            int(month),
            int(day),
            int(hour),
            int(minute),
            int(second or 0),
            nanosecond,
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def nanosecond(self) -> int:
        """Nanosecond-of-second component."""
        return self.ticks % NANOS_PER_SECOND

    def to_datetime(self) -> datetime:
        """Naive ``datetime``, truncated to microseconds."""
        seconds, nanos = divmod(self.ticks, NANOS_PER_SECOND)
        days, second_of_day = divmod(seconds, SECONDS_PER_DAY)
        hour, rest = divmod(second_of_day, 3600)
        minute, second = divmod(rest, 60)
        day = datetime.fromordinal(days + 1)
        return day.replace(
            hour=hour,
            minute=minute,
            second=second,
            microsecond=nanos // NANOS_PER_MICROSECOND,
        )

    def plus_nanos(self, nanos: int) -> "Instant":
        """Shift by ``nanos`` (may be negative)."""
        return Instant(self.ticks + nanos)

    def isoformat(self) -> str:
        """
        ISO-8601 text; the fraction is printed in groups of three digits
        and omitted when zero.

        Examples:
            >>> Instant.of(2023, 1, 1, 0, 0, 0, 500_000_000).isoformat()
            '2023-01-01T00:00:00.500'
            >>> Instant.of(2023, 1, 1, 0, 0, 0, 1).isoformat()
            '2023-01-01T00:00:00.000000001'
        """
        base = self.to_datetime().replace(microsecond=0).isoformat()
        nanos = self.nanosecond
        if nanos == 0:
            return base
        if nanos % 1_000_000 == 0:
            return f"{base}.{nanos // 1_000_000:03d}"
        if nanos % 1_000 == 0:
            return f"{base}.{nanos // 1_000:06d}"
        return f"{base}.{nanos:09d}"

    def __str__(self) -> str:
        return self.isoformat()


# =============================================================================
# COERCION
# =============================================================================


def to_instant(value: "Instant | datetime | str") -> Instant:
    """
    Coerce a wire or Python value into an ``Instant``.

    Raises:
        TypeError: for unsupported types
        ValueError: for malformed strings
    """
    if isinstance(value, Instant):
        return value
    if isinstance(value, datetime):
        return Instant.from_datetime(value)
    if isinstance(value, str):
        return Instant.parse(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to Instant")


def _whole_seconds(value: datetime) -> int:
    # ordinal 1 == 0001-01-01
    days = value.toordinal() - 1
    return days * SECONDS_PER_DAY + value.hour * 3600 + value.minute * 60 + value.second
