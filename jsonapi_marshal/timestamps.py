"""Timestamp codecs for JSON:API attribute values.

Two wire representations are supported:

* :class:`CalendarCodec` writes ``2006-01-02T15:04:05Z07:00`` style strings
  (second precision, ``Z`` for UTC, ``+hh:mm`` otherwise).
* :class:`EpochMillisCodec` writes a bare integer holding the number of
  milliseconds elapsed since January 1, 1970 UTC.

Declare which one a field uses with the ``ISO8601Datetime`` and ``UnixMilli``
annotated aliases. Both aliases also work with pydantic ``TypeAdapter`` inside
``Optional``, ``list`` and ``dict`` containers.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)


def is_zero_time(value: datetime) -> bool:
    """Return True if value is the zero instant (``datetime.min``)."""
    return value.replace(tzinfo=None) == datetime.min


def _as_aware(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimestampCodec:
    """Encode and decode datetimes to and from one wire representation."""

    name = ""

    def encode(self, value: datetime) -> Any:
        """Return the JSON-compatible wire value for a datetime."""
        raise NotImplementedError

    def decode(self, raw: Any) -> datetime:
        """Return the datetime held by a decoded wire value."""
        raise NotImplementedError

    def marshal_json(self, value: datetime) -> str:
        """Return the JSON text for a datetime."""
        return json.dumps(self.encode(value))

    def unmarshal_json(
        self, data: str | bytes, current: datetime | None = None
    ) -> datetime | None:
        """Decode JSON text; a ``null`` literal leaves ``current`` untouched."""
        raw = json.loads(data)
        if raw is None:
            return current
        return self.decode(raw)

    def validate(self, value: Any) -> Any:
        """Coerce wire input before pydantic validates it as a datetime."""
        if value is None or isinstance(value, datetime):
            return value
        return self.decode(value)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class CalendarCodec(TimestampCodec):
    """ISO 8601 calendar strings with a UTC offset."""

    name = "iso8601"

    def encode(self, value: datetime) -> str:
        value = _as_aware(value)
        text = value.replace(tzinfo=None, microsecond=0).isoformat()
        offset = value.utcoffset()
        if not offset:
            return f"{text}Z"
        seconds = int(offset.total_seconds())
        sign = "-" if seconds < 0 else "+"
        hours, remainder = divmod(abs(seconds), 3600)
        return f"{text}{sign}{hours:02d}:{remainder // 60:02d}"

    def decode(self, raw: Any) -> datetime:
        if not isinstance(raw, str):
            raise ValueError(f"expected an ISO 8601 string, got {raw!r}")
        text = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
        # Fractional seconds are accepted even though they are never written.
        return _as_aware(datetime.fromisoformat(text))


class EpochMillisCodec(TimestampCodec):
    """Integer milliseconds since the Unix epoch."""

    name = "unix_milli"

    def encode(self, value: datetime) -> int:
        # Sub-millisecond components are truncated.
        return (_as_aware(value) - EPOCH) // _ONE_MILLISECOND

    def decode(self, raw: Any) -> datetime:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ValueError(f"expected integer milliseconds, got {raw!r}")
        return EPOCH + timedelta(milliseconds=raw)


CALENDAR = CalendarCodec()
EPOCH_MILLIS = EpochMillisCodec()

ISO8601Datetime = Annotated[
    datetime,
    CALENDAR,
    BeforeValidator(CALENDAR.validate),
    PlainSerializer(CALENDAR.encode, when_used="json"),
]

UnixMilli = Annotated[
    datetime,
    EPOCH_MILLIS,
    BeforeValidator(EPOCH_MILLIS.validate),
    PlainSerializer(EPOCH_MILLIS.encode, when_used="json"),
]
