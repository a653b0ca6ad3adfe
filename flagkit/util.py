"""Parsing helpers and HTTP status handling."""

from __future__ import annotations

import dataclasses
import json
import numbers
import re
from datetime import datetime, timedelta, timezone
from typing import Any

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


class HttpStatusError(Exception):
    """An HTTP request ended with an unsuccessful status code."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


def _parse_rfc3339(text: str) -> datetime | None:
    match = _RFC3339.fullmatch(text)
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micros = int((fraction or "").ljust(6, "0")[:6])
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        if hours > 23 or minutes > 59:
            return None
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    try:
        value = datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
        )
    except ValueError:
        return None
    return value.astimezone(timezone.utc)


def parse_time(value: Any) -> datetime | None:
    """Convert a datetime, an RFC 3339 timestamp or Unix epoch milliseconds to a datetime.

    A datetime is returned unchanged; other results are in UTC. Unparsable
    input gives None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return _parse_rfc3339(value)
    millis = parse_float64(value)
    if millis is None:
        return None
    try:
        return _EPOCH + timedelta(milliseconds=int(millis))
    except (OverflowError, ValueError):
        return None


def parse_float64(value: Any) -> float | None:
    """Return a numeric value as a float, or None if the value is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return float(value)
    return None


def to_json_raw_message(value: Any) -> bytes | None:
    """Return the JSON encoding of a value; bytes are taken to be JSON already."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Could not marshal: {value!r} to json") from exc
    return text.encode("utf-8")


def check_for_http_error(status_code: int, url: str) -> None:
    """Raise HttpStatusError unless the status code is in the 2xx range."""
    if status_code == 401:
        raise HttpStatusError(
            f"Invalid SDK key when accessing URL: {url}. Verify that your SDK key is correct.",
            status_code,
        )
    if status_code == 404:
        raise HttpStatusError(
            f"Resource not found when accessing URL: {url}. Verify that this resource exists.",
            status_code,
        )
    if status_code // 100 != 2:
        raise HttpStatusError(
            f"Unexpected response code: {status_code} when accessing URL: {url}",
            status_code,
        )


def is_http_error_recoverable(status_code: int) -> bool:
    """Tell whether retrying after this HTTP error status might succeed."""
    if 400 <= status_code < 500:
        return status_code in (400, 408, 429)
    return True


def http_error_message(status_code: int, context: str, recoverable_message: str) -> str:
    """Describe an HTTP error and whether it will be retried."""
    status_desc = " (invalid SDK key)" if status_code == 401 else ""
    result = recoverable_message if is_http_error_recoverable(status_code) else "giving up permanently"
    return f"Received HTTP error {status_code}{status_desc} for {context} - {result}"