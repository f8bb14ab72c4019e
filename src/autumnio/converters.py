"""Built-in string-to-value converters keyed by a closed set of type tags."""

from __future__ import annotations

import math
import re
import struct
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConversionError, UnsupportedTypeError

Converter = Callable[[str], Any]


class ValueType(str, Enum):
    BOOLEAN = "boolean"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    ZONED_DATETIME = "zoned-datetime"
    DURATION = "duration"
    ZONE_ID = "zone-id"


# Python types accepted in place of a tag
TYPE_ALIASES: Mapping[Any, ValueType] = MappingProxyType({
    bool: ValueType.BOOLEAN,
    int: ValueType.INT64,
    float: ValueType.FLOAT64,
    str: ValueType.STRING,
    date: ValueType.DATE,
    time: ValueType.TIME,
    datetime: ValueType.DATETIME,
    timedelta: ValueType.DURATION,
    tzinfo: ValueType.ZONE_ID,
    ZoneInfo: ValueType.ZONE_ID,
})

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(NaN|Infinity|([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?)[fFdD]?")
_DURATION_RE = re.compile(
    r"([-+]?)P"
    r"(?:([-+]?[0-9]+)D)?"
    r"(?:T"
    r"(?:([-+]?[0-9]+)H)?"
    r"(?:([-+]?[0-9]+)M)?"
    r"(?:([-+]?[0-9]+)(?:[.,]([0-9]{0,9}))?S)?"
    r")?",
    re.IGNORECASE,
)
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_TIME_RE = re.compile(r"[0-9]{2}:[0-9]{2}(?::[0-9]{2}(?:\.[0-9]{1,6})?)?")
_DATETIME_RE = re.compile(_DATE_RE.pattern + "T" + _TIME_RE.pattern)
_ZONED_BASE_RE = re.compile(_DATETIME_RE.pattern + r"(?:Z|[+-][0-9]{2}:[0-9]{2}(?::[0-9]{2})?)?")
_OFFSET_RE = re.compile(r"([+-])([0-9]{2})(?::?([0-9]{2}))?")
_ZONED_RE = re.compile(r"(?P<base>[^\[]+)(?:\[(?P<zone>[^\]]+)\])?")


def _to_bool(s: str) -> bool:
    return s.lower() == "true"


def _int_parser(bits: int) -> Converter:
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1

    def parse(s: str) -> int:
        if not _INT_RE.fullmatch(s):
            raise ValueError(f"not an integer: {s!r}")
        value = int(s)
        if not low <= value <= high:
            raise ValueError(f"value out of range for int{bits}: {s}")
        return value

    return parse


def _to_float64(s: str) -> float:
    s = s.strip()
    if not _FLOAT_RE.fullmatch(s):
        raise ValueError(f"not a number: {s!r}")
    return float(s.rstrip("fFdD").replace("Infinity", "inf"))


def _to_float32(s: str) -> float:
    value = _to_float64(s)
    if math.isinf(value) or math.isnan(value):
        return value
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _checked(pattern: re.Pattern, s: str, what: str) -> str:
    if not pattern.fullmatch(s):
        raise ValueError(f"not an ISO-8601 {what}: {s!r}")
    return s


def _to_date(s: str) -> date:
    return date.fromisoformat(_checked(_DATE_RE, s, "local date"))


def _to_time(s: str) -> time:
    return time.fromisoformat(_checked(_TIME_RE, s, "local time"))


def _to_datetime(s: str) -> datetime:
    return datetime.fromisoformat(_checked(_DATETIME_RE, s, "local date-time"))


def _to_zone(s: str) -> tzinfo:
    if s in ("Z", "UTC", "GMT"):
        return timezone.utc
    m = _OFFSET_RE.fullmatch(s)
    if m:
        sign = -1 if m.group(1) == "-" else 1
        offset = timedelta(hours=int(m.group(2)), minutes=int(m.group(3) or 0))
        return timezone(sign * offset)
    try:
        return ZoneInfo(s)
    except ZoneInfoNotFoundError as e:
        raise ValueError(f"unknown time-zone id: {s!r}") from e


def _to_zoned_datetime(s: str) -> datetime:
    m = _ZONED_RE.fullmatch(s)
    if not m:
        raise ValueError(f"not a zoned date-time: {s!r}")
    value = datetime.fromisoformat(_checked(_ZONED_BASE_RE, m.group("base"), "date-time"))
    zone = m.group("zone")
    if zone:
        tz = _to_zone(zone)
        return value.astimezone(tz) if value.tzinfo else value.replace(tzinfo=tz)
    if value.tzinfo is None:
        raise ValueError(f"zoned date-time needs an offset or zone: {s!r}")
    return value


def _to_duration(s: str) -> timedelta:
    m = _DURATION_RE.fullmatch(s)
    if not m or not any(m.group(i) is not None for i in range(2, 6)) or s.upper().endswith("T"):
        raise ValueError(f"not an ISO-8601 duration: {s!r}")
    sign, days, hours, minutes, seconds, fraction = m.groups()
    secs = int(seconds or 0)
    micros = int((fraction or "").ljust(6, "0")[:6]) if fraction else 0
    if secs < 0 or (seconds or "").startswith("-"):
        micros = -micros
    value = timedelta(
        days=int(days or 0),
        hours=int(hours or 0),
        minutes=int(minutes or 0),
        seconds=secs,
        microseconds=micros,
    )
    return -value if sign == "-" else value


BUILTIN_CONVERTERS: Mapping[ValueType, Converter] = MappingProxyType({
    ValueType.STRING: lambda s: s,
    ValueType.BOOLEAN: _to_bool,
    ValueType.INT8: _int_parser(8),
    ValueType.INT16: _int_parser(16),
    ValueType.INT32: _int_parser(32),
    ValueType.INT64: _int_parser(64),
    ValueType.FLOAT32: _to_float32,
    ValueType.FLOAT64: _to_float64,
    ValueType.DATE: _to_date,
    ValueType.TIME: _to_time,
    ValueType.DATETIME: _to_datetime,
    ValueType.ZONED_DATETIME: _to_zoned_datetime,
    ValueType.DURATION: _to_duration,
    ValueType.ZONE_ID: _to_zone,
})


def normalize_type(value_type: Any) -> Any:
    """Map a Python type or tag name onto its ValueType.

    String tags are case-insensitive, built-in or not.
    """
    if isinstance(value_type, ValueType):
        return value_type
    if isinstance(value_type, str):
        try:
            return ValueType(value_type.lower())
        except ValueError:
            return value_type.lower()
    try:
        return TYPE_ALIASES.get(value_type, value_type)
    except TypeError:  # unhashable
        return value_type


def build_registry(extra: Optional[Mapping[Any, Converter]] = None) -> Mapping[Any, Converter]:
    registry: Dict[Any, Converter] = dict(BUILTIN_CONVERTERS)
    for tag, fn in (extra or {}).items():
        tag = normalize_type(tag)
        if tag in registry:
            raise ValueError(f"Converter already registered for {tag}")
        registry[tag] = fn
    return MappingProxyType(registry)


def convert(registry: Mapping[Any, Converter], value_type: Any, value: str) -> Any:
    tag = normalize_type(value_type)
    try:
        fn = registry.get(tag)
    except TypeError:
        fn = None
    if fn is None:
        raise UnsupportedTypeError(value_type)
    try:
        return fn(value)
    except (ValueError, ArithmeticError) as e:
        raise ConversionError(value, getattr(tag, "value", tag), str(e)) from e
