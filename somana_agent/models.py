"""Data models exchanged with the Somana host registry API."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Mapping

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


class HostStatus(str, Enum):
    """Current status of a registered host."""

    MAINTENANCE = "maintenance"
    OFFLINE = "offline"
    ONLINE = "online"


def _parse_time(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"expected an RFC 3339 timestamp, got {value!r}")
    match = _RFC3339.match(value)
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {value!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    return datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second), microsecond, tzinfo=tz,
    )


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    total_minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def _status(value: Any) -> HostStatus | str:
    if not isinstance(value, str):
        raise ValueError(f"expected a status string, got {value!r}")
    try:
        return HostStatus(value)
    except ValueError:
        return value


def _status_value(status: HostStatus | str) -> str:
    return status.value if isinstance(status, HostStatus) else status


def _require_object(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {value!r}")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {value!r}")
    return value


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _time(data: Mapping[str, Any], key: str) -> datetime:
    value = data.get(key)
    return _ZERO_TIME if value is None else _parse_time(value)


@dataclass
class Host:
    """A host as stored by the registry."""

    id: int = 0
    hostname: str = ""
    ip_address: str = ""
    os_name: str = ""
    os_version: str = ""
    status: HostStatus | str = ""
    created_at: datetime = _ZERO_TIME
    updated_at: datetime = _ZERO_TIME
    deleted_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Host:
        """Build a host from a decoded JSON object."""
        obj = _require_object(data)
        raw_status = obj.get("status")
        deleted = obj.get("deleted_at")
        return cls(
            id=_int(obj, "id"),
            hostname=_str(obj, "hostname"),
            ip_address=_str(obj, "ip_address"),
            os_name=_str(obj, "os_name"),
            os_version=_str(obj, "os_version"),
            status="" if raw_status is None else _status(raw_status),
            created_at=_time(obj, "created_at"),
            updated_at=_time(obj, "updated_at"),
            deleted_at=None if deleted is None else _parse_time(deleted),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object form of this host."""
        return {
            "created_at": _format_time(self.created_at),
            "deleted_at": None if self.deleted_at is None else _format_time(self.deleted_at),
            "hostname": self.hostname,
            "id": self.id,
            "ip_address": self.ip_address,
            "os_name": self.os_name,
            "os_version": self.os_version,
            "status": _status_value(self.status),
            "updated_at": _format_time(self.updated_at),
        }


@dataclass
class HostCreateRequest:
    """Body of a host registration request."""

    hostname: str
    ip_address: str
    os_name: str
    os_version: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "hostname": self.hostname,
            "ip_address": self.ip_address,
            "os_name": self.os_name,
            "os_version": self.os_version,
        }


@dataclass
class HostHeartbeatRequest:
    """Body of a heartbeat request."""

    status: HostStatus | str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.status is None:
            return {}
        return {"status": _status_value(self.status)}


@dataclass
class HostUpdateRequest:
    """Body of a host update request; unset fields are left out."""

    hostname: str | None = None
    ip_address: str | None = None
    status: HostStatus | str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.hostname is not None:
            body["hostname"] = self.hostname
        if self.ip_address is not None:
            body["ip_address"] = self.ip_address
        if self.status is not None:
            body["status"] = _status_value(self.status)
        return body


@dataclass
class ErrorBody:
    """Error payload returned by the API."""

    error: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ErrorBody:
        return cls(error=_optional_str(_require_object(data), "error"))


@dataclass
class HealthStatus:
    """Payload of the health endpoint."""

    message: str | None = None
    status: str | None = None
    version: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> HealthStatus:
        obj = _require_object(data)
        known = {"message", "status", "version"}
        return cls(
            message=_optional_str(obj, "message"),
            status=_optional_str(obj, "status"),
            version=_optional_str(obj, "version"),
            extra={k: v for k, v in obj.items() if k not in known},
        )