"""Service descriptions, TXT records, filters and validation rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from ipaddress import IPv4Address
from typing import Callable, Optional

from .errors import BonAmiError, ErrorCode

MAX_NAME_LEN = 256
MAX_SERVICE_LEN = 64
MAX_TXT_LEN = 256
MAX_RECORDS = 32
MAX_INSTANCE_NAME_LEN = 63

_LOCAL_SUFFIX = ".local"
_NAME_PUNCTUATION = frozenset("-_.")


@dataclass
class TXTRecord:
    """One key/value pair of service metadata."""

    key: str
    value: str


@dataclass
class Service:
    """A service that is registered, resolved or discovered."""

    name: str
    service_type: str
    port: int = 0
    hostname: str = ""
    addr: IPv4Address = field(default_factory=lambda: IPv4Address(0))
    txt: list[TXTRecord] = field(default_factory=list)

    def txt_value(self, key: str) -> Optional[str]:
        """Value of the first TXT record with this key, or None."""
        return next((record.value for record in self.txt if record.key == key), None)


@dataclass
class ServiceInfo:
    """Details of a discovered service as the daemon reports them."""

    name: str
    service_type: str
    port: int = 0
    txt: str = ""
    ip: IPv4Address = field(default_factory=lambda: IPv4Address(0))
    ttl: int = 0


@dataclass
class Filter:
    """Selects services by the value of one TXT key."""

    txt_key: str = ""
    txt_value: str = ""
    wildcard: bool = False


@dataclass
class Config:
    """Library settings shared with the daemon."""

    discovery_timeout: int = 0
    resolve_timeout: int = 0
    ttl: int = 0
    auto_reconnect: bool = False


@dataclass
class Interface:
    """A network interface known to the daemon."""

    name: str
    addr: IPv4Address = field(default_factory=lambda: IPv4Address(0))
    netmask: IPv4Address = field(default_factory=lambda: IPv4Address(0))
    up: bool = False
    preferred: bool = False


@dataclass
class Status:
    """Counters describing the daemon's current state."""

    num_services: int = 0
    num_discoveries: int = 0
    num_monitors: int = 0
    num_interfaces: int = 0


@dataclass
class Monitor:
    """A periodic availability check of one service."""

    name: str
    service_type: str
    check_interval: int = 30
    notify_offline: bool = False
    running: bool = False
    callback: Optional[Callable[[Optional[Service]], None]] = None


def create_txt_record(key: str, value: str) -> TXTRecord:
    """Make a TXT record, cutting key and value to the maximum length."""
    if key is None or value is None:
        raise BonAmiError(ErrorCode.BADPARAM, "TXT record needs a key and a value")
    limit = MAX_TXT_LEN - 1
    return TXTRecord(key[:limit], value[:limit])


def validate_service_type(service_type: str) -> str:
    """Check that a type starts with '_' and ends in '.local'; return it."""
    if not service_type or not service_type.startswith("_"):
        raise BonAmiError(ErrorCode.BADTYPE, f"invalid service type {service_type!r}")
    index = service_type.find(_LOCAL_SUFFIX)
    if index < 0 or index + len(_LOCAL_SUFFIX) != len(service_type):
        raise BonAmiError(ErrorCode.BADTYPE, f"service type must end in .local: {service_type!r}")
    return service_type


def validate_service_name(name: str) -> str:
    """Check an instance name's length and characters; return it."""
    if not name:
        raise BonAmiError(ErrorCode.BADNAME, "service name is empty")
    if len(name) > MAX_INSTANCE_NAME_LEN:
        raise BonAmiError(ErrorCode.BADNAME, f"service name too long: {name!r}")
    for char in name:
        if not (char.isascii() and char.isalnum()) and char not in _NAME_PUNCTUATION:
            raise BonAmiError(ErrorCode.BADNAME, f"invalid character {char!r} in service name")
    return name


def match_filter(service: Service, service_filter: Optional[Filter]) -> bool:
    """Whether a service passes a filter; the first record with the key decides."""
    if service_filter is None or not service_filter.txt_key:
        return True
    for record in service.txt:
        if record.key == service_filter.txt_key:
            if service_filter.wildcard:
                return service_filter.txt_value in record.value
            return record.value == service_filter.txt_value
    return False