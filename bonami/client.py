"""Client side of the library: requests sent to the daemon's message port."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field, replace
from enum import IntEnum
from ipaddress import IPv4Address
from typing import Any, Callable, Optional

from .errors import BonAmiError, ErrorCode
from .service import (
    MAX_RECORDS,
    Config,
    Interface,
    Monitor,
    Service,
    Status,
    TXTRecord,
)

logger = logging.getLogger(__name__)

DAEMON_PORT_NAME = "BonAmi"
LIBRARY_NAME = "bonami.library"
LIBRARY_VERSION = 40
LIBRARY_REVISION = 0
LIBRARY_ID = "BonAmi mDNS Library 40.0"
DEFAULT_MONITOR_INTERVAL = 30


class MessageType(IntEnum):
    """Kinds of request the daemon understands."""

    REGISTER = 1
    UNREGISTER = 2
    DISCOVER = 3
    STOP = 4
    UPDATE = 5
    RESOLVE = 6
    MONITOR = 7
    CONFIG = 8
    ENUMERATE = 9
    GET_INTERFACE = 10
    GET_STATUS = 11
    GET_INTERFACES = 12
    SET_INTERFACE = 13
    REGISTER_CALLBACK = 14
    UNREGISTER_CALLBACK = 15
    GET_SERVICES = 16


@dataclass
class Request:
    """One message sent from a client to the daemon."""

    type: MessageType
    name: str = ""
    service_type: str = ""
    payload: Any = None


@dataclass
class DaemonPort:
    """A named message port; requests are handed to its handler.

    The handler returns the reply.  A reply that is a non-OK ErrorCode,
    or a BonAmiError raised by the handler, reports a failure.
    """

    handler: Callable[[Request], Any]

    def handle(self, request: Request) -> Any:
        reply = self.handler(request)
        if isinstance(reply, ErrorCode):
            if reply is not ErrorCode.OK:
                raise BonAmiError(reply)
            return None
        return reply


@dataclass
class PortRegistry:
    """Public message ports, looked up by name."""

    ports: dict[str, DaemonPort] = field(default_factory=dict)

    def add(self, name: str, port: DaemonPort) -> None:
        if name in self.ports:
            raise BonAmiError(ErrorCode.DUPLICATE, f"port {name!r} already exists")
        self.ports[name] = port

    def remove(self, name: str) -> DaemonPort:
        try:
            return self.ports.pop(name)
        except KeyError:
            raise BonAmiError(ErrorCode.NOTFOUND, f"no port named {name!r}") from None

    def find(self, name: str) -> Optional[DaemonPort]:
        return self.ports.get(name)


default_registry = PortRegistry()


def open_library(version=LIBRARY_VERSION, registry=None, debug=False, mem_track=False) -> "Client":
    """Open a client of at most the supported version."""
    if version > LIBRARY_VERSION:
        raise BonAmiError(ErrorCode.VERSION, f"version {version} is newer than {LIBRARY_VERSION}")
    return Client(registry, debug, mem_track)


def _expect(reply: Any, kind: type) -> Any:
    if not isinstance(reply, kind):
        raise BonAmiError(ErrorCode.BADRESPONSE, f"daemon replied with {type(reply).__name__}")
    return reply


def _expect_list(reply: Any, kind: type) -> list:
    if reply is None:
        return []
    try:
        items = list(reply)
    except TypeError:
        raise BonAmiError(ErrorCode.BADRESPONSE, "daemon reply is not a list") from None
    for item in items:
        _expect(item, kind)
    return items


class Client:
    """Connection to the daemon; each call sends one request to its port."""

    def __init__(self, registry=None, debug=False, mem_track=False):
        self.registry = registry if registry is not None else default_registry
        self.debug = bool(debug)
        self.mem_track = bool(mem_track)
        self.closed = False
        self._config = Config()
        self._update_callbacks: dict[tuple[str, str], Callable] = {}
        if self.registry.find(DAEMON_PORT_NAME) is None:
            raise BonAmiError(ErrorCode.NOT_RUNNING, "daemon port not found")

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True
        self._update_callbacks.clear()

    def _port(self) -> DaemonPort:
        if self.closed:
            raise BonAmiError(ErrorCode.NOTREADY, "client is closed")
        port = self.registry.find(DAEMON_PORT_NAME)
        if port is None:
            raise BonAmiError(ErrorCode.NOT_RUNNING, "daemon port not found")
        return port

    def _send(self, request: Request) -> Any:
        port = self._port()
        if self.debug:
            logger.debug("sending %s request for %r %r", request.type.name,
                         request.name, request.service_type)
        reply = port.handle(request)
        if self.debug and self.mem_track:
            logger.debug("released %s request", request.type.name)
        return reply

    def register_service(self, service: Service) -> None:
        self._port()
        if service is None or not service.name or not service.service_type or service.port <= 0:
            raise BonAmiError(ErrorCode.INVALID, "service needs a name, a type and a port")
        self._send(Request(MessageType.REGISTER, service.name, service.service_type, service))

    def unregister_service(self, name: str, service_type: str) -> None:
        self._port()
        if not name or not service_type:
            raise BonAmiError(ErrorCode.INVALID, "name and type are required")
        self._send(Request(MessageType.UNREGISTER, name, service_type))

    def start_discovery(self, service_type: str, callback: Callable) -> None:
        self._port()
        if not service_type or callback is None:
            raise BonAmiError(ErrorCode.INVALID, "discovery needs a type and a callback")
        self._send(Request(MessageType.DISCOVER, service_type=service_type, payload=callback))

    def stop_discovery(self, service_type: str) -> None:
        self._port()
        if not service_type:
            raise BonAmiError(ErrorCode.INVALID, "discovery type is required")
        self._send(Request(MessageType.STOP, service_type=service_type))

    def monitor_service(self, name, service_type, interval=DEFAULT_MONITOR_INTERVAL,
                        notify=False) -> Monitor:
        self._port()
        if not name or not service_type or interval < 0:
            raise BonAmiError(ErrorCode.INVALID, "monitor needs a name, a type and an interval")
        monitor = Monitor(name, service_type, interval, bool(notify))
        self._send(Request(MessageType.MONITOR, name, service_type, monitor))
        monitor.running = True
        return monitor

    def get_interface_status(self, name: str) -> Interface:
        self._port()
        if not name:
            raise BonAmiError(ErrorCode.INVALID, "interface name is required")
        return _expect(self._send(Request(MessageType.GET_INTERFACE, name)), Interface)

    def get_status(self) -> Status:
        self._port()
        return _expect(self._send(Request(MessageType.GET_STATUS)), Status)

    def get_services(self, service_type: str, limit=MAX_RECORDS) -> list[Service]:
        if not service_type or limit is None or limit < 0:
            raise BonAmiError(ErrorCode.BADPARAM, "type and a capacity are required")
        reply = self._send(Request(MessageType.GET_SERVICES, service_type=service_type))
        return _expect_list(reply, Service)[:limit]

    def set_config(self, config: Config) -> None:
        if config is None:
            raise BonAmiError(ErrorCode.BADPARAM, "config is required")
        snapshot = replace(config)
        self._send(Request(MessageType.CONFIG, payload=snapshot))
        self._config = snapshot

    def get_config(self) -> Config:
        return replace(self._config)

    def get_service_info(self, name: str, service_type: str) -> Service:
        if not name or not service_type:
            raise BonAmiError(ErrorCode.BADPARAM, "name and type are required")
        service = _expect(self._send(Request(MessageType.RESOLVE, name, service_type)), Service)
        try:
            address = socket.gethostbyname(service.hostname)
        except (OSError, UnicodeError):
            raise BonAmiError(ErrorCode.RESOLVE,
                              f"cannot resolve host {service.hostname!r}") from None
        service.addr = IPv4Address(address)
        return service

    def get_interfaces(self) -> list[Interface]:
        return _expect_list(self._send(Request(MessageType.GET_INTERFACES)), Interface)

    def set_preferred_interface(self, interface: str) -> None:
        if not interface:
            raise BonAmiError(ErrorCode.BADPARAM, "interface name is required")
        self._send(Request(MessageType.SET_INTERFACE, interface))

    def update_service(self, name: str, service_type: str, txt: list[TXTRecord]) -> None:
        if not name or not service_type or not txt:
            raise BonAmiError(ErrorCode.BADPARAM, "name, type and TXT records are required")
        self._send(Request(MessageType.UPDATE, name, service_type, list(txt)))

    def register_update_callback(self, name: str, service_type: str, callback: Callable) -> None:
        if not name or not service_type or callback is None:
            raise BonAmiError(ErrorCode.BADPARAM, "name, type and callback are required")
        self._send(Request(MessageType.REGISTER_CALLBACK, name, service_type, callback))
        self._update_callbacks[(name, service_type)] = callback

    def unregister_update_callback(self, name: str, service_type: str) -> None:
        if not name or not service_type:
            raise BonAmiError(ErrorCode.BADPARAM, "name and type are required")
        self._send(Request(MessageType.UNREGISTER_CALLBACK, name, service_type))
        self._update_callbacks.pop((name, service_type), None)

    @property
    def update_callbacks(self) -> dict[tuple[str, str], Callable]:
        return dict(self._update_callbacks)

    def enumerate_service_types(self) -> list[str]:
        return _expect_list(self._send(Request(MessageType.ENUMERATE)), str)