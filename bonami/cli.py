"""The bactl command: control the mDNS daemon from the command line."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TextIO

from .client import DEFAULT_MONITOR_INTERVAL, Client, open_library
from .errors import BonAmiError
from .service import Service, create_txt_record

RETURN_OK = 0
RETURN_ERROR = 10

DISCOVERY_WAIT = 1.0
MONITOR_POLL = 1.0


class _ArgumentError(Exception):
    """Raised when command arguments do not fit the command's template."""


@dataclass(frozen=True)
class _Option:
    name: str
    flags: frozenset


Handler = Callable[[Client, dict, TextIO], int]


@dataclass(frozen=True)
class Command:
    """One bactl sub-command with its argument template."""

    name: str
    template: str
    description: str
    handler: Handler

    @property
    def options(self) -> list[_Option]:
        options = []
        for part in self.template.split(","):
            if not part:
                continue
            name, *modifiers = part.split("/")
            options.append(_Option(name.upper(), frozenset(m.upper() for m in modifiers)))
        return options

    def parse(self, tokens) -> dict[str, Any]:
        """Match command-line tokens against the template."""
        options = self.options
        by_name = {option.name: option for option in options}
        multi = next((option for option in options if "M" in option.flags), None)
        values: dict[str, Any] = {}
        stream = iter(tokens)
        for token in stream:
            key, sep, inline = token.partition("=")
            option = by_name.get(key.upper())
            if option is None:
                if multi is None:
                    raise _ArgumentError(f"unexpected argument {token!r}")
                values.setdefault(multi.name, []).append(token)
                continue
            if "S" in option.flags:
                if sep:
                    raise _ArgumentError(f"{option.name} takes no value")
                values[option.name] = True
                continue
            if sep:
                value = inline
            else:
                value = next(stream, None)
                if value is None:
                    raise _ArgumentError(f"{option.name} needs a value")
            if "N" in option.flags:
                try:
                    value = int(value)
                except ValueError:
                    raise _ArgumentError(f"{option.name} must be a number") from None
            if "M" in option.flags:
                values.setdefault(option.name, []).append(value)
            else:
                values[option.name] = value
        return values


def _print_service(service: Service, out: TextIO) -> None:
    print(f"Found service: {service.name}", file=out)
    print(f"  Type: {service.service_type}", file=out)
    print(f"  Port: {service.port}", file=out)
    print(f"  Host: {service.hostname}", file=out)
    if service.txt:
        text = " ".join(f"{record.key}={record.value}" for record in service.txt)
        print(f"  TXT: {text}", file=out)
    print(file=out)


def _browse(client: Client, service_type: str, wait: float, out: TextIO) -> int:
    try:
        client.start_discovery(service_type, lambda service: _print_service(service, out))
    except BonAmiError:
        print("Error: Failed to start discovery", file=out)
        return RETURN_ERROR
    if wait > 0:
        time.sleep(wait)
    try:
        client.stop_discovery(service_type)
    except BonAmiError:
        print("Error: Failed to stop discovery", file=out)
        return RETURN_ERROR
    return RETURN_OK


def _handle_discover(client: Client, args: dict, out: TextIO) -> int:
    if not args.get("TYPE"):
        print("Error: TYPE argument is required", file=out)
        print_usage(COMMANDS[0], out)
        return RETURN_ERROR
    wait = args.get("TIMEOUT", DISCOVERY_WAIT)
    return _browse(client, args["TYPE"], wait, out)


def _parse_txt(entry: str):
    key, _, value = entry.partition("=")
    return create_txt_record(key, value)


def _handle_register(client: Client, args: dict, out: TextIO) -> int:
    if not args.get("NAME") or not args.get("TYPE") or "PORT" not in args:
        print("Error: NAME, TYPE, and PORT arguments are required", file=out)
        print_usage(COMMANDS[1], out)
        return RETURN_ERROR
    service = Service(
        name=args["NAME"],
        service_type=args["TYPE"],
        port=args["PORT"],
        txt=[_parse_txt(entry) for entry in args.get("TXT", [])],
    )
    try:
        client.register_service(service)
    except BonAmiError:
        print("Error: Failed to register service", file=out)
        return RETURN_ERROR
    print("Service registered successfully", file=out)
    return RETURN_OK


def _handle_unregister(client: Client, args: dict, out: TextIO) -> int:
    if not args.get("NAME") or not args.get("TYPE"):
        print("Error: NAME and TYPE arguments are required", file=out)
        print_usage(COMMANDS[2], out)
        return RETURN_ERROR
    try:
        client.unregister_service(args["NAME"], args["TYPE"])
    except BonAmiError:
        print("Error: Failed to unregister service", file=out)
        return RETURN_ERROR
    print("Service unregistered successfully", file=out)
    return RETURN_OK


def _handle_list(client: Client, args: dict, out: TextIO) -> int:
    if not args.get("TYPE"):
        print("Error: TYPE argument is required", file=out)
        print_usage(COMMANDS[3], out)
        return RETURN_ERROR
    return _browse(client, args["TYPE"], DISCOVERY_WAIT, out)


def _handle_resolve(client: Client, args: dict, out: TextIO) -> int:
    if not args.get("NAME") or not args.get("TYPE"):
        print("Error: NAME and TYPE arguments are required", file=out)
        print_usage(COMMANDS[4], out)
        return RETURN_ERROR
    return _browse(client, args["TYPE"], DISCOVERY_WAIT, out)


def _handle_monitor(client: Client, args: dict, out: TextIO) -> int:
    if not args.get("NAME") or not args.get("TYPE"):
        print("Error: NAME and TYPE arguments are required", file=out)
        print_usage(COMMANDS[5], out)
        return RETURN_ERROR
    interval = args.get("INTERVAL", DEFAULT_MONITOR_INTERVAL)
    notify = bool(args.get("NOTIFY", False))
    try:
        client.monitor_service(args["NAME"], args["TYPE"], interval, notify)
    except BonAmiError:
        print("Error: Failed to start monitoring", file=out)
        return RETURN_ERROR
    print(f"Monitoring service {args['NAME']} of type {args['TYPE']}", file=out)
    print("Press Ctrl-C to stop", file=out)
    try:
        while True:
            time.sleep(MONITOR_POLL)
    except KeyboardInterrupt:
        pass
    return RETURN_OK


def _handle_status(client: Client, args: dict, out: TextIO) -> int:
    try:
        status = client.get_status()
        interfaces = client.get_interfaces()
    except BonAmiError:
        print("Error: Failed to get daemon status", file=out)
        return RETURN_ERROR
    print("BonAmi mDNS Daemon Status\n", file=out)
    print("Library Version: 40.0", file=out)
    print("Status: Running\n", file=out)
    print(f"Services: {status.num_services}", file=out)
    print(f"Discoveries: {status.num_discoveries}", file=out)
    print(f"Monitors: {status.num_monitors}", file=out)
    print(f"Interfaces: {status.num_interfaces}", file=out)
    print("\nInterfaces:", file=out)
    for known in interfaces:
        try:
            interface = client.get_interface_status(known.name)
        except BonAmiError:
            continue
        state = "up" if interface.up else "down"
        print(f"  {interface.name}: {interface.addr} ({state})", file=out)
    return RETURN_OK


COMMANDS = (
    Command("discover", "TYPE/K,NAME/K,FILTER/K,TIMEOUT/N",
            "Discover services of a specific type", _handle_discover),
    Command("register", "NAME/K,TYPE/K,PORT/N,TXT/M",
            "Register a new service", _handle_register),
    Command("unregister", "NAME/K,TYPE/K",
            "Unregister a service", _handle_unregister),
    Command("list", "TYPE/K",
            "List all services of a specific type", _handle_list),
    Command("resolve", "NAME/K,TYPE/K",
            "Resolve a service to its address and port", _handle_resolve),
    Command("monitor", "NAME/K,TYPE/K,INTERVAL/N,NOTIFY/S",
            "Monitor a service for changes", _handle_monitor),
    Command("status", "", "Show daemon status", _handle_status),
)


def print_usage(command: Command, out: Optional[TextIO] = None) -> None:
    """Print the argument template of a command."""
    out = out if out is not None else sys.stdout
    print(f"Usage: bactl {command.template}", file=out)


def print_help(out: Optional[TextIO] = None) -> None:
    """Print the list of commands."""
    out = out if out is not None else sys.stdout
    print("BonAmi mDNS Control Utility (bactl)\n", file=out)
    print("Usage: bactl <command> [options]\n", file=out)
    print("Commands:", file=out)
    for command in COMMANDS:
        print(f"  {command.name:<10} {command.description}", file=out)
    print("\nUse 'bactl <command>' for more information about a command.", file=out)


def main(argv=None, client: Optional[Client] = None) -> int:
    """Run bactl; return the process exit status."""
    out = sys.stdout
    argv = list(sys.argv[1:] if argv is None else argv)
    owns_client = client is None
    if owns_client:
        try:
            client = open_library()
        except BonAmiError:
            print("Error: Failed to initialize command tool", file=out)
            return RETURN_ERROR
    try:
        if not argv:
            print_help(out)
            return RETURN_OK
        command = next((c for c in COMMANDS if c.name == argv[0]), None)
        if command is None:
            print(f"Error: Unknown command '{argv[0]}'", file=out)
            print_help(out)
            return RETURN_ERROR
        try:
            args = command.parse(argv[1:])
        except _ArgumentError:
            print("Error: Invalid arguments", file=out)
            return RETURN_ERROR
        return command.handler(client, args, out)
    finally:
        if owns_client:
            client.close()


if __name__ == "__main__":
    sys.exit(main())