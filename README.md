# bonami

Building blocks for multicast DNS service discovery:

- `bonami.dns` reads and writes DNS wire format: headers, names, questions,
  resource records and whole messages.
- `bonami.service` holds the service data model, the rules for service
  types and names, and TXT-record filters.
- `bonami.client` is a client that sends requests to a daemon's message
  port, looked up by name in a `PortRegistry`.
- `bonami.cli` is the `bactl` command, which drives the client.
- `bonami.errors` holds `ErrorCode`, `Event` and the exception
  `BonAmiError`.

## What it does not do

The package contains no daemon. Nothing in it sends or receives multicast
packets, answers queries or keeps a table of services on the network. The
client hands each request to a `DaemonPort` handler that you register in the
same process, and the handler decides the reply.

For the same reason, `bactl` run from a shell finds no port named `BonAmi`.
It prints `Error: Failed to initialize command tool` and exits with status
10, even when it is given no arguments. To use it, call `bonami.cli.main`
with a `Client` of your own (see below).

## Installation

```
pip install .
```

There are no runtime dependencies. To run the tests:

```
pip install ".[test]"
pytest
```

## Errors

Every failure raises `bonami.errors.BonAmiError`. Its `code` attribute is an
`ErrorCode`, such as `BADPARAM`, `BADTYPE`, `NOT_RUNNING`, `VERSION` or
`RESOLVE`. Its `message` attribute defaults to the description of that code,
and `str(error)` gives `"<message> (<CODE NAME>)"`. Building a
`BonAmiError` from `ErrorCode.OK` raises `ValueError`.

`Event` names the kinds of discovery event: `ADDED`, `REMOVED` and
`UPDATED`.

## DNS wire format

```python
from bonami.dns import (
    Question, Record, RecordType, name_to_labels, labels_to_name,
    build_question, parse_question, build_record, parse_record, parse_message,
)

wire = name_to_labels("_http._tcp.local")       # b"\x05_http\x04_tcp\x05local\x00"
name, end = labels_to_name(wire)                # ("_http._tcp.local", len(wire))

q, end = parse_question(build_question(Question("_http._tcp.local")))
r, end = parse_record(build_record(Record("host.local", RecordType.A, 120, b"\x0a\x00\x00\x01")))
```

Name handling:

- `name_to_labels` drops one trailing dot.
- It rejects empty labels, labels longer than 63 bytes, and names longer than
  255 bytes on the wire.
- `labels_to_name` follows compression pointers, but stops on a pointer loop.
  The offset it returns is the end of the name where the name starts.
- `skip_name` returns the offset just past a name and does not follow
  pointers.

What the parsers accept:

- `parse_question` accepts the types A, PTR, TXT, SRV and ANY, and the
  classes IN and ANY.
- `parse_record` accepts the types A, PTR, TXT and SRV, and the class IN only.
- It also checks that a record's TTL fits in 31 bits.
- It checks the data length for each type:
  - an A record holds exactly 4 bytes;
  - PTR and TXT data is at most 255 bytes;
  - SRV data is at least 6 bytes.

Messages:

- `parse_message` returns a `Message`. It holds a `Header` and the raw bytes
  of the question, answer, authority and additional sections.
- It checks that the message is between 12 and 9000 bytes long.
- It allows at most 32 entries per section.
- The reserved flag bits must be zero, and the response code must be at most
  5.
- `build_message` joins a header and its sections back together.
- `Header.from_bytes` and `Header.to_bytes` convert the twelve-byte header.

Malformed input raises `DNSError`, a `BonAmiError` with code `BADPARAM`.

## Services

```python
from bonami.service import (
    Service, Filter, create_txt_record, match_filter,
    validate_service_type, validate_service_name,
)

validate_service_type("_http._tcp.local")   # starts with "_", ends in ".local"
validate_service_name("my-printer")         # ASCII letters, digits, "-", "_", "."; 1 to 63 characters

svc = Service("printer", "_ipp._tcp.local", port=631,
              txt=[create_txt_record("model", "LaserJet 4")])
svc.txt_value("model")                                         # "LaserJet 4"
match_filter(svc, Filter("model", "Laser", wildcard=True))     # True (substring)
match_filter(svc, Filter("model", "Laser"))                    # False (exact match)
```

How these functions behave:

- Each validator returns its argument when it is valid. Otherwise it raises
  `BonAmiError`, with `BADTYPE` for a bad type or `BADNAME` for a bad name.
- `create_txt_record` cuts the key and the value to 255 characters each.
- `match_filter` passes every service when there is no filter, or when the
  filter's key is empty. Otherwise the first TXT record with the filter's key
  decides the match.

The module also defines the dataclasses `ServiceInfo`, `Config`, `Interface`,
`Status` and `Monitor`.

## Client

```python
from bonami.client import Client, DaemonPort, MessageType, PortRegistry
from bonami.errors import ErrorCode
from bonami.service import Service, Status

def handler(request):
    if request.type is MessageType.GET_STATUS:
        return Status(num_services=1)
    if request.type is MessageType.REGISTER:
        return ErrorCode.OK
    return ErrorCode.NOTFOUND

registry = PortRegistry()
registry.add("BonAmi", DaemonPort(handler))

with Client(registry) as client:
    client.register_service(Service("web", "_http._tcp.local", port=8080))
    print(client.get_status().num_services)
```

Each call builds one `Request`. A request carries a `type`, a `name`, a
`service_type` and a `payload`, and goes to the port named `BonAmi`. If the
handler returns an `ErrorCode` other than `OK`, or raises `BonAmiError`, the
call fails. If a reply has the wrong type, the call raises `BADRESPONSE`.

The requests each method sends, and the replies it expects:

| Method | Request | Expected reply |
| --- | --- | --- |
| `register_service(service)` | `REGISTER`, payload the `Service` | `OK` / `None` |
| `unregister_service(name, type)` | `UNREGISTER` | `OK` / `None` |
| `start_discovery(type, callback)` | `DISCOVER`, payload the callback | `OK` / `None` |
| `stop_discovery(type)` | `STOP` | `OK` / `None` |
| `monitor_service(name, type, interval=30, notify=False)` | `MONITOR`, payload a `Monitor` | `OK` / `None`; returns the `Monitor` with `running=True` |
| `get_interface_status(name)` | `GET_INTERFACE` | `Interface` |
| `get_status()` | `GET_STATUS` | `Status` |
| `get_services(type, limit=32)` | `GET_SERVICES` | iterable of `Service`, cut to `limit` |
| `set_config(config)` | `CONFIG`, payload a copy | `OK` / `None`; the copy is then kept |
| `get_config()` | none | returns a copy of the kept `Config` |
| `get_service_info(name, type)` | `RESOLVE` | `Service`; its `hostname` is then resolved with `socket.gethostbyname` into `addr` |
| `get_interfaces()` | `GET_INTERFACES` | iterable of `Interface` |
| `set_preferred_interface(name)` | `SET_INTERFACE` | `OK` / `None` |
| `update_service(name, type, txt)` | `UPDATE`, payload the list of `TXTRecord` | `OK` / `None` |
| `register_update_callback(name, type, callback)` | `REGISTER_CALLBACK` | `OK` / `None` |
| `unregister_update_callback(name, type)` | `UNREGISTER_CALLBACK` | `OK` / `None` |
| `enumerate_service_types()` | `ENUMERATE` | iterable of `str` |

A reply of `None` to a list request gives an empty list. The client calls no
discovery or monitor callbacks itself; it only passes them on to the handler.

Errors raised by the client:

- If no `BonAmi` port is registered, `Client(...)` raises `NOT_RUNNING`.
- After `close()`, or leaving the `with` block, calls raise `NOTREADY`.
- If the host name of a resolved service cannot be resolved,
  `get_service_info` raises `RESOLVE`.

`Client()` without a registry uses the shared `bonami.client.default_registry`.
`open_library(version=40, registry=None, debug=False, mem_track=False)` raises
`VERSION` for any version above 40 and otherwise returns a `Client`. With
`debug=True`, requests are logged at debug level on the `bonami.client`
logger.

## The bactl command

`bonami.cli.main(argv=None, client=None)` runs `bactl` and returns its exit
status: 0 on success, 10 on error. When you pass a `client`, `main` uses it
and leaves it open.

```python
from bonami import cli

cli.main(["register", "NAME", "web", "TYPE", "_http._tcp.local", "PORT", "8080",
          "path=/", "version=1"], client=client)
```

Arguments are keywords followed by their values, either `NAME web` or
`NAME=web`. In `register`, any word that is not a keyword is taken as a TXT
entry of the form `key=value`.

| Command | Arguments | What it does |
| --- | --- | --- |
| `discover` | `TYPE`, `NAME`, `FILTER`, `TIMEOUT` (seconds) | starts discovery, waits, stops it |
| `register` | `NAME`, `TYPE`, `PORT`, TXT entries | registers a service |
| `unregister` | `NAME`, `TYPE` | unregisters a service |
| `list` | `TYPE` | starts discovery, waits one second, stops it |
| `resolve` | `NAME`, `TYPE` | starts discovery of `TYPE`, waits one second, stops it |
| `monitor` | `NAME`, `TYPE`, `INTERVAL`, `NOTIFY` | starts monitoring and waits until Ctrl-C |
| `status` | none | prints daemon counters and each interface's address and state |

`discover` accepts `NAME` and `FILTER` but does not use them. Services that
the handler passes to a discovery callback are printed. With no arguments,
`main` prints the list of commands.

`print_help(out)` and `print_usage(command, out)` write the help text and a
command's argument template. By default they write to standard output.