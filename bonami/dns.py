"""DNS wire format: headers, names, questions, resource records and messages."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from .errors import BonAmiError, ErrorCode

HEADER_SIZE = 12
MAX_PACKET_SIZE = 9000
MAX_QUESTIONS = 32
MAX_ANSWERS = 32
MAX_AUTHORITY = 32
MAX_ADDITIONAL = 32
MAX_NAME_LEN = 256
MAX_WIRE_NAME_LEN = 255
MAX_LABEL_LEN = 63
MAX_TTL = 0x7FFFFFFF
MAX_RCODE = 5

FLAG_QR = 0x80
FLAG_AA = 0x04
FLAG_TC = 0x02
FLAG_RD = 0x01
FLAG_RA = 0x80
FLAG_Z = 0x40
FLAG_AD = 0x20
FLAG_CD = 0x10
FLAG_RCODE = 0x0F

_RESERVED_FLAGS1 = 0x3F

_HEADER = struct.Struct("!HBBHHHH")
_QUESTION_TAIL = struct.Struct("!HH")
_RECORD_TAIL = struct.Struct("!HHIH")


class RecordType(IntEnum):
    A = 1
    PTR = 12
    TXT = 16
    SRV = 33
    ANY = 255


class RecordClass(IntEnum):
    IN = 1
    ANY = 255


_QUESTION_TYPES = frozenset(RecordType)
_RECORD_TYPES = frozenset({RecordType.A, RecordType.PTR, RecordType.TXT, RecordType.SRV})
_QUESTION_CLASSES = frozenset(RecordClass)


class DNSError(BonAmiError):
    """Raised for malformed or unsupported DNS data."""


def _error(message: str) -> DNSError:
    return DNSError(ErrorCode.BADPARAM, message)


@dataclass
class Header:
    """Fixed twelve-byte DNS message header."""

    id: int = 0
    flags1: int = 0
    flags2: int = 0
    qdcount: int = 0
    ancount: int = 0
    nscount: int = 0
    arcount: int = 0

    @classmethod
    def from_bytes(cls, data) -> "Header":
        if len(data) < HEADER_SIZE:
            raise _error("data too short for a DNS header")
        return cls(*_HEADER.unpack_from(bytes(data[:HEADER_SIZE])))

    def to_bytes(self) -> bytes:
        try:
            return _HEADER.pack(
                self.id, self.flags1, self.flags2,
                self.qdcount, self.ancount, self.nscount, self.arcount,
            )
        except struct.error as exc:
            raise _error(f"header field out of range: {exc}") from exc

    @property
    def is_response(self) -> bool:
        return bool(self.flags1 & FLAG_QR)

    @property
    def rcode(self) -> int:
        return self.flags2 & FLAG_RCODE


@dataclass
class Message:
    """A DNS message: header plus the raw bytes of each section."""

    header: Header = field(default_factory=Header)
    questions: bytes = b""
    answers: bytes = b""
    authority: bytes = b""
    additional: bytes = b""


@dataclass
class Question:
    name: str
    qtype: int = RecordType.PTR
    qclass: int = RecordClass.IN


@dataclass
class Record:
    name: str
    rtype: int
    ttl: int
    rdata: bytes = b""
    rclass: int = RecordClass.IN

    @property
    def rdlength(self) -> int:
        return len(self.rdata)


def name_to_labels(name: str) -> bytes:
    """Encode a dotted domain name as length-prefixed labels."""
    if name.endswith("."):
        name = name[:-1]
    if not name:
        return b"\x00"
    out = bytearray()
    for label in name.split("."):
        raw = label.encode("utf-8")
        if not raw:
            raise _error(f"empty label in {name!r}")
        if len(raw) > MAX_LABEL_LEN:
            raise _error(f"label too long in {name!r}")
        out.append(len(raw))
        out += raw
    out.append(0)
    if len(out) > MAX_WIRE_NAME_LEN:
        raise _error(f"name too long: {name!r}")
    return bytes(out)


def labels_to_name(data, offset=0):
    """Decode a name starting at offset; return (name, offset after it).

    Compression pointers are followed; the returned offset is where the
    name ends at its starting position, not at any pointer target.
    """
    data = bytes(data)
    size = len(data)
    labels: list[str] = []
    length_used = 0
    pos = offset
    end = None
    visited: set[int] = set()
    while True:
        if pos >= size:
            raise _error("name runs past end of data")
        length = data[pos]
        if length == 0:
            if end is None:
                end = pos + 1
            break
        if length & 0xC0:
            if pos + 1 >= size:
                raise _error("truncated compression pointer")
            target = ((length & 0x3F) << 8) | data[pos + 1]
            if target >= size:
                raise _error("compression pointer out of range")
            if target in visited:
                raise _error("compression pointer loop")
            visited.add(target)
            if end is None:
                end = pos + 2
            pos = target
            continue
        if length_used + length + 1 > MAX_NAME_LEN:
            raise _error("name too long")
        raw = data[pos + 1:pos + 1 + length]
        if len(raw) < length:
            raise _error("label runs past end of data")
        try:
            labels.append(raw.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise _error("label is not valid UTF-8") from exc
        length_used += length + 1
        pos += length + 1
    return ".".join(labels), end


def skip_name(data, offset=0) -> int:
    """Return the offset just past the name that starts at offset."""
    size = len(data)
    pos = offset
    while True:
        if pos >= size:
            raise _error("name runs past end of data")
        length = data[pos]
        if length == 0:
            return pos + 1
        if length & 0xC0:
            if pos + 1 >= size:
                raise _error("truncated compression pointer")
            return pos + 2
        if pos + length + 1 >= size:
            raise _error("label runs past end of data")
        pos += length + 1


def parse_question(data, offset=0):
    """Parse a question at offset; return (Question, offset after it)."""
    data = bytes(data)
    name, pos = labels_to_name(data, offset)
    if len(data) - pos < _QUESTION_TAIL.size:
        raise _error("question truncated")
    qtype, qclass = _QUESTION_TAIL.unpack_from(data, pos)
    if qtype not in _QUESTION_TYPES:
        raise _error(f"unsupported question type {qtype}")
    if qclass not in _QUESTION_CLASSES:
        raise _error(f"unsupported question class {qclass}")
    question = Question(name, RecordType(qtype), RecordClass(qclass))
    return question, pos + _QUESTION_TAIL.size


def parse_record(data, offset=0):
    """Parse a resource record at offset; return (Record, offset after it)."""
    data = bytes(data)
    name, pos = labels_to_name(data, offset)
    if len(data) - pos < _RECORD_TAIL.size:
        raise _error("record truncated")
    rtype, rclass, ttl, rdlength = _RECORD_TAIL.unpack_from(data, pos)
    if rtype not in _RECORD_TYPES:
        raise _error(f"unsupported record type {rtype}")
    if rclass != RecordClass.IN:
        raise _error(f"unsupported record class {rclass}")
    if ttl > MAX_TTL:
        raise _error(f"TTL out of range: {ttl}")
    start = pos + _RECORD_TAIL.size
    if len(data) - start < rdlength:
        raise _error("record data truncated")
    rtype = RecordType(rtype)
    if rtype is RecordType.A and rdlength != 4:
        raise _error("A record must hold 4 bytes")
    if rtype in (RecordType.PTR, RecordType.TXT) and rdlength > 255:
        raise _error(f"{rtype.name} record data too long")
    if rtype is RecordType.SRV and rdlength < 6:
        raise _error("SRV record data too short")
    record = Record(name, rtype, ttl, data[start:start + rdlength], RecordClass.IN)
    return record, start + rdlength


def build_question(question: Question) -> bytes:
    """Encode a question in wire format."""
    try:
        tail = _QUESTION_TAIL.pack(question.qtype, question.qclass)
    except struct.error as exc:
        raise _error(f"question field out of range: {exc}") from exc
    return name_to_labels(question.name) + tail


def build_record(record: Record) -> bytes:
    """Encode a resource record in wire format."""
    rdata = bytes(record.rdata)
    try:
        tail = _RECORD_TAIL.pack(record.rtype, record.rclass, record.ttl, len(rdata))
    except struct.error as exc:
        raise _error(f"record field out of range: {exc}") from exc
    return name_to_labels(record.name) + tail + rdata


def build_message(message: Message) -> bytes:
    """Encode a message: header followed by its sections."""
    raw = b"".join((
        message.header.to_bytes(),
        bytes(message.questions),
        bytes(message.answers),
        bytes(message.authority),
        bytes(message.additional),
    ))
    if len(raw) > MAX_PACKET_SIZE:
        raise _error("message exceeds maximum packet size")
    return raw


def _skip_records(data: bytes, pos: int, count: int):
    start = pos
    for _ in range(count):
        pos = skip_name(data, pos)
        if len(data) - pos < _RECORD_TAIL.size:
            raise _error("record truncated")
        rdlength = int.from_bytes(data[pos + 8:pos + 10], "big")
        if len(data) - pos < _RECORD_TAIL.size + rdlength:
            raise _error("record data truncated")
        pos += _RECORD_TAIL.size + rdlength
    return data[start:pos], pos


def parse_message(data) -> Message:
    """Validate a DNS message and split it into header and sections."""
    data = bytes(data)
    if len(data) < HEADER_SIZE:
        raise _error("message shorter than header")
    if len(data) > MAX_PACKET_SIZE:
        raise _error("message exceeds maximum packet size")
    header = Header.from_bytes(data)
    if (header.qdcount > MAX_QUESTIONS or header.ancount > MAX_ANSWERS
            or header.nscount > MAX_AUTHORITY or header.arcount > MAX_ADDITIONAL):
        raise _error("too many entries in message")
    if header.flags1 & _RESERVED_FLAGS1:
        raise _error("unsupported header flags")
    if header.flags2 & FLAG_RCODE > MAX_RCODE:
        raise _error("invalid response code")

    pos = HEADER_SIZE
    start = pos
    for _ in range(header.qdcount):
        pos = skip_name(data, pos)
        if len(data) - pos < _QUESTION_TAIL.size:
            raise _error("question truncated")
        pos += _QUESTION_TAIL.size
    questions = data[start:pos]
    answers, pos = _skip_records(data, pos, header.ancount)
    authority, pos = _skip_records(data, pos, header.nscount)
    additional, pos = _skip_records(data, pos, header.arcount)
    return Message(header, questions, answers, authority, additional)