import pytest

from bonami.dns import (
    FLAG_AA,
    FLAG_QR,
    MAX_PACKET_SIZE,
    DNSError,
    Header,
    Message,
    Question,
    Record,
    RecordClass,
    RecordType,
    build_message,
    build_question,
    build_record,
    labels_to_name,
    name_to_labels,
    parse_message,
    parse_question,
    parse_record,
    skip_name,
)
from bonami.errors import BonAmiError, ErrorCode


def _sample_message(**header_fields):
    question = build_question(Question("_http._tcp.local", RecordType.PTR, RecordClass.IN))
    answer = build_record(Record("host.local", RecordType.A, 120, bytes([192, 168, 1, 2])))
    header = Header(id=7, qdcount=1, ancount=1, **header_fields)
    return Message(header, question, answer)


def test_name_to_labels_wire_format():
    assert name_to_labels("_http._tcp.local") == b"\x05_http\x04_tcp\x05local\x00"


def test_name_round_trip():
    raw = name_to_labels("printer._ipp._tcp.local")
    assert labels_to_name(raw, 0) == ("printer._ipp._tcp.local", len(raw))


def test_trailing_dot_ignored():
    assert name_to_labels("host.local.") == name_to_labels("host.local")


def test_label_too_long():
    with pytest.raises(DNSError):
        name_to_labels("a" * 64 + ".local")


def test_empty_label_rejected():
    with pytest.raises(DNSError):
        name_to_labels("a..local")


def test_compression_pointer_followed():
    base = name_to_labels("local")
    data = base + b"\x04host\xc0\x00"
    assert labels_to_name(data, len(base)) == ("host.local", len(data))


def test_compression_loop_rejected():
    with pytest.raises(DNSError):
        labels_to_name(b"\xc0\x00", 0)


def test_pointer_out_of_range():
    with pytest.raises(DNSError):
        labels_to_name(b"\xc0\x10", 0)


def test_skip_name_plain_and_pointer():
    raw = name_to_labels("a.local")
    assert skip_name(raw, 0) == len(raw)
    assert skip_name(b"\xc0\x0c", 0) == 2


def test_skip_name_truncated():
    with pytest.raises(DNSError):
        skip_name(b"\x05loc", 0)


def test_header_to_bytes():
    assert Header(id=0x1234, qdcount=1).to_bytes() == (
        b"\x12\x34\x00\x00\x00\x01\x00\x00\x00\x00\x00\x00"
    )


def test_header_round_trip():
    header = Header(id=99, flags1=FLAG_QR, flags2=3, qdcount=1, ancount=2, nscount=0, arcount=4)
    assert Header.from_bytes(header.to_bytes()) == header


def test_header_too_short():
    with pytest.raises(DNSError):
        Header.from_bytes(b"\x00" * 11)


def test_question_round_trip():
    question = Question("_ftp._tcp.local", RecordType.SRV, RecordClass.ANY)
    raw = build_question(question)
    assert parse_question(raw, 0) == (question, len(raw))


def test_question_bad_type():
    raw = build_question(Question("host.local", 28, RecordClass.IN))
    with pytest.raises(DNSError):
        parse_question(raw, 0)


def test_question_truncated():
    raw = build_question(Question("host.local"))
    with pytest.raises(DNSError):
        parse_question(raw[:-1], 0)


def test_record_round_trip():
    record = Record("host.local", RecordType.A, 120, bytes([10, 0, 0, 1]))
    raw = build_record(record)
    parsed, end = parse_record(raw, 0)
    assert parsed == record
    assert end == len(raw)
    assert parsed.rdlength == 4


def test_record_a_wrong_length():
    raw = build_record(Record("host.local", RecordType.A, 120, b"\x01\x02\x03"))
    with pytest.raises(DNSError):
        parse_record(raw, 0)


def test_record_class_with_flush_bit_rejected():
    raw = build_record(Record("host.local", RecordType.A, 120, b"\x01\x02\x03\x04", 0x8001))
    with pytest.raises(DNSError):
        parse_record(raw, 0)


def test_record_ttl_too_large():
    raw = build_record(Record("host.local", RecordType.A, 0x80000000, b"\x01\x02\x03\x04"))
    with pytest.raises(DNSError):
        parse_record(raw, 0)


def test_record_truncated_rdata():
    raw = build_record(Record("host.local", RecordType.TXT, 120, b"\x03a=b"))
    with pytest.raises(DNSError):
        parse_record(raw[:-1], 0)


@pytest.mark.parametrize("size, ok", [(5, False), (6, True)])
def test_srv_minimum_length(size, ok):
    raw = build_record(Record("svc.local", RecordType.SRV, 120, b"\x00" * size))
    if ok:
        assert parse_record(raw, 0)[0].rdlength == size
    else:
        with pytest.raises(DNSError):
            parse_record(raw, 0)


def test_message_round_trip():
    message = _sample_message()
    assert parse_message(build_message(message)) == message


def test_response_message_parses():
    parsed = parse_message(build_message(_sample_message(flags1=FLAG_QR)))
    assert parsed.header.is_response
    assert parsed.header.rcode == 0


def test_reserved_flags_rejected():
    raw = build_message(_sample_message(flags1=FLAG_QR | FLAG_AA))
    with pytest.raises(DNSError):
        parse_message(raw)


def test_bad_rcode_rejected():
    raw = build_message(_sample_message(flags2=6))
    with pytest.raises(DNSError):
        parse_message(raw)


def test_too_many_questions():
    raw = Header(qdcount=33).to_bytes()
    with pytest.raises(DNSError):
        parse_message(raw)


def test_truncated_message():
    raw = build_message(_sample_message())
    with pytest.raises(DNSError):
        parse_message(raw[:-2])


def test_message_shorter_than_header():
    with pytest.raises(DNSError) as info:
        parse_message(b"\x00\x01")
    assert info.value.code is ErrorCode.BADPARAM
    assert isinstance(info.value, BonAmiError)


def test_oversized_message_rejected():
    message = Message(Header(), b"\x00" * MAX_PACKET_SIZE)
    with pytest.raises(DNSError):
        build_message(message)