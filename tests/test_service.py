from ipaddress import IPv4Address

import pytest

from bonami.errors import BonAmiError, ErrorCode
from bonami.service import (
    MAX_TXT_LEN,
    Config,
    Filter,
    Interface,
    Monitor,
    Service,
    Status,
    TXTRecord,
    create_txt_record,
    match_filter,
    validate_service_name,
    validate_service_type,
)


def _service(*pairs):
    return Service(
        "printer",
        "_ipp._tcp.local",
        631,
        txt=[TXTRecord(k, v) for k, v in pairs],
    )


def test_create_txt_record_keeps_values():
    record = create_txt_record("path", "/index.html")
    assert record == TXTRecord("path", "/index.html")


def test_create_txt_record_truncates_to_limit():
    record = create_txt_record("k" * 400, "v" * 400)
    assert len(record.key) == MAX_TXT_LEN - 1
    assert len(record.value) == MAX_TXT_LEN - 1


@pytest.mark.parametrize("key,value", [(None, "x"), ("x", None)])
def test_create_txt_record_rejects_missing(key, value):
    with pytest.raises(BonAmiError) as info:
        create_txt_record(key, value)
    assert info.value.code is ErrorCode.BADPARAM


def test_validate_service_type_accepts_documented_example():
    assert validate_service_type("_http._tcp.local") == "_http._tcp.local"


@pytest.mark.parametrize(
    "bad",
    ["", "http._tcp.local", "_http._tcp", "_http._tcp.localx", "_x.local.local", None],
)
def test_validate_service_type_rejects(bad):
    with pytest.raises(BonAmiError) as info:
        validate_service_type(bad)
    assert info.value.code is ErrorCode.BADTYPE


def test_validate_service_name_accepts_allowed_characters():
    assert validate_service_name("My-Printer_1.home") == "My-Printer_1.home"


def test_validate_service_name_length_limit():
    assert validate_service_name("a" * 63) == "a" * 63
    with pytest.raises(BonAmiError) as info:
        validate_service_name("a" * 64)
    assert info.value.code is ErrorCode.BADNAME


@pytest.mark.parametrize("bad", ["", "with space", "caf\u00e9", "a/b", None])
def test_validate_service_name_rejects(bad):
    with pytest.raises(BonAmiError) as info:
        validate_service_name(bad)
    assert info.value.code is ErrorCode.BADNAME


def test_match_filter_without_key_matches_everything():
    assert match_filter(_service(), Filter()) is True
    assert match_filter(_service(), None) is True


def test_match_filter_exact_value():
    service = _service(("color", "yes"))
    assert match_filter(service, Filter("color", "yes")) is True
    assert match_filter(service, Filter("color", "ye")) is False


def test_match_filter_wildcard_is_substring():
    service = _service(("model", "LaserJet 4000"))
    assert match_filter(service, Filter("model", "Jet", wildcard=True)) is True
    assert match_filter(service, Filter("model", "Ink", wildcard=True)) is False


def test_match_filter_missing_key_fails():
    assert match_filter(_service(("a", "1")), Filter("b", "1")) is False


def test_match_filter_first_record_with_key_decides():
    service = _service(("a", "1"), ("a", "2"))
    assert match_filter(service, Filter("a", "2")) is False
    assert match_filter(service, Filter("a", "1")) is True


def test_txt_value_returns_first_match_or_none():
    service = _service(("a", "1"), ("b", "2"), ("a", "3"))
    assert service.txt_value("a") == "1"
    assert service.txt_value("b") == "2"
    assert service.txt_value("c") is None


def test_service_txt_lists_are_independent():
    first = Service("one", "_http._tcp.local")
    second = Service("two", "_http._tcp.local")
    first.txt.append(TXTRecord("k", "v"))
    assert second.txt == []
    assert first.addr == IPv4Address("0.0.0.0")


def test_config_defaults_are_cleared():
    config = Config()
    assert (config.discovery_timeout, config.resolve_timeout, config.ttl) == (0, 0, 0)
    assert config.auto_reconnect is False


def test_interface_and_status_defaults():
    iface = Interface("eth0")
    assert iface.up is False and iface.preferred is False
    assert iface.netmask == IPv4Address(0)
    status = Status(num_services=2)
    assert (status.num_services, status.num_monitors) == (2, 0)


def test_monitor_defaults_follow_command_default_interval():
    monitor = Monitor("printer", "_ipp._tcp.local")
    assert monitor.check_interval == 30
    assert monitor.running is False
    assert monitor.callback is None