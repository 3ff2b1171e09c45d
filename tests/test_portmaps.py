import pytest

from clabcore.portmaps import (
    PortMapping,
    PortSpecError,
    convert_expose,
    convert_port_map,
    parse_and_validate_port,
    parse_and_validate_range,
    parse_split_port,
)


@pytest.mark.parametrize("port", ["1", "80", "8080", "65535"])
def test_parse_port_valid(port):
    assert parse_and_validate_port(port) == int(port)


@pytest.mark.parametrize("port", ["0", "65536", "abc", "", " 80", "1_0", "8.0"])
def test_parse_port_invalid(port):
    with pytest.raises(PortSpecError):
        parse_and_validate_port(port)


def test_parse_port_out_of_range_message():
    with pytest.raises(PortSpecError, match="between 1 and 65535"):
        parse_and_validate_port("70000")


def test_parse_range_single_port():
    assert parse_and_validate_range("8080") == (8080, 1)


def test_parse_range_two_ports():
    # 8080-8081 covers two ports
    assert parse_and_validate_range("8080-8081") == (8080, 2)


@pytest.mark.parametrize("start, end", [(1, 2), (100, 200), (60000, 65535)])
def test_parse_range_covers_both_ends(start, end):
    first, length = parse_and_validate_range(f"{start}-{end}")
    assert first == start
    assert first + length - 1 == end


@pytest.mark.parametrize(
    "text, message",
    [
        ("1-2-3", "startPort-stopPort"),
        ("-5", "cannot be negative"),
        ("10-", "ending number"),
        ("10-10", "must be higher"),
        ("10-9", "must be higher"),
    ],
)
def test_parse_range_invalid(text, message):
    with pytest.raises(PortSpecError, match=message):
        parse_and_validate_range(text)


def test_split_port_requires_container_port():
    with pytest.raises(PortSpecError, match="non-empty container port"):
        parse_split_port(None, None, "", None)


def test_split_port_requires_protocol_when_given():
    with pytest.raises(PortSpecError, match="non-empty protocol"):
        parse_split_port(None, None, "80", "")


def test_split_port_wraps_container_error():
    with pytest.raises(PortSpecError, match="error parsing container port"):
        parse_split_port(None, None, "0", None)


def test_split_port_rejects_bad_ip():
    with pytest.raises(PortSpecError, match="as an IP address"):
        parse_split_port("not-an-ip", "8080", "80", None)


@pytest.mark.parametrize("host_ip", ["", "0.0.0.0", None])
def test_split_port_wildcard_ip_is_empty(host_ip):
    assert parse_split_port(host_ip, "8080", "80", "tcp").host_ip == ""


def test_split_port_keeps_ip():
    assert parse_split_port("127.0.0.1", "8080", "80", None).host_ip == "127.0.0.1"


def test_split_port_mapped_ipv6_becomes_ipv4():
    assert parse_split_port("::ffff:10.0.0.1", "8080", "80", None).host_ip == "10.0.0.1"


def test_split_port_empty_host_port_is_zero():
    mapping = parse_split_port("", "", "80", "udp")
    assert mapping == PortMapping(container_port=80, host_port=0, length=1, protocol="udp")


def test_split_port_ranges():
    mapping = parse_split_port("", "9000-9001", "80-81", "tcp")
    assert mapping == PortMapping(container_port=80, host_port=9000, length=2, protocol="tcp")


def test_split_port_range_length_mismatch():
    with pytest.raises(PortSpecError, match="different lengths"):
        parse_split_port("", "9000-9002", "80-81", "tcp")


def test_split_port_bad_host_port():
    with pytest.raises(PortSpecError, match="error parsing host port"):
        parse_split_port("", "abc", "80", "tcp")


def test_convert_port_map_single():
    result = convert_port_map({"80/tcp": [("", "8080")]})
    assert result == [PortMapping(container_port=80, host_port=8080, length=1, protocol="tcp")]


def test_convert_port_map_without_protocol():
    result = convert_port_map({"80": [{"host_ip": "", "host_port": "8080"}]})
    assert result[0].protocol == ""
    assert result[0].host_port == 8080


def test_convert_port_map_multiple_bindings():
    result = convert_port_map({"22/tcp": [("", "2222"), ("127.0.0.1", "2223")]})
    assert [m.host_port for m in result] == [2222, 2223]
    assert {m.container_port for m in result} == {22}


def test_convert_port_map_double_protocol():
    with pytest.raises(PortSpecError, match="only be specified once"):
        convert_port_map({"80/tcp/udp": [("", "8080")]})


def test_convert_port_map_empty():
    assert convert_port_map({}) == []


def test_convert_expose_defaults_to_tcp():
    assert convert_expose(["53"]) == {53: "tcp"}


def test_convert_expose_merges_protocols():
    assert convert_expose(["80/tcp", "80/udp"]) == {80: "tcp,udp"}


def test_convert_expose_range():
    result = convert_expose(["8000-8002/udp"])
    assert sorted(result) == [8000, 8001, 8002]
    assert set(result.values()) == {"udp"}


def test_convert_expose_empty_port():
    with pytest.raises(PortSpecError):
        convert_expose([""])