"""Conversion of port bindings and exposed ports into port mapping records."""

from __future__ import annotations

import ipaddress
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

_DECIMAL = re.compile(r"[+-]?[0-9]+", re.ASCII)


class PortSpecError(ValueError):
    """Raised for malformed ports, port ranges, protocols or host addresses."""


@dataclass(frozen=True)
class PortMapping:
    """A published port: container port range start, host port and protocol."""

    container_port: int
    host_port: int = 0
    length: int = 1
    protocol: str = ""
    host_ip: str = ""


def parse_and_validate_port(port: str) -> int:
    """Parse a single port number in 1..65535."""
    if not _DECIMAL.fullmatch(port):
        raise PortSpecError(f"invalid port number: {port!r}")
    number = int(port)
    if number < 1 or number > 65535:
        raise PortSpecError(
            f"port numbers must be between 1 and 65535 (inclusive), got {number}"
        )
    return number


def parse_and_validate_range(port_range: str) -> tuple[int, int]:
    """Parse ``port`` or ``start-end``; return the start port and the range length."""
    parts = port_range.split("-")
    if len(parts) > 2:
        raise PortSpecError(
            "invalid port format - port ranges are formatted as startPort-stopPort"
        )
    if parts[0] == "":
        raise PortSpecError("port numbers cannot be negative")
    start = parse_and_validate_port(parts[0])
    if len(parts) == 1:
        return start, 1
    if parts[1] == "":
        raise PortSpecError("must provide ending number for port range")
    end = parse_and_validate_port(parts[1])
    if end <= start:
        raise PortSpecError(
            "the end port of a range must be higher than the start port - "
            f"{end} is not higher than {start}"
        )
    return start, end - start + 1


def _normalise_ip(text: str) -> str:
    try:
        if "%" in text:
            raise ValueError(text)
        address = ipaddress.ip_address(text)
    except ValueError:
        raise PortSpecError(f"cannot parse {text!r} as an IP address") from None
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return str(address.ipv4_mapped)
    return str(address)


def parse_split_port(
    host_ip: Optional[str],
    host_port: Optional[str],
    ctr_port: str,
    protocol: Optional[str],
) -> PortMapping:
    """Build one mapping from its host address, host port, container port and protocol."""
    if ctr_port == "":
        raise PortSpecError("must provide a non-empty container port to publish")
    try:
        ctr_start, ctr_len = parse_and_validate_range(ctr_port)
    except PortSpecError as exc:
        raise PortSpecError(f"error parsing container port: {exc}") from exc

    proto = ""
    if protocol is not None:
        if protocol == "":
            raise PortSpecError("must provide a non-empty protocol to publish")
        proto = protocol

    ip_text = ""
    if host_ip is not None and host_ip not in ("", "0.0.0.0"):
        ip_text = _normalise_ip(host_ip)

    host_start = 0
    if host_port:
        try:
            host_start, host_len = parse_and_validate_range(host_port)
        except PortSpecError as exc:
            raise PortSpecError(f"error parsing host port: {exc}") from exc
        if host_len != ctr_len:
            raise PortSpecError(
                "host and container port ranges have different lengths: "
                f"{host_len} vs {ctr_len}"
            )

    logger.debug(
        "Adding port mapping from %d to %d length %d protocol %r",
        host_start,
        ctr_start,
        ctr_len,
        proto,
    )
    return PortMapping(
        container_port=ctr_start,
        host_port=host_start,
        length=ctr_len,
        protocol=proto,
        host_ip=ip_text,
    )


def _binding(binding: Any) -> tuple[str, str]:
    if isinstance(binding, Mapping):
        return str(binding.get("host_ip") or ""), str(binding.get("host_port") or "")
    host_ip, host_port = binding
    return str(host_ip or ""), str(host_port or "")


def convert_port_map(port_map: Mapping[str, Iterable[Any]]) -> list[PortMapping]:
    """Turn ``{"port[/proto]": [(host_ip, host_port), ...]}`` into port mappings.

    Bindings may also be mappings with ``host_ip`` and ``host_port`` keys.
    """
    result = []
    for port, bindings in port_map.items():
        parts = port.split("/")
        if len(parts) > 2:
            raise PortSpecError("invalid port format - protocol can only be specified once")
        protocol = parts[1] if len(parts) == 2 else None
        for binding in bindings:
            host_ip, host_port = _binding(binding)
            result.append(parse_split_port(host_ip, host_port, parts[0], protocol))
    return result


def _split_proto_port(raw: str) -> tuple[str, str]:
    parts = raw.split("/")
    if not raw or not parts[0]:
        return "", ""
    if len(parts) == 1:
        return "tcp", raw
    if not parts[1]:
        return "tcp", parts[0]
    return parts[1], parts[0]


def convert_expose(port_set: Iterable[str]) -> dict[int, str]:
    """Map every exposed port number to its comma separated protocols."""
    result: dict[int, str] = {}
    for port_proto in port_set:
        proto, port = _split_proto_port(port_proto)
        start, length = parse_and_validate_range(port)
        for number in range(start, start + length):
            existing = result.get(number)
            if existing is None:
                result[number] = proto
            else:
                result[number] = ",".join(existing.split(",") + proto.split(","))
    return result