"""Core lab data types: nodes, links, management network and filters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

# Environment variable holding the number of interfaces expected in a container.
CLAB_ENV_INTFS = "CLAB_INTFS"


@dataclass
class MgmtNet:
    """Management network options, backed by a container network."""

    network: str = ""
    bridge: str = ""
    ipv4_subnet: str = ""
    ipv4_gw: str = ""
    ipv6_subnet: str = ""
    ipv6_gw: str = ""
    mtu: str = ""


@dataclass
class ConfigDispatcher:
    """Variables for the configuration step run after nodes start."""

    vars: dict[str, Any] = field(default_factory=dict)


@dataclass
class Extras:
    """Extra node parameters that are not part of the generic node config."""

    srl_agents: list[str] = field(default_factory=list)
    mysocket_proxy: str = ""


@dataclass
class Endpoint:
    """One end of a link: a node and the interface on it."""

    node: NodeConfig
    endpoint_name: str = ""
    mac: str = ""


@dataclass
class Link:
    """A link between two container endpoints."""

    a: Endpoint
    b: Endpoint
    mtu: int = 0
    labels: dict[str, str] = field(default_factory=dict)
    vars: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return (
            f"link [{self.a.node.short_name}:{self.a.endpoint_name}, "
            f"{self.b.node.short_name}:{self.b.endpoint_name}]"
        )


@dataclass
class NodeConfig:
    """Everything known about one lab node and its container."""

    short_name: str = ""
    long_name: str = ""
    fqdn: str = ""
    lab_dir: str = ""
    index: int = 0
    group: str = ""
    kind: str = ""
    startup_config: str = ""
    startup_delay: int = 0
    enforce_startup_config: bool = False
    res_startup_config: str = ""
    config: Optional[ConfigDispatcher] = None
    res_config: str = ""
    node_type: str = ""
    position: str = ""
    license: str = ""
    image: str = ""
    sysctls: dict[str, str] = field(default_factory=dict)
    user: str = ""
    entrypoint: str = ""
    cmd: str = ""
    exec: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    binds: list[str] = field(default_factory=list)
    port_bindings: dict[str, list[Any]] = field(default_factory=dict)
    port_set: set[str] = field(default_factory=set)
    network_mode: str = ""
    mgmt_net: str = ""
    mgmt_ipv4_address: str = ""
    mgmt_ipv4_prefix_length: int = 0
    mgmt_ipv6_address: str = ""
    mgmt_ipv6_prefix_length: int = 0
    mac_address: str = ""
    container_id: str = ""
    tls_cert: str = ""
    tls_key: str = ""
    tls_anchor: str = ""
    ns_path: str = ""
    publish: list[str] = field(default_factory=list)
    extra_hosts: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    endpoints: list[Endpoint] = field(default_factory=list)
    sandbox: str = ""
    kernel: str = ""
    runtime: str = ""
    cpu: float = 0.0
    cpu_set: str = ""
    memory: str = ""
    deployment_status: str = ""
    extras: Optional[Extras] = None


@dataclass
class GenericMgmtIPs:
    """Management addresses of a container, runtime independent."""

    ipv4_addr: str = ""
    ipv4_plen: int = 0
    ipv6_addr: str = ""
    ipv6_plen: int = 0


@dataclass
class GenericContainer:
    """Runtime independent description of a container."""

    names: list[str] = field(default_factory=list)
    id: str = ""
    short_id: str = ""
    image: str = ""
    state: str = ""
    status: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    pid: int = 0
    network_settings: GenericMgmtIPs = field(default_factory=GenericMgmtIPs)


@dataclass
class GenericFilter:
    """A container filter; ``operator`` is ``=``, ``!=`` or ``exists``."""

    filter_type: str = ""
    field: str = ""
    operator: str = ""
    match: str = ""


def filters_from_label_strings(labels: list[str]) -> list[GenericFilter]:
    """Build label filters from ``name=value`` or bare ``name`` strings."""
    result = []
    for label in labels:
        if "=" in label:
            parts = label.split("=")
            result.append(
                GenericFilter(
                    filter_type="label",
                    field=parts[0].strip(),
                    operator="=",
                    match=parts[1].strip(),
                )
            )
        else:
            result.append(
                GenericFilter(filter_type="label", field=label.strip(), operator="exists")
            )
    return result