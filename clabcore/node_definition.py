"""Node definitions as written in the defaults, kinds and nodes sections."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from clabcore.types import ConfigDispatcher, Extras

_IMPORT_ENVS_KEY = "__IMPORT_ENVS"


def _text(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(f"{key}: expected a scalar, got {type(value).__name__}")


def _text_list(key: str, value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{key}: expected a list, got {type(value).__name__}")
    return [_text(key, item) for item in value]


def _text_map(key: str, value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"{key}: expected a mapping, got {type(value).__name__}")
    return {_text(key, k): _text(key, v) for k, v in value.items()}


def _unsigned(key: str, value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key}: expected an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{key}: must not be negative, got {value}")
    return value


def _number(key: str, value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key}: expected a number, got {type(value).__name__}")
    return float(value)


def _flag(key: str, value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"{key}: expected a boolean, got {type(value).__name__}")
    return value


def _config(value: Any) -> Optional[ConfigDispatcher]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise TypeError(f"config: expected a mapping, got {type(value).__name__}")
    variables = value.get("vars")
    if variables is None:
        return ConfigDispatcher()
    if not isinstance(variables, Mapping):
        raise TypeError(f"config.vars: expected a mapping, got {type(variables).__name__}")
    return ConfigDispatcher(vars=dict(variables))


def _extras(value: Any) -> Optional[Extras]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise TypeError(f"extras: expected a mapping, got {type(value).__name__}")
    return Extras(
        srl_agents=_text_list("srl-agents", value.get("srl-agents")),
        mysocket_proxy=_text("mysocket-proxy", value.get("mysocket-proxy")),
    )


@dataclass
class NodeDefinition:
    """Settings a node, a kind or the defaults section may carry."""

    kind: str = ""
    group: str = ""
    type: str = ""
    startup_config: str = ""
    startup_delay: int = 0
    enforce_startup_config: bool = False
    config: Optional[ConfigDispatcher] = None
    image: str = ""
    license: str = ""
    position: str = ""
    entrypoint: str = ""
    cmd: str = ""
    exec: list[str] = field(default_factory=list)
    binds: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)
    mgmt_ipv4: str = ""
    mgmt_ipv6: str = ""
    publish: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    user: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    network_mode: str = ""
    sandbox: str = ""
    kernel: str = ""
    runtime: str = ""
    cpu: float = 0.0
    cpu_set: str = ""
    memory: str = ""
    extras: Optional[Extras] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> NodeDefinition:
        """Build a definition from a parsed YAML mapping; unknown keys are ignored."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise TypeError(f"node definition: expected a mapping, got {type(data).__name__}")
        return cls(
            kind=_text("kind", data.get("kind")),
            group=_text("group", data.get("group")),
            type=_text("type", data.get("type")),
            startup_config=_text("startup-config", data.get("startup-config")),
            startup_delay=_unsigned("startup-delay", data.get("startup-delay")),
            enforce_startup_config=_flag(
                "enforce-startup-config", data.get("enforce-startup-config")
            ),
            config=_config(data.get("config")),
            image=_text("image", data.get("image")),
            license=_text("license", data.get("license")),
            position=_text("position", data.get("position")),
            entrypoint=_text("entrypoint", data.get("entrypoint")),
            cmd=_text("cmd", data.get("cmd")),
            exec=_text_list("exec", data.get("exec")),
            binds=_text_list("binds", data.get("binds")),
            ports=_text_list("ports", data.get("ports")),
            mgmt_ipv4=_text("mgmt_ipv4", data.get("mgmt_ipv4")),
            mgmt_ipv6=_text("mgmt_ipv6", data.get("mgmt_ipv6")),
            publish=_text_list("publish", data.get("publish")),
            env=_text_map("env", data.get("env")),
            user=_text("user", data.get("user")),
            labels=_text_map("labels", data.get("labels")),
            network_mode=_text("network-mode", data.get("network-mode")),
            sandbox=_text("sandbox", data.get("sandbox")),
            kernel=_text("kernel", data.get("kernel")),
            runtime=_text("runtime", data.get("runtime")),
            cpu=_number("cpu", data.get("cpu")),
            cpu_set=_text("cpu-set", data.get("cpu-set")),
            memory=_text("memory", data.get("memory")),
            extras=_extras(data.get("extras")),
        )

    def import_envs(self) -> None:
        """Copy the process environment into ``env`` when ``__IMPORT_ENVS`` is ``true``.

        Variables already set in ``env`` are kept.
        """
        if not self.env or self.env.get(_IMPORT_ENVS_KEY) != "true":
            return
        for key, value in os.environ.items():
            if key in self.env:
                continue
            self.env[key] = value.split("=", 1)[0]