"""Lab topology: defaults, kinds and nodes, and per-node setting resolution."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from clabcore.maps import merge_maps, merge_string_maps
from clabcore.node_definition import NodeDefinition
from clabcore.types import ConfigDispatcher, Extras


def resolve_path(path: str) -> str:
    """Expand a leading ``~`` to the home directory, else make ``path`` absolute."""
    if not path:
        return ""
    if path.startswith("~"):
        if len(path) > 1 and path[1] not in ("/", "\\"):
            raise ValueError("cannot expand user-specific home dir")
        home = os.environ.get("HOME") or os.path.expanduser("~")
        if not home or home == "~":
            raise ValueError("cannot determine the home directory")
        return home + path[1:]
    return os.path.abspath(path)


def _existing(path: str) -> str:
    resolved = resolve_path(path)
    os.stat(resolved)
    return resolved


@dataclass
class LinkConfig:
    """A link as written in the topology: its endpoints, labels and variables."""

    endpoints: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    vars: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LinkConfig:
        """Build a link from a parsed YAML mapping."""
        if not isinstance(data, Mapping):
            raise TypeError(f"link: expected a mapping, got {type(data).__name__}")
        endpoints = data.get("endpoints") or []
        labels = data.get("labels") or {}
        variables = data.get("vars") or {}
        if not isinstance(endpoints, list):
            raise TypeError("link endpoints: expected a list")
        if not isinstance(labels, Mapping) or not isinstance(variables, Mapping):
            raise TypeError("link labels and vars must be mappings")
        return cls(
            endpoints=[str(e) for e in endpoints],
            labels={str(k): str(v) for k, v in labels.items()},
            vars=dict(variables),
        )


def _definitions(section: str, value: Any) -> dict[str, NodeDefinition]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"{section}: expected a mapping, got {type(value).__name__}")
    return {str(name): NodeDefinition.from_dict(body) for name, body in value.items()}


@dataclass
class Topology:
    """A lab topology; node settings fall back from node to kind to defaults."""

    defaults: NodeDefinition = field(default_factory=NodeDefinition)
    kinds: dict[str, NodeDefinition] = field(default_factory=dict)
    nodes: dict[str, NodeDefinition] = field(default_factory=dict)
    links: list[LinkConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Topology:
        """Build a topology from a parsed YAML mapping."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise TypeError(f"topology: expected a mapping, got {type(data).__name__}")
        links = data.get("links") or []
        if not isinstance(links, list):
            raise TypeError("links: expected a list")
        return cls(
            defaults=NodeDefinition.from_dict(data.get("defaults")),
            kinds=_definitions("kinds", data.get("kinds")),
            nodes=_definitions("nodes", data.get("nodes")),
            links=[LinkConfig.from_dict(link) for link in links],
        )

    @classmethod
    def from_yaml(cls, text: str) -> Topology:
        """Parse a topology from YAML text."""
        return cls.from_dict(yaml.safe_load(text))

    def get_kind(self, kind: str) -> NodeDefinition:
        """The definition of ``kind``, or an empty one if it is not defined."""
        definition = self.kinds.get(kind)
        return definition if definition is not None else NodeDefinition()

    def _layers(self, name: str) -> Optional[tuple[NodeDefinition, NodeDefinition, NodeDefinition]]:
        node = self.nodes.get(name)
        if node is None:
            return None
        return node, self.get_kind(self.node_kind(name)), self.defaults

    def _first(self, name: str, attr: str, empty: Any) -> Any:
        layers = self._layers(name)
        if layers is None:
            return empty
        node, kind, defaults = layers
        for layer in (node, kind):
            value = getattr(layer, attr)
            if value:
                return value
        return getattr(defaults, attr)

    def node_kind(self, name: str) -> str:
        """The node's kind, falling back to the default kind."""
        node = self.nodes.get(name)
        if node is None:
            return ""
        return node.kind or self.defaults.kind

    def node_binds(self, name: str) -> list[str]:
        return self._first(name, "binds", [])

    def node_env(self, name: str) -> Optional[dict[str, str]]:
        """Environment merged from defaults, kind and node; None if empty."""
        layers = self._layers(name)
        if layers is None:
            return None
        node, kind, defaults = layers
        return merge_string_maps(merge_string_maps(defaults.env, kind.env), node.env)

    def node_publish(self, name: str) -> list[str]:
        node = self.nodes.get(name)
        if node is None:
            return []
        if node.publish:
            return node.publish
        kind = self.kinds.get(node.kind)
        if kind is not None and kind.publish:
            return kind.publish
        return self.defaults.publish

    def node_labels(self, name: str) -> Optional[dict[str, str]]:
        """Labels merged from defaults, kind and node; None if empty."""
        layers = self._layers(name)
        if layers is None:
            return None
        node, kind, defaults = layers
        return merge_string_maps(defaults.labels, kind.labels, node.labels)

    def node_config_dispatcher(self, name: str) -> Optional[ConfigDispatcher]:
        """Config variables merged recursively from defaults, kind and node."""
        layers = self._layers(name)
        if layers is None:
            return None
        node, kind, defaults = layers

        def variables(layer: NodeDefinition) -> Optional[dict[str, Any]]:
            return layer.config.vars if layer.config is not None else None

        return ConfigDispatcher(
            vars=merge_maps(variables(defaults), variables(kind), variables(node))
        )

    def node_startup_config(self, name: str) -> str:
        """Resolved path of the startup config; raises if the file is missing."""
        path = self._first(name, "startup_config", "")
        return _existing(path) if path else ""

    def node_startup_delay(self, name: str) -> int:
        return self._first(name, "startup_delay", 0)

    def node_enforce_startup_config(self, name: str) -> bool:
        return bool(self._first(name, "enforce_startup_config", False))

    def node_license(self, name: str) -> str:
        """Resolved path of the license file; raises if the file is missing."""
        path = self._first(name, "license", "")
        return _existing(path) if path else ""

    def node_image(self, name: str) -> str:
        return self._first(name, "image", "")

    def node_group(self, name: str) -> str:
        return self._first(name, "group", "")

    def node_type(self, name: str) -> str:
        return self._first(name, "type", "")

    def node_position(self, name: str) -> str:
        return self._first(name, "position", "")

    def node_entrypoint(self, name: str) -> str:
        return self._first(name, "entrypoint", "")

    def node_cmd(self, name: str) -> str:
        return self._first(name, "cmd", "")

    def node_exec(self, name: str) -> list[str]:
        """Exec commands of defaults, kind and node, concatenated in that order."""
        layers = self._layers(name)
        if layers is None:
            return []
        node, kind, defaults = layers
        return [*defaults.exec, *kind.exec, *node.exec]

    def node_user(self, name: str) -> str:
        return self._first(name, "user", "")

    def node_network_mode(self, name: str) -> str:
        return self._first(name, "network_mode", "")

    def node_sandbox(self, name: str) -> str:
        return self._first(name, "sandbox", "")

    def node_kernel(self, name: str) -> str:
        return self._first(name, "kernel", "")

    def node_runtime(self, name: str) -> str:
        return self._first(name, "runtime", "")

    def node_cpu(self, name: str) -> float:
        return self._first(name, "cpu", 0.0)

    def node_cpu_set(self, name: str) -> str:
        return self._first(name, "cpu_set", "")

    def node_memory(self, name: str) -> str:
        return self._first(name, "memory", "")

    def node_extras(self, name: str) -> Optional[Extras]:
        """The first extras section set on the node, its kind or the defaults."""
        layers = self._layers(name)
        if layers is None:
            return None
        for layer in layers:
            if layer.extras is not None:
                return layer.extras
        return None

    def import_envs(self) -> None:
        """Import the process environment wherever ``__IMPORT_ENVS`` is set."""
        self.defaults.import_envs()
        for kind in self.kinds.values():
            kind.import_envs()
        for node in self.nodes.values():
            node.import_envs()