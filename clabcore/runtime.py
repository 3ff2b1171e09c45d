"""Container runtime interface, runtime options and the runtime registry."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

DOCKER_RUNTIME = "docker"
IGNITE_RUNTIME = "ignite"


@dataclass
class RuntimeConfig:
    """Settings shared by container runtimes; ``timeout`` is in seconds."""

    timeout: float = 0.0
    graceful_shutdown: bool = False
    debug: bool = False
    keep_mgmt_net: bool = False


RuntimeOption = Callable[["ContainerRuntime"], None]
Initializer = Callable[[], "ContainerRuntime"]


class ContainerRuntime(abc.ABC):
    """Operations a container runtime offers to the lab lifecycle."""

    def init(self, *options: RuntimeOption) -> None:
        """Prepare the runtime and apply the given options in order."""
        for option in options:
            option(self)

    @abc.abstractmethod
    def with_config(self, cfg: RuntimeConfig) -> None:
        """Apply runtime configuration settings."""

    @abc.abstractmethod
    def with_mgmt_net(self, mgmt: Any) -> None:
        """Set the management network details."""

    @abc.abstractmethod
    def with_keep_mgmt_net(self) -> None:
        """Keep the management network when the lab is destroyed."""

    @abc.abstractmethod
    def create_net(self) -> None:
        """Create the management (bridge) network."""

    @abc.abstractmethod
    def delete_net(self) -> None:
        """Delete the management (bridge) network."""

    @abc.abstractmethod
    def pull_image_if_required(self, image_name: str) -> None:
        """Pull the image unless it is already present."""

    @abc.abstractmethod
    def create_container(self, node: Any) -> Any:
        """Create and start a container; may return a lifecycle handle."""

    @abc.abstractmethod
    def start_container(self, name: str) -> None:
        """Start a created container by name."""

    @abc.abstractmethod
    def stop_container(self, name: str) -> None:
        """Stop a running container by name."""

    @abc.abstractmethod
    def list_containers(self, filters: Optional[Sequence[Any]]) -> list[Any]:
        """List containers matching the given filters."""

    @abc.abstractmethod
    def get_ns_path(self, container_id: str) -> str:
        """Return the network namespace path of a container."""

    @abc.abstractmethod
    def exec(self, container_id: str, cmd: Sequence[str]) -> tuple[bytes, bytes]:
        """Run ``cmd`` in a container and return its stdout and stderr."""

    @abc.abstractmethod
    def exec_not_wait(self, container_id: str, cmd: Sequence[str]) -> None:
        """Run ``cmd`` in a container without waiting for output."""

    @abc.abstractmethod
    def delete_container(self, name: str) -> None:
        """Delete a container by name."""

    @property
    @abc.abstractmethod
    def config(self) -> RuntimeConfig:
        """The runtime configuration in effect."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """The runtime's registered name."""


CONTAINER_RUNTIMES: dict[str, Initializer] = {}


def register(name: str, factory: Initializer) -> None:
    """Make a runtime factory available under ``name``."""
    CONTAINER_RUNTIMES[name] = factory


def with_config(cfg: RuntimeConfig) -> RuntimeOption:
    """Option applying ``cfg`` to a runtime."""

    def apply(runtime: ContainerRuntime) -> None:
        runtime.with_config(cfg)

    return apply


def with_mgmt_net(mgmt: Any) -> RuntimeOption:
    """Option setting the management network of a runtime."""

    def apply(runtime: ContainerRuntime) -> None:
        runtime.with_mgmt_net(mgmt)

    return apply


def with_keep_mgmt_net() -> RuntimeOption:
    """Option telling a runtime to keep its management network."""

    def apply(runtime: ContainerRuntime) -> None:
        runtime.with_keep_mgmt_net()

    return apply