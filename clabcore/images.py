"""Container image naming and CNI path helpers."""

from __future__ import annotations

import os

_CNI_BIN = "/opt/cni/bin"


def canonical_image_name(image_name: str) -> str:
    """Return the fully qualified image name, including a tag.

    ``alpine`` becomes ``docker.io/library/alpine:latest``, ``foo/bar``
    becomes ``docker.io/foo/bar:latest`` and names whose first part holds
    a dot are kept as a registry host.
    """
    canonical = image_name
    slashes = image_name.count("/")
    if slashes == 0:
        canonical = "docker.io/library/" + image_name
    elif slashes == 1:
        first = image_name.split("/", 1)[0]
        if "." not in first:
            canonical = "docker.io/" + image_name
    if ":" not in canonical:
        canonical += ":latest"
    return canonical


def cni_binary_path() -> str:
    """Directory holding CNI plugin binaries, overridable by ``CNI_BIN``."""
    return os.environ.get("CNI_BIN", _CNI_BIN)