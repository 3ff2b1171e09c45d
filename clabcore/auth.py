"""Registry credentials taken from the docker client configuration file."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_DIR = ".docker"
_DEFAULT_CONFIG_FILE = "config.json"
_DEFAULT_DOMAIN = "docker.io"
_LEGACY_DEFAULT_DOMAIN = "index.docker.io"
_OFFICIAL_REPO_PREFIX = "library/"
_NAME_TOTAL_LENGTH_MAX = 255

_ALNUM = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|-+)"
_NAME_COMPONENT = rf"{_ALNUM}(?:{_SEPARATOR}{_ALNUM})*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_DOMAIN = rf"{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*(?::[0-9]+)?"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"
_REFERENCE = re.compile(
    rf"(?:({_DOMAIN})/)?({_NAME_COMPONENT}(?:/{_NAME_COMPONENT})*)"
    rf"(?::{_TAG})?(?:@{_DIGEST})?",
    re.ASCII,
)
_IDENTIFIER = re.compile(r"[a-f0-9]{64}")
_BASE64_URL = re.compile(r"[A-Za-z0-9_-]*={0,2}")


@dataclass
class DockerConfig:
    """Docker client configuration: encoded credentials keyed by registry domain."""

    auths: dict[str, str] = field(default_factory=dict)


def _split_domain(name: str) -> tuple[str, str]:
    head, sep, rest = name.partition("/")
    if not sep or (not any(c in head for c in ".:") and head != "localhost"):
        domain, remainder = _DEFAULT_DOMAIN, name
    else:
        domain, remainder = head, rest
    if domain == _LEGACY_DEFAULT_DOMAIN:
        domain = _DEFAULT_DOMAIN
    if domain == _DEFAULT_DOMAIN and "/" not in remainder:
        remainder = _OFFICIAL_REPO_PREFIX + remainder
    return domain, remainder


def _normalized_domain(image_name: str) -> str:
    if _IDENTIFIER.fullmatch(image_name):
        raise ValueError(
            f"invalid repository name ({image_name}), "
            "cannot specify 64-byte hexadecimal strings"
        )
    domain, remainder = _split_domain(image_name)
    name_part = remainder.split(":", 1)[0]
    if name_part.lower() != name_part:
        raise ValueError("invalid reference format: repository name must be lowercase")
    match = _REFERENCE.fullmatch(f"{domain}/{remainder}")
    if match is None:
        raise ValueError("invalid reference format")
    parsed_domain = match.group(1) or ""
    name_length = len(match.group(2)) + (len(parsed_domain) + 1 if parsed_domain else 0)
    if name_length > _NAME_TOTAL_LENGTH_MAX:
        raise ValueError(
            f"repository name must not be more than {_NAME_TOTAL_LENGTH_MAX} characters"
        )
    return parsed_domain


def image_domain_name(image_name: str) -> str:
    """Registry domain of an image reference, or "" if it cannot be parsed."""
    try:
        return _normalized_domain(image_name)
    except ValueError as exc:
        logger.error("Unable to fetch image normalized name, error: %s", exc)
        return ""


def docker_config_path(config_path: str) -> str:
    """``config_path`` itself, or the default ``~/.docker/config.json`` when empty."""
    if config_path:
        return config_path
    home = os.environ.get("HOME") or os.path.expanduser("~")
    if not home or home == "~":
        raise OSError("$HOME is not defined")
    return os.path.join(home, _DEFAULT_CONFIG_DIR, _DEFAULT_CONFIG_FILE)


def _auth_value(domain: str, entry: Any) -> str:
    if entry is None:
        return ""
    if not isinstance(entry, Mapping):
        raise ValueError(f"auths.{domain}: expected an object")
    value = entry.get("Auth", entry.get("auth"))
    if value is None:
        for key, candidate in entry.items():
            if isinstance(key, str) and key.lower() == "auth":
                value = candidate
                break
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"auths.{domain}.auth: expected a string")
    return value


def _parse_config(data: Any) -> DockerConfig:
    if not isinstance(data, Mapping):
        raise ValueError("docker config: expected a JSON object")
    auths = data.get("auths")
    if auths is None:
        return DockerConfig()
    if not isinstance(auths, Mapping):
        raise ValueError("docker config auths: expected a JSON object")
    return DockerConfig(
        auths={domain: _auth_value(domain, entry) for domain, entry in auths.items()}
    )


def load_docker_config(config_path: str) -> DockerConfig:
    """Read and parse a docker config file; an empty path means the default one."""
    path = docker_config_path(config_path)
    try:
        with open(path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        logger.info("Could not read docker config: %s", exc)
        raise
    try:
        return _parse_config(json.loads(raw))
    except ValueError as exc:
        logger.error("Failed to unmarshal docker config: %s", exc)
        raise


def _decode_auth(encoded: str) -> str:
    cleaned = encoded.replace("\r", "").replace("\n", "")
    if len(cleaned) % 4 or not _BASE64_URL.fullmatch(cleaned):
        raise ValueError("illegal base64 data in auth string")
    try:
        return base64.urlsafe_b64decode(cleaned).decode("utf-8", errors="replace")
    except binascii.Error as exc:
        raise ValueError(f"illegal base64 data in auth string: {exc}") from exc


def _marshal(payload: dict[str, str]) -> str:
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(char, escaped)
    return text


def docker_auth(config: DockerConfig, image_name: str) -> str:
    """Registry auth string for ``image_name``, or "" if no credentials are stored."""
    domain = image_domain_name(image_name)
    encoded = config.auths.get(domain)
    if encoded is None:
        return ""

    parts = _decode_auth(encoded).split(":")
    if len(parts) != 2:
        raise ValueError("unexpected auth string")

    payload = {}
    username, secret = parts[0].strip(), parts[1].strip()
    if username:
        payload["username"] = username
    if secret:
        payload["password"] = secret
    return base64.urlsafe_b64encode(_marshal(payload).encode("utf-8")).decode("ascii")