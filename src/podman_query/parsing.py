"""Pure parsers for podman(1) output.

Nothing here runs a process: every function takes the raw text podman
printed and returns typed values, raising a :class:`ParseError` subclass
when the text is not what podman is expected to print.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from .errors import ParseError, VersionParseError

__all__ = [
    "ContainerRecord",
    "ImageRecord",
    "compare_versions",
    "normalize_version",
    "parse_containers",
    "parse_images",
    "parse_inspect",
    "parse_version",
    "parse_version_output",
]

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:[-+~][0-9A-Za-z.\-+~]*)?$")


@dataclass(frozen=True)
class ContainerRecord:
    """One entry of ``podman ps --format json``."""

    id: str
    names: list[str] = field(default_factory=list)
    image: str = ""
    state: str = ""
    status: str = ""
    created: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def name(self) -> str:
        """First name of the container, or its ID when it has none."""
        return self.names[0] if self.names else self.id


@dataclass(frozen=True)
class ImageRecord:
    """One entry of ``podman images --format json``."""

    id: str
    names: list[str] = field(default_factory=list)
    created: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


# --------------------------------------------------------------------------- #
# Versions
# --------------------------------------------------------------------------- #
def parse_version(version: str) -> tuple[int, int, int]:
    """Split ``"4.3.1"`` (or ``"v2.5.1-dev"``) into ``(4, 3, 1)``."""
    match = _VERSION_RE.match(version.strip())
    if not match:
        raise VersionParseError(f"invalid version {version!r}")
    major, minor, patch = map(int, match.groups())
    return major, minor, patch


def normalize_version(version: str) -> str:
    """Return the bare ``major.minor.patch`` form of ``version``."""
    return ".".join(map(str, parse_version(version)))


def compare_versions(a: str, b: str) -> int:
    """Compare two versions numerically: negative, zero or positive like ``cmp``."""
    left, right = parse_version(a), parse_version(b)
    return (left > right) - (left < right)


def parse_version_output(output: str) -> str:
    """Extract the client version from ``podman version --format json``."""
    document = _load_json(output)
    if not isinstance(document, dict):
        raise VersionParseError("podman version output is not a JSON object")

    client = document.get("Client")
    if not isinstance(client, dict) or not isinstance(client.get("Version"), str):
        raise VersionParseError("podman version output has no Client.Version")

    return normalize_version(client["Version"])


# --------------------------------------------------------------------------- #
# Listings
# --------------------------------------------------------------------------- #
def parse_containers(output: str) -> list[ContainerRecord]:
    """Decode ``podman ps --format json`` into container records."""
    return [
        ContainerRecord(
            id=_first(entry, "Id", "ID"),
            names=_names(entry.get("Names")),
            image=str(entry.get("Image") or ""),
            state=str(entry.get("State") or ""),
            status=str(entry.get("Status") or ""),
            created=str(entry.get("CreatedAt") or entry.get("Created") or ""),
            labels=dict(entry.get("Labels") or {}),
            raw=entry,
        )
        for entry in _load_entries(output)
    ]


def parse_images(output: str) -> list[ImageRecord]:
    """Decode ``podman images --format json`` into image records."""
    return [
        ImageRecord(
            id=_first(entry, "Id", "ID"),
            names=_names(entry.get("Names")),
            created=str(entry.get("CreatedAt") or entry.get("Created") or ""),
            labels=dict(entry.get("Labels") or {}),
            raw=entry,
        )
        for entry in _load_entries(output)
    ]


def parse_inspect(output: str) -> dict[str, Any]:
    """Return the single object printed by ``podman inspect --format json``."""
    entries = _load_entries(output)
    if not entries:
        raise ParseError("podman inspect returned no objects")
    return entries[0]


# --------------------------------------------------------------------------- #
# Internals
# --------------------------------------------------------------------------- #
def _load_json(output: str) -> Any:
    try:
        return json.loads(output)
    except json.JSONDecodeError as e:
        raise ParseError(f"podman printed invalid JSON: {e}") from e


def _load_entries(output: str) -> list[dict[str, Any]]:
    # Old podman releases print nothing at all for an empty listing
    if not output.strip():
        return []
    document = _load_json(output)
    if document is None:
        return []
    if not isinstance(document, list) or not all(isinstance(e, dict) for e in document):
        raise ParseError("expected a JSON array of objects")
    return document


def _first(entry: dict[str, Any], *keys: str) -> str:
    for key in keys:
        if entry.get(key):
            return str(entry[key])
    raise ParseError(f"entry has none of the fields {', '.join(keys)}")


def _names(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return [str(v) for v in value]
