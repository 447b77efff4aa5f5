"""Package descriptors as produced by dependency-resolution collaborators."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from scanvault.exceptions import ConfigError
from scanvault.model.identifier import Identifier
from scanvault.types import JsonObject


@dataclass(frozen=True)
class VcsInfo:
    """Version-control location of a package's sources."""

    type: str = ""
    url: str = ""
    revision: str = ""
    path: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.url

    def to_dict(self) -> JsonObject:
        return {"type": self.type, "url": self.url, "revision": self.revision, "path": self.path}

    @classmethod
    def from_dict(cls, raw: object) -> VcsInfo:
        mapping = _ensure_mapping(raw, "vcs")
        return cls(
            type=_string_field(mapping, "type", "vcs"),
            url=_string_field(mapping, "url", "vcs"),
            revision=_string_field(mapping, "revision", "vcs"),
            path=_string_field(mapping, "path", "vcs"),
        )


@dataclass(frozen=True)
class RemoteArtifact:
    """A downloadable artifact with an optional content hash."""

    url: str = ""
    hash: str = ""
    hash_algorithm: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.url

    def to_dict(self) -> JsonObject:
        return {"url": self.url, "hash": self.hash, "hashAlgorithm": self.hash_algorithm}

    @classmethod
    def from_dict(cls, raw: object, context: str = "artifact") -> RemoteArtifact:
        mapping = _ensure_mapping(raw, context)
        return cls(
            url=_string_field(mapping, "url", context),
            hash=_string_field(mapping, "hash", context),
            hash_algorithm=_string_field(mapping, "hashAlgorithm", context).lower(),
        )


@dataclass(frozen=True)
class Package:
    """Immutable descriptor of a third-party package to scan."""

    id: Identifier
    declared_licenses: tuple[str, ...] = ()
    homepage_url: str = ""
    vcs: VcsInfo = field(default_factory=VcsInfo)
    source_artifact: RemoteArtifact = field(default_factory=RemoteArtifact)
    binary_artifact: RemoteArtifact = field(default_factory=RemoteArtifact)

    def to_dict(self) -> JsonObject:
        return {
            "id": self.id.to_coordinates(),
            "declaredLicenses": list(self.declared_licenses),
            "homepageUrl": self.homepage_url,
            "vcs": self.vcs.to_dict(),
            "sourceArtifact": self.source_artifact.to_dict(),
            "binaryArtifact": self.binary_artifact.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: object) -> Package:
        mapping = _ensure_mapping(raw, "package")
        raw_id = mapping.get("id")
        if isinstance(raw_id, str):
            identifier = Identifier.from_coordinates(raw_id)
        elif isinstance(raw_id, dict):
            identifier = Identifier.from_dict(raw_id)
        else:
            raise ConfigError("package.id must be a coordinates string or a mapping")

        declared = mapping.get("declaredLicenses", [])
        if declared is None:
            declared = []
        if not isinstance(declared, list) or not all(isinstance(item, str) for item in declared):
            raise ConfigError(f"declaredLicenses of '{identifier}' must be a list of strings")

        return cls(
            id=identifier,
            declared_licenses=tuple(sorted(set(declared))),
            homepage_url=_string_field(mapping, "homepageUrl", "package"),
            vcs=VcsInfo.from_dict(mapping.get("vcs")),
            source_artifact=RemoteArtifact.from_dict(mapping.get("sourceArtifact"), "sourceArtifact"),
            binary_artifact=RemoteArtifact.from_dict(mapping.get("binaryArtifact"), "binaryArtifact"),
        )


def load_packages(path: Path) -> list[Package]:
    """Load package descriptors from a YAML or JSON file.

    The file holds either a list of descriptors or a mapping with a
    ``packages`` list. Duplicate identifiers keep their first occurrence.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read package file {path}: {exc}") from exc

    try:
        raw = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid package file at {path}: {exc}") from exc

    if isinstance(raw, dict):
        raw = raw.get("packages")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"Package file at {path} must contain a list of packages")

    packages: list[Package] = []
    seen: set[Identifier] = set()
    for entry in raw:
        package = Package.from_dict(entry)
        if package.id in seen:
            continue
        seen.add(package.id)
        packages.append(package)
    return packages


def _ensure_mapping(raw: object, context: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{context} must be a mapping")
    return raw


def _string_field(mapping: dict[str, Any], key: str, context: str) -> str:
    value = mapping.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{context}.{key} must be a string")
    return value.strip()
