"""Package identifier model."""

from __future__ import annotations

from dataclasses import dataclass

from scanvault.constants.identifiers import ID_FIELD_COUNT, ID_SEPARATOR, UNKNOWN_PATH_COMPONENT
from scanvault.exceptions import ConfigError
from scanvault.types import JsonObject
from scanvault.utils import file_system_encode


@dataclass(frozen=True, order=True)
class Identifier:
    """Ecosystem type, namespace, name and version uniquely naming a package."""

    type: str
    namespace: str
    name: str
    version: str

    @property
    def components(self) -> tuple[str, str, str, str]:
        return (self.type, self.namespace, self.name, self.version)

    def to_coordinates(self) -> str:
        """Return the canonical ``type:namespace:name:version`` form."""
        return ID_SEPARATOR.join(self.components)

    def to_path(self) -> str:
        """Return a relative, filesystem-safe path unique to this identifier."""
        return "/".join(file_system_encode(part) if part else UNKNOWN_PATH_COMPONENT for part in self.components)

    @classmethod
    def from_coordinates(cls, coordinates: str) -> Identifier:
        """Parse the canonical coordinates form, rejecting malformed input."""
        parts = coordinates.split(ID_SEPARATOR)
        if len(parts) != ID_FIELD_COUNT:
            raise ConfigError(
                f"Identifier '{coordinates}' must have {ID_FIELD_COUNT} fields separated by '{ID_SEPARATOR}'"
            )
        return cls(*(part.strip() for part in parts))

    @classmethod
    def from_dict(cls, raw: JsonObject) -> Identifier:
        values: list[str] = []
        for field_name in ("type", "namespace", "name", "version"):
            value = raw.get(field_name, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ConfigError(f"Identifier field '{field_name}' must be a string")
            if ID_SEPARATOR in value:
                raise ConfigError(f"Identifier field '{field_name}' must not contain '{ID_SEPARATOR}'")
            values.append(value.strip())
        return cls(*values)

    def to_dict(self) -> JsonObject:
        return {"type": self.type, "namespace": self.namespace, "name": self.name, "version": self.version}

    def __str__(self) -> str:
        return self.to_coordinates()
