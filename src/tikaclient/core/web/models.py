"""
Response models for the server configuration endpoints.

The service reports its detector and parser trees as nested JSON objects and
its mime type catalog as a map keyed by type identifier. These models decode
those shapes; the mime type map is flattened into a list of records with the
identifier pulled from the map key.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tikaclient.core.exceptions import InvalidTypeNameError


class ConfigPath(str, Enum):
    """Server configuration endpoints, relative to the service endpoint."""

    MIME_TYPES = "mime-types"
    DETECTORS = "detectors"
    PARSERS = "parsers"
    PARSERS_DETAILS = "parsers/details"

    @property
    def path(self) -> str:
        return self.value

    @property
    def cli_name(self) -> str:
        return self.value.replace("/", "-")

    @classmethod
    def from_name(cls, name: str) -> ConfigPath:
        """
        Look up an endpoint by path (``parsers/details``) or CLI name
        (``parsers-details``).

        Raises:
            InvalidTypeNameError: If ``name`` matches no endpoint
        """
        for member in cls:
            if name in (member.value, member.cli_name):
                return member
        raise InvalidTypeNameError(name, expected=[m.cli_name for m in cls])


class MimeType(BaseModel):
    """A mime type known to the service."""

    identifier: str
    supertype: str | None = None
    alias: list[str] = Field(default_factory=list)
    parser: str | None = None

    @classmethod
    def from_catalog(cls, catalog: dict[str, Any]) -> list[MimeType]:
        """Flatten the ``{identifier: {...}}`` catalog into a list of records."""
        return [
            cls.model_validate({**(value or {}), "identifier": identifier})
            for identifier, value in catalog.items()
        ]


class Parser(BaseModel):
    """A node of the parser tree."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    composite: bool = False
    decorated: bool = False
    children: list[Parser] = Field(default_factory=list)
    supported_types: list[str] = Field(default_factory=list, alias="supportedTypes")


class Detector(BaseModel):
    """A node of the detector tree."""

    name: str
    composite: bool
    children: list[Detector] = Field(default_factory=list)


__all__ = ["ConfigPath", "MimeType", "Parser", "Detector"]
