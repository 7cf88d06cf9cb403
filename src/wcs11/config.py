"""Configuration helpers for the WCS document builders."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError
from .types import MapConfig


class WCSSettings(BaseModel):
    """Runtime settings shared by the builders of one service."""

    encoding: str = Field(default="ISO-8859-1", description="Encoding of XML documents")
    pretty_print: bool = Field(default=True, description="Indent XML documents")
    default_version: str = Field(default="1.1.0", description="Version used when a request names none")
    exception_version: str = Field(default="1.1.0", description="OWS exception report version")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "WCSSettings":
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid WCS settings: {exc}", cause=exc) from exc


def load_map(source: Union[str, Path, Dict[str, Any]]) -> MapConfig:
    """
    Load a map definition from a JSON file or an already parsed dictionary.

    Layers are attached to the returned map.

    Raises:
        ConfigurationError: If the file cannot be read or does not describe a map
    """
    if isinstance(source, dict):
        data = source
    else:
        path = Path(source)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigurationError(f"Cannot read map file {path}", cause=exc) from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Map file {path} is not valid JSON", cause=exc) from exc

    try:
        return MapConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid map definition: {exc}", cause=exc) from exc
