"""Plugin configuration files: metadata plus the ABI of exported functions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

CONFIG_PARSE_MESSAGE = "Cant parse the config file as json!"


class ManagerError(Exception):
    """Base class of errors reported by the plugin manager."""


class SourceError(ManagerError):
    """The plugin source could not be used."""


class ConfigError(ManagerError):
    """The plugin configuration could not be read."""


class PluginAbiParamType(Enum):
    """Type of a value returned by a plugin function."""

    STRING = "string"
    NUMBER = "number"


@dataclass
class PluginAbiResult:
    """Description of a plugin function's result."""

    ty: PluginAbiParamType = PluginAbiParamType.NUMBER

    @classmethod
    def _from_dict(cls, data: Any) -> "PluginAbiResult":
        if not isinstance(data, dict) or "type" not in data:
            raise ValueError("result needs a type")
        return cls(PluginAbiParamType(data["type"]))

    def to_dict(self) -> dict:
        return {"type": self.ty.value}


@dataclass
class PluginAbiFunction:
    """A function exported by a plugin."""

    name: str = ""
    result: PluginAbiResult = field(default_factory=PluginAbiResult)

    @classmethod
    def _from_dict(cls, data: Any) -> "PluginAbiFunction":
        if not isinstance(data, dict):
            raise ValueError("function must be an object")
        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError("function needs a string name")
        if "result" not in data:
            raise ValueError("function needs a result")
        return cls(name, PluginAbiResult._from_dict(data["result"]))

    def to_dict(self) -> dict:
        return {"name": self.name, "result": self.result.to_dict()}


@dataclass
class PluginAbi:
    """All functions a plugin exports."""

    functions: list[PluginAbiFunction] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Any) -> "PluginAbi":
        if not isinstance(data, dict):
            raise ValueError("abi must be an object")
        functions = data.get("functions")
        if not isinstance(functions, list):
            raise ValueError("abi needs a list of functions")
        return cls([PluginAbiFunction._from_dict(item) for item in functions])

    def to_dict(self) -> dict:
        return {"functions": [function.to_dict() for function in self.functions]}


@dataclass
class PluginConfig:
    """A plugin configuration; every top-level key except "abi" is metadata."""

    metadata: dict[str, Any] = field(default_factory=dict)
    abi: PluginAbi = field(default_factory=PluginAbi)

    @classmethod
    def from_json(cls, data: Union[bytes, bytearray, str]) -> "PluginConfig":
        """Parse a JSON configuration document, raising ConfigError on failure."""
        try:
            document = json.loads(data)
            if not isinstance(document, dict) or "abi" not in document:
                raise ValueError("config must be an object with an abi")
            abi = PluginAbi._from_dict(document["abi"])
        except (ValueError, TypeError) as exc:
            raise ConfigError(CONFIG_PARSE_MESSAGE) from exc
        metadata = {key: value for key, value in document.items() if key != "abi"}
        return cls(metadata, abi)

    def to_dict(self) -> dict:
        """Return the configuration as a JSON-ready dictionary."""
        return {**self.metadata, "abi": self.abi.to_dict()}