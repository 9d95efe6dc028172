"""Plugin registry with a single writer that publishes changes to readers."""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union

from .config import PluginAbi, PluginConfig


@dataclass(frozen=True)
class PluginMetadata:
    """Metadata of a plugin, mostly shown to users."""

    name: str = ""
    version: str = ""


class PluginBuilder:
    """A plugin described by its configuration and its wasm source."""

    def __init__(self, config: Optional[PluginConfig] = None, source: bytes = b"") -> None:
        self._config = config if config is not None else PluginConfig()
        self._source = bytes(source)

    def __repr__(self) -> str:
        return f"PluginBuilder(metadata={self.metadata()!r}, source={len(self._source)} bytes)"

    def metadata(self) -> PluginMetadata:
        """Name and version taken from the configuration."""
        meta = self._config.metadata
        return PluginMetadata(str(meta.get("name", "")), str(meta.get("version", "")))

    def abi(self) -> PluginAbi:
        """A copy of the plugin's ABI description."""
        return copy.deepcopy(self._config.abi)

    def source(self) -> bytes:
        """The wasm source of the plugin."""
        return self._source

    def permissions(self) -> list[str]:
        """Permissions the plugin requires."""
        return []

    def routers(self) -> list[str]:
        """Route names the plugin serves."""
        return []


@dataclass(frozen=True)
class _AddPlugin:
    name: str
    plugin: PluginBuilder


@dataclass(frozen=True)
class _RemovePlugin:
    name: str


_SystemOp = Union[_AddPlugin, _RemovePlugin]


@dataclass
class PluginSystem:
    """The published set of plugins, keyed by plugin name."""

    plugins: Mapping[str, PluginBuilder] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def get_left_right(cls) -> tuple["PluginSystemWriter", "PluginSystemReader"]:
        """Create an empty system and return its writer and reader."""
        system = cls()
        return PluginSystemWriter(system), PluginSystemReader(system)


class PluginSystemWriter:
    """Queues changes to a plugin system and publishes them at once."""

    def __init__(self, system: PluginSystem) -> None:
        self._system = system
        self._pending: list[_SystemOp] = []
        self._lock = threading.Lock()

    def add(self, plugin: PluginBuilder) -> "PluginSystemWriter":
        """Queue adding the plugin under its metadata name."""
        with self._lock:
            self._pending.append(_AddPlugin(plugin.metadata().name, plugin))
        return self

    def remove(self, plugin: PluginBuilder) -> "PluginSystemWriter":
        """Queue removing the plugin with the same metadata name."""
        with self._lock:
            self._pending.append(_RemovePlugin(plugin.metadata().name))
        return self

    def publish(self) -> "PluginSystemWriter":
        """Apply the queued changes and make them visible to readers."""
        with self._lock:
            plugins = dict(self._system.plugins)
            for op in self._pending:
                if isinstance(op, _AddPlugin):
                    plugins[op.name] = op.plugin
                else:
                    plugins.pop(op.name, None)
            self._pending.clear()
            self._system.plugins = MappingProxyType(plugins)
        return self

    def add_from_config(self, wasm_as_bytes: bytes, config: PluginConfig) -> None:
        """Build a plugin from its source and configuration and queue adding it."""
        self.add(PluginBuilder(config, wasm_as_bytes))


class PluginSystemReader:
    """Reads the published plugins; safe to share between threads."""

    def __init__(self, system: PluginSystem) -> None:
        self._system = system

    def get(self, name: str) -> Optional[PluginBuilder]:
        """Return the published plugin with this name, or None."""
        return self._system.plugins.get(name)


BuilderReader = PluginSystemReader