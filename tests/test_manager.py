import pytest

from pluginhub.config import PluginAbiParamType, PluginConfig
from pluginhub.manager import (
    PluginBuilder,
    PluginMetadata,
    PluginSystem,
)

CONFIG = (
    b'{"name": "echo", "version": "0.1.0", '
    b'"abi": {"functions": [{"name": "get_data", "result": {"type": "string"}}]}}'
)


@pytest.fixture
def config():
    return PluginConfig.from_json(CONFIG)


@pytest.fixture
def builder(config):
    return PluginBuilder(config, b"\x00asm")


def test_builder_exposes_config(builder):
    assert builder.metadata() == PluginMetadata("echo", "0.1.0")
    assert builder.source() == b"\x00asm"
    abi = builder.abi()
    assert [f.name for f in abi.functions] == ["get_data"]
    assert abi.functions[0].result.ty is PluginAbiParamType.STRING
    assert builder.permissions() == []
    assert builder.routers() == []


def test_abi_is_a_copy(builder):
    builder.abi().functions.clear()
    assert len(builder.abi().functions) == 1


def test_default_builder_has_empty_metadata():
    assert PluginBuilder().metadata() == PluginMetadata("", "")


def test_changes_invisible_until_published(builder):
    writer, reader = PluginSystem.get_left_right()
    writer.add(builder)
    assert reader.get("echo") is None
    writer.publish()
    assert reader.get("echo") is builder


def test_remove_after_publish(builder):
    writer, reader = PluginSystem.get_left_right()
    writer.add(builder).publish()
    writer.remove(builder)
    assert reader.get("echo") is builder
    writer.publish()
    assert reader.get("echo") is None


def test_remove_missing_is_harmless(builder):
    writer, reader = PluginSystem.get_left_right()
    writer.remove(builder).publish()
    assert reader.get("echo") is None


def test_ops_applied_in_order(builder):
    writer, reader = PluginSystem.get_left_right()
    writer.add(builder).remove(builder).publish()
    assert reader.get("echo") is None
    writer.remove(builder).add(builder).publish()
    assert reader.get("echo") is builder


def test_add_from_config(config):
    writer, reader = PluginSystem.get_left_right()
    assert writer.add_from_config(b"wasm", config) is None
    writer.publish()
    plugin = reader.get("echo")
    assert plugin.source() == b"wasm"
    assert plugin.metadata().version == "0.1.0"