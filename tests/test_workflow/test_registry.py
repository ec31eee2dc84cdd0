"""ExecutorRegistry tests"""

import pytest

from studioflow.workflow import (
    NODE_TEMPLATES,
    ExecutorNotFoundError,
    ExecutorRegistry,
    NodeType,
)
from studioflow.workflow.nodes import TextInputNode
from studioflow.workflow.registry import RegistryFrozenError


def test_every_node_type_has_an_executor(registry):
    assert set(registry.get_registered_types()) == set(NodeType)
    assert set(NODE_TEMPLATES) == set(NodeType)


def test_lookup_by_enum_or_value(registry):
    assert registry.get(NodeType.EXPORTER).node_type == NodeType.EXPORTER
    assert registry.get("EXPORTER") is registry.get(NodeType.EXPORTER)
    assert NodeType.PRODUCT in registry


def test_built_registry_is_frozen(registry):
    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register(TextInputNode())


def test_unknown_type():
    registry = ExecutorRegistry().register(TextInputNode()).freeze()
    with pytest.raises(ExecutorNotFoundError, match="TEXT_GENERATOR"):
        registry.get(NodeType.TEXT_GENERATOR)
    with pytest.raises(ExecutorNotFoundError):
        registry.get("HOLOGRAM")


def test_unfrozen_registry_still_resolves():
    registry = ExecutorRegistry().register(TextInputNode())
    assert not registry.frozen
    assert isinstance(registry.get(NodeType.TEXT_INPUT), TextInputNode)
