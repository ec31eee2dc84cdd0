"""Workflow test shared fixtures"""

import asyncio

import pytest

from studioflow.settings import WorkflowSettings
from studioflow.workflow import NodeType, WorkflowRunner, build_registry


@pytest.fixture
def registry(stub_service, catalog_service):
    """Every built-in executor, backed by the stub service and a temp catalog"""
    return build_registry(stub_service, catalog_service, "Hispania Colors")


@pytest.fixture
def make_runner(store, registry):
    """Factory: runner over the shared store with a given cycle policy"""

    def _make(cycle_policy: str = "error", listeners=None) -> WorkflowRunner:
        return WorkflowRunner(
            store,
            registry=registry,
            settings=WorkflowSettings(cycle_policy=cycle_policy),
            listeners=listeners,
        )

    return _make


@pytest.fixture
def run_workflow(make_runner):
    """Run the shared store once and return the RunResult"""

    def _run(cycle_policy: str = "error", listeners=None):
        return asyncio.run(make_runner(cycle_policy, listeners).run())

    return _run


@pytest.fixture
def connect(store):
    """Wire ``source.<out_suffix>`` into ``target.<in_suffix>``"""

    def _connect(source, out_suffix, target, in_suffix):
        return store.add_edge(
            source.id,
            source.port_id(out_suffix),
            target.id,
            target.port_id(in_suffix),
        )

    return _connect


@pytest.fixture
def text_input(store):
    """Factory: text capture node holding the given text"""

    def _make(text: str):
        node = store.create_node(NodeType.TEXT_INPUT)
        return store.update_node_data(node.id, {"content": text})

    return _make
