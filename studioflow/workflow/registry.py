"""Executor registry - node type to execution strategy"""

from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from studioflow.core.catalog import CatalogService
from studioflow.core.generation import GenerationService
from studioflow.workflow.models import NodeType
from studioflow.workflow.node_base import NodeExecutor


class ExecutorNotFoundError(Exception):
    """No executor registered for the node type"""

    pass


class RegistryFrozenError(Exception):
    """Registration attempted after the registry was frozen"""

    pass


class ExecutorRegistry:
    """
    Node type -> executor mapping

    Built once at startup, then frozen; lookups after freeze() go through a
    read-only mapping.
    """

    def __init__(self):
        self._registry: Dict[NodeType, NodeExecutor] = {}
        self._frozen: Optional[Mapping[NodeType, NodeExecutor]] = None

    def register(self, executor: NodeExecutor) -> "ExecutorRegistry":
        """
        Register an executor under its node_type

        Returns:
            self (chainable)

        Raises:
            RegistryFrozenError: The registry is already frozen
        """
        if self._frozen is not None:
            raise RegistryFrozenError(
                f"Cannot register {executor!r}: registry is frozen"
            )
        self._registry[executor.node_type] = executor
        return self

    def freeze(self) -> "ExecutorRegistry":
        self._frozen = MappingProxyType(dict(self._registry))
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen is not None

    def get(self, node_type: NodeType) -> NodeExecutor:
        """
        Raises:
            ExecutorNotFoundError: Type not registered
        """
        registry = self._frozen if self._frozen is not None else self._registry
        try:
            return registry[NodeType(node_type)]
        except (KeyError, ValueError) as e:
            raise ExecutorNotFoundError(
                f"No executor registered for node type: {node_type}, "
                f"available: {[t.value for t in registry]}"
            ) from e

    def get_registered_types(self) -> List[NodeType]:
        return list(self._registry.keys())

    def has_type(self, node_type: NodeType) -> bool:
        return node_type in self._registry

    def __contains__(self, node_type: NodeType) -> bool:
        return self.has_type(node_type)

    def __repr__(self) -> str:
        return f"ExecutorRegistry(types={[t.value for t in self._registry]}, frozen={self.frozen})"


def build_registry(
    service: GenerationService,
    catalog: CatalogService,
    brand_name: str,
) -> ExecutorRegistry:
    """Register every built-in executor and freeze the registry"""
    # Deferred import avoids a cycle through the nodes package
    from studioflow.workflow.nodes import (
        ExporterNode,
        ImageEditorNode,
        ImageInputNode,
        OutputDisplayNode,
        ProductImageLoaderNode,
        ProductNode,
        SocialPostGeneratorNode,
        TextGeneratorNode,
        TextInputNode,
        VideoGeneratorNode,
    )

    registry = ExecutorRegistry()

    # Input capture
    registry.register(TextInputNode())
    registry.register(ImageInputNode())
    registry.register(ProductNode())

    # Generation
    registry.register(TextGeneratorNode(service))
    registry.register(ImageEditorNode(service))
    registry.register(VideoGeneratorNode(service))
    registry.register(SocialPostGeneratorNode(service, brand_name))

    # Catalog
    registry.register(ProductImageLoaderNode(catalog))

    # Output
    registry.register(ExporterNode())
    registry.register(OutputDisplayNode())

    return registry.freeze()


_default_registry: Optional[ExecutorRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> ExecutorRegistry:
    """
    Process-wide registry backed by OpenAI and the configured catalog

    The OpenAI client itself is created lazily on the first generation call.
    """
    global _default_registry

    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                from studioflow.core.generation import OpenAIGenerationService
                from studioflow.settings import get_catalog_settings

                catalog_settings = get_catalog_settings()
                _default_registry = build_registry(
                    OpenAIGenerationService(),
                    CatalogService(catalog_settings),
                    catalog_settings.brand_name,
                )

    return _default_registry
