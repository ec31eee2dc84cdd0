"""Execution order of a workflow graph (Kahn's topological sort)"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List

from studioflow.workflow.models import Edge


class CyclicDependencyError(Exception):
    """Some nodes never reach in-degree 0 because they sit in a cycle"""

    def __init__(self, node_ids: List[str]):
        self.node_ids = list(node_ids)
        super().__init__(
            f"Cycle detected, {len(self.node_ids)} node(s) can never run: "
            f"{', '.join(self.node_ids)}"
        )


class InvalidGraphError(Exception):
    """Edge endpoint missing from the node set"""

    pass


class ExecutionGraph:
    """
    Read-only view of one run's graph.

    Adjacency and in-degree are derived from the edges every time a run
    starts; nothing is stored on the graph store itself. Each edge adds one
    unit of in-degree to its target, whichever port it lands on.
    """

    def __init__(self, node_ids: Iterable[str], edges: Iterable[Edge]):
        """
        Args:
            node_ids: Node ids in creation order (queue seed order)
            edges: All edges of the graph

        Raises:
            InvalidGraphError: An edge references an unknown node
        """
        self.node_ids: List[str] = list(node_ids)
        self.edges: List[Edge] = list(edges)

        self._adjacency: Dict[str, List[str]] = {node_id: [] for node_id in self.node_ids}
        self._in_degree: Dict[str, int] = {node_id: 0 for node_id in self.node_ids}

        for edge in self.edges:
            if edge.source_node_id not in self._adjacency:
                raise InvalidGraphError(f"Edge source node does not exist: {edge.source_node_id}")
            if edge.target_node_id not in self._in_degree:
                raise InvalidGraphError(f"Edge target node does not exist: {edge.target_node_id}")
            self._adjacency[edge.source_node_id].append(edge.target_node_id)
            self._in_degree[edge.target_node_id] += 1

    def topological_sort(self) -> List[str]:
        """
        Kahn's algorithm.

        Nodes whose in-degree never drops to 0 (cycle members and everything
        downstream of them) are left out of the result.

        Returns:
            Node ids, each at most once, every edge source before its target
        """
        in_degree = self._in_degree.copy()
        queue = deque(node_id for node_id in self.node_ids if in_degree[node_id] == 0)
        result: List[str] = []

        while queue:
            node_id = queue.popleft()
            result.append(node_id)

            for target in self._adjacency[node_id]:
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    queue.append(target)

        return result

    def starved_nodes(self, order: List[str] | None = None) -> List[str]:
        """Nodes missing from the topological order, in creation order"""
        if order is None:
            order = self.topological_sort()
        scheduled = set(order)
        return [node_id for node_id in self.node_ids if node_id not in scheduled]

    def cycle_members(self, starved: List[str] | None = None) -> List[str]:
        """
        Starved nodes that reach themselves through their successors.

        The remaining starved nodes only sit downstream of a cycle.
        """
        if starved is None:
            starved = self.starved_nodes()
        candidates = set(starved)
        members: List[str] = []

        for node_id in starved:
            seen = set()
            queue = deque(t for t in self._adjacency[node_id] if t in candidates)
            while queue:
                current = queue.popleft()
                if current == node_id:
                    members.append(node_id)
                    break
                if current in seen:
                    continue
                seen.add(current)
                queue.extend(t for t in self._adjacency[current] if t in candidates)

        return members

    def execution_order(self, strict: bool = True) -> List[str]:
        """
        Args:
            strict: Raise instead of silently dropping starved nodes

        Raises:
            CyclicDependencyError: strict and at least one node is starved
        """
        order = self.topological_sort()
        if strict:
            starved = self.starved_nodes(order)
            if starved:
                raise CyclicDependencyError(starved)
        return order

    def get_successors(self, node_id: str) -> List[str]:
        return list(self._adjacency.get(node_id, []))

    def get_predecessors(self, node_id: str) -> List[str]:
        return [e.source_node_id for e in self.edges if e.target_node_id == node_id]

    def __repr__(self) -> str:
        return f"ExecutionGraph(nodes={len(self.node_ids)}, edges={len(self.edges)})"
