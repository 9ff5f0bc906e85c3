"""Quadtree stored as a flat array of nodes, with variance-based filtering."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(slots=True)
class Node:
    """One quadtree node: mean, error term, uniformity flag and variance."""

    mean: int = 0
    error: int = 0
    uniform: bool = True
    variance: float = 0.0


def node_count(levels: int) -> int:
    """Total number of nodes of a quadtree with ``levels`` levels below the root."""
    if levels < 0:
        return 0
    return (4 ** (levels + 1) - 1) // 3


def max_level(rows: int, cols: int) -> int:
    """Largest ``k`` with ``2**k`` not above the larger image dimension."""
    return max(rows, cols).bit_length() - 1


class QuadTree:
    """A complete quadtree; children of node ``i`` are ``4*i+1`` to ``4*i+4``."""

    def __init__(self, levels: int) -> None:
        self.levels = levels
        self.nodes = [Node() for _ in range(node_count(levels))]

    @classmethod
    def for_image(cls, rows: int, cols: int) -> QuadTree:
        """Create an empty tree deep enough for an image of the given size."""
        return cls(max_level(rows, cols))

    def __len__(self) -> int:
        return len(self.nodes)

    def _is_leaf(self, index: int) -> bool:
        total = len(self.nodes)
        return not any(
            child < total and not self.nodes[child].uniform
            for child in range(4 * index, 4 * index + 4)
        )

    def _compute_variance(self, index: int) -> float:
        node = self.nodes[index]
        squares = 0.0
        child_variances = 0.0
        for child_index in range(4 * index, 4 * index + 4):
            child = self.nodes[child_index]
            squares += (node.mean - child.mean) ** 2
            child_variances += child.variance * child.variance
        node.variance = math.sqrt((child_variances + squares) / 4.0)
        return node.variance

    def _update_variances(self) -> None:
        for index in range(len(self.nodes)):
            if not self._is_leaf(index):
                self._compute_variance(index)

    def _filter_node(self, index: int, sigma: float, alpha: float, beta: float) -> bool:
        node = self.nodes[index]
        if node.error == 0 and node.uniform:
            return True
        first = 4 * index + 1
        results = [
            self._filter_node(child, sigma * alpha, alpha**beta, beta)
            for child in range(first, first + 4)
        ]
        if not all(results) or node.variance > sigma:
            return False
        node.error = 0
        node.uniform = True
        return True

    def filter(self, alpha: float, beta: float) -> None:
        """Merge subtrees whose variance falls under a threshold scaled by ``alpha``."""
        self._update_variances()
        internal = self.nodes[: node_count(self.levels - 1)]
        if not internal:
            return
        largest = max(0.0, *(n.variance for n in internal))
        average = sum(n.variance for n in internal) / len(internal)
        sigma = average / largest if largest else math.nan
        self._filter_node(0, sigma, alpha, beta)