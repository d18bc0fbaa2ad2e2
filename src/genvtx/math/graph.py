"""Numba JIT compiled implementation of graph routines.

These routines are used to group points which live in the immediate vicinity
of each other (single-linkage clustering within a fixed radius).
"""

import numba as nb
import numpy as np

from .distance import sqeuclidean

__all__ = ["radius_graph", "union_find", "radius_components"]


@nb.njit(cache=True)
def radius_graph(x: nb.float64[:, :], radius: nb.float64) -> nb.int64[:, :]:
    """Builds an undirected radius graph.

    This function generates a list of edges in a graph which connects all nodes
    which live strictly within some radius R of each other.

    Parameters
    ----------
    x : np.ndarray
        (N, 3) array of node coordinates
    radius : float
        Radius within which to build connections in the graph

    Returns
    -------
    np.ndarray
        (E, 2) array of edges in the radius graph
    """
    # Initialize a data structure to hold edges
    num_nodes = len(x)
    max_edges = num_nodes * (num_nodes - 1) // 2
    edge_index = np.empty((max_edges, 2), dtype=np.int64)

    # Loop over pairs of nodes, add edges if the distance fits the bill. It is
    # cheaper to square the radius and use the squared Euclidean metric
    sqradius = radius * radius
    edge_count = 0
    for i in range(num_nodes):
        for j in range(i + 1, num_nodes):
            if sqeuclidean(x[i], x[j]) < sqradius:
                edge_index[edge_count, 0], edge_index[edge_count, 1] = i, j
                edge_count += 1

    return edge_index[:edge_count]


@nb.njit(cache=True)
def _find(parent: nb.int64[:], node: nb.int64) -> nb.int64:
    # Find the root, then compress the path leading to it
    root = node
    while parent[root] != root:
        root = parent[root]
    while parent[node] != root:
        next_node = parent[node]
        parent[node] = root
        node = next_node

    return root


@nb.njit(cache=True)
def union_find(edge_index: nb.int64[:, :], count: nb.int64) -> nb.int64[:]:
    """Numba implementation of the Union-Find algorithm.

    This function assigns a group to each node in a graph, provided
    a set of edges connecting the nodes together. Group IDs range from
    0 to N_groups-1 and are ordered by the first node in each group, which
    makes the labeling independent of the order of the edges.

    Parameters
    ----------
    edge_index : np.ndarray
        (E, 2) List of edges (sparse adjacency matrix)
    count : int
        Number of nodes in the graph, C

    Returns
    -------
    np.ndarray
        (C) Group assignments for each of the nodes in the graph
    """
    # Merge the groups connected by each edge, the lowest root wins
    parent = np.arange(count)
    for e in range(len(edge_index)):
        ri = _find(parent, edge_index[e, 0])
        rj = _find(parent, edge_index[e, 1])
        if ri < rj:
            parent[rj] = ri
        elif rj < ri:
            parent[ri] = rj

    # Relabel the groups contiguously
    labels = np.empty(count, dtype=np.int64)
    mapping = np.full(count, -1, dtype=np.int64)
    num_groups = 0
    for i in range(count):
        root = _find(parent, i)
        if mapping[root] < 0:
            mapping[root] = num_groups
            num_groups += 1
        labels[i] = mapping[root]

    return labels


@nb.njit(cache=True)
def radius_components(x: nb.float64[:, :], radius: nb.float64) -> nb.int64[:]:
    """Groups points into the connected components of their radius graph.

    Parameters
    ----------
    x : np.ndarray
        (N, 3) array of point coordinates
    radius : float
        Linking distance

    Returns
    -------
    np.ndarray
        (N) Group assignment of each point
    """
    return union_find(radius_graph(x, radius), len(x))
