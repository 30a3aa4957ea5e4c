"""Shared mesh fixtures."""

import numpy as np
import pytest

from halfmesh.hds import Mesh


def icosahedron_soup():
    """Unit icosahedron, outward oriented faces."""
    t = (1.0 + np.sqrt(5.0)) / 2.0

    points = np.array([
        [-1, t, 0], [1, t, 0], [-1, -t, 0], [1, -t, 0],
        [0, -1, t], [0, 1, t], [0, -1, -t], [0, 1, -t],
        [t, 0, -1], [t, 0, 1], [-t, 0, -1], [-t, 0, 1],
    ], dtype=float)
    points /= np.linalg.norm(points, axis=1)[:, None]

    faces = [
        [0, 11, 5], [0, 5, 1], [0, 1, 7], [0, 7, 10], [0, 10, 11],
        [1, 5, 9], [5, 11, 4], [11, 10, 2], [10, 7, 6], [7, 1, 8],
        [3, 9, 4], [3, 4, 2], [3, 2, 6], [3, 6, 8], [3, 8, 9],
        [4, 9, 5], [2, 4, 11], [6, 2, 10], [8, 6, 7], [9, 8, 1],
    ]

    return points, faces


def grid_soup(n):
    """Planar n x n grid of unit squares, each split into two triangles."""
    points = np.array([[i, j, 0.0]
                       for i in range(n + 1) for j in range(n + 1)])

    def v(i, j):
        return i * (n + 1) + j

    faces = []

    for i in range(n):
        for j in range(n):
            faces.append([v(i, j), v(i + 1, j), v(i + 1, j + 1)])
            faces.append([v(i, j), v(i + 1, j + 1), v(i, j + 1)])

    return points, faces


def find_edge(mesh, i, j):
    """Live edge joining the vertices with indices i and j, or None."""
    for e in mesh.edges:
        if {v.index for v in e} == {i, j}:
            return e

    return None


def euler(mesh):
    """Euler characteristic V - E + F."""
    v, e, f = mesh.size
    return v - e + f


@pytest.fixture
def icosahedron():
    """Closed genus 0 mesh, every vertex has degree 5."""
    return Mesh(*icosahedron_soup(), name='icosahedron')


@pytest.fixture
def tetrahedron():
    points = [[1, 1, 1], [1, -1, -1], [-1, 1, -1], [-1, -1, 1]]
    faces = [[0, 1, 2], [0, 3, 1], [0, 2, 3], [1, 3, 2]]
    return Mesh(points, faces, name='tetrahedron')


@pytest.fixture
def octahedron():
    """Closed mesh, every vertex has degree 4."""
    points = [[1, 0, 0], [-1, 0, 0], [0, 1, 0],
              [0, -1, 0], [0, 0, 1], [0, 0, -1]]
    faces = [[0, 2, 4], [2, 1, 4], [1, 3, 4], [3, 0, 4],
             [2, 0, 5], [1, 2, 5], [3, 1, 5], [0, 3, 5]]
    return Mesh(points, faces, name='octahedron')


@pytest.fixture
def triangle():
    return Mesh([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 2]])


@pytest.fixture
def grid():
    """Open 4 x 4 grid in the xy-plane."""
    return Mesh(*grid_soup(4), name='grid')
