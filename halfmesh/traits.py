# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Geometric mesh traits.

Convenience functions to compute common geometric mesh traits like
vertex and face normals, areas, and centroids.
"""

import numpy as np

import halfmesh.linalg as linalg


def bounds(mesh):
    """ Bounding box vertices.

    Corner vertices of the axis-aligned bounding box of all vertices that
    are not deleted.

    Parameters
    ----------
    mesh : Mesh
        A mesh with at least one vertex.

    Returns
    -------
    a : ~numpy.ndarray
        Holds the minimum value for each dimension.
    b : ~numpy.ndarray
        Holds the maximum value for each dimension.
    """
    points = mesh.soup()[0]
    return np.min(points, axis=0), np.max(points, axis=0)


def centroid(mesh):
    """ Mean of vertex coordinates.

    Parameters
    ----------
    mesh : Mesh
        A mesh with at least one vertex.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
    """
    return np.mean(mesh.soup()[0], axis=0)


def face_normal(face):
    """ Face normal.

    Compute the unit normal of a triangle as cross product of edge
    vectors.

    Parameters
    ----------
    face : Face
        Triangular face of a mesh.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Unit normal vector, the zero vector for a degenerate face.
    """
    h = face.halfedge
    return linalg.unit(linalg.cross(h.vector, h.next.vector), eps=1e-15)


def face_area(face):
    """ Face area.

    Areas are only computed for triangular faces.

    Parameters
    ----------
    face : Face
        A triangular face.

    Raises
    ------
    NotImplementedError
        For non-triangular faces.

    Returns
    -------
    float
        Face area.
    """
    if len(face) != 3:
        raise NotImplementedError('triangular face required')

    h = face.halfedge
    return 0.5 * linalg.norm(linalg.cross(h.vector, h.next.vector))


def vertex_normal(vertex):
    """ Vertex normal.

    Area weighted average of the normals of all incident triangles.

    Parameters
    ----------
    vertex : Vertex
        Vertex of a triangle mesh.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Unit normal vector. The zero vector if all incident faces are
        degenerate.
    """
    normal = np.zeros(3)

    for h in vertex._hiter():
        if h._face is not None:
            # Twice the area times the unit normal of the incident face.
            normal += linalg.cross(h.vector, -h._prev.vector)

    return linalg.unit(normal, eps=1e-15)


def vertex_centroid(vertex):
    """ Centroid of the one-ring.

    Parameters
    ----------
    vertex : Vertex
        Vertex of a mesh.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Arithmetic mean of the coordinates of adjacent vertices.
    """
    points = [w.point for w in vertex._viter()]
    return sum(points) / len(points)


def mean_edge_length(mesh):
    """ Average edge length.

    Parameters
    ----------
    mesh : Mesh
        A mesh with at least one edge.

    Returns
    -------
    float
    """
    total, count = 0.0, 0

    for e in mesh._eiter():
        total += e.length
        count += 1

    return total / count
