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

""" Quadric error metrics.

Error quadrics for mesh decimation as introduced in **Surface
Simplification Using Quadric Error Metrics** by Michael Garland and Paul S.
Heckbert (SIGGRAPH 1997).

The quadric of a plane :math:`\\mathbf{p} = (a, b, c, d)` with unit normal
:math:`(a, b, c)` is the symmetric matrix
:math:`K = \\mathbf{p} \\mathbf{p}^T`. The squared distance of a point
:math:`\\mathbf{x}` to the plane is :math:`\\bar{\\mathbf{x}}^T K
\\bar{\\mathbf{x}}` with homogeneous coordinates
:math:`\\bar{\\mathbf{x}} = (\\mathbf{x}, 1)`. Sums of quadrics measure
sums of squared distances.
"""

import numpy as np

import halfmesh.linalg as linalg

#: Systems with a larger condition number count as singular.
COND_LIMIT = 1e10


def face_quadric(face):
    """ Fundamental error quadric of a triangle.

    Parameters
    ----------
    face : Face
        Triangular face.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
        Quadric of the supporting plane. The zero matrix for a degenerate
        triangle.
    """
    p = linalg.plane(*(v.point for v in face))
    return np.outer(p, p)


def vertex_quadric(vertex):
    """ Vertex error quadric.

    Sum of the quadrics of all incident faces. Requires the
    :attr:`~halfmesh.hds.Face.quadric` attribute of these faces to be set.

    Parameters
    ----------
    vertex : Vertex
        Vertex of a triangle mesh.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
    """
    quadric = np.zeros((4, 4))

    for f in vertex._fiter():
        quadric += f.quadric

    return quadric


def error(quadric, point):
    """ Quadric error of a point.

    Parameters
    ----------
    quadric : ~numpy.ndarray, shape (4, 4)
        Error quadric.
    point : array_like, shape (3, )
        Point in :math:`\\mathbb{R}^3`.

    Returns
    -------
    float
        The value :math:`\\bar{\\mathbf{x}}^T Q \\bar{\\mathbf{x}}`, clamped
        to be non-negative.
    """
    x = np.append(point, 1.0)
    return max(0.0, float(x @ quadric @ x))


def optimal_point(quadric, fallback):
    """ Minimizer of a quadric error.

    The gradient of the quadric form vanishes at the solution of
    :math:`A \\mathbf{x} = -\\mathbf{b}` where :math:`A` is the upper left
    3x3 block of `quadric` and :math:`\\mathbf{b}` the upper part of its
    last column.

    Parameters
    ----------
    quadric : ~numpy.ndarray, shape (4, 4)
        Error quadric.
    fallback : ~numpy.ndarray, shape (3, )
        Returned if the linear system is singular or ill-conditioned.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
    """
    A = quadric[:3, :3]
    b = quadric[:3, 3]

    try:
        with np.errstate(divide='ignore', invalid='ignore'):
            if np.linalg.cond(A) < COND_LIMIT:
                return np.linalg.solve(A, -b)
    except np.linalg.LinAlgError:
        pass

    return np.array(fallback, dtype=float)


class EdgeRecord:
    """ Collapse candidate.

    Combined quadric of the edge's endpoints, the position minimizing
    its error, and the error at that position. Requires the
    :attr:`~halfmesh.hds.Vertex.quadric` attribute of both endpoints to be
    set.

    Parameters
    ----------
    edge : Edge
        Edge of a triangle mesh.

    Attributes
    ----------
    edge : Edge
        The edge.
    quadric : ~numpy.ndarray, shape (4, 4)
        Sum of endpoint quadrics.
    optimal_point : ~numpy.ndarray, shape (3, )
        Collapse position, the edge midpoint if the quadric's linear
        system is singular.
    cost : float
        Quadric error at :attr:`optimal_point`.
    """

    def __init__(self, edge):
        v, w = edge

        self.edge = edge
        self.quadric = v.quadric + w.quadric
        self.optimal_point = optimal_point(self.quadric, edge.midpoint)
        self.cost = error(self.quadric, self.optimal_point)

    def __repr__(self):
        return f'EdgeRecord({self.edge!r}, cost={self.cost:.6g})'
