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

""" Basic vector math.
"""

import math
import numpy as np


def cross(u, v):
    r""" Cross product.

    Alternative to NumPy's vectorized :func:`~numpy.cross` function.

    Parameters
    ----------
    u, v : array_like, shape (3, )
        Vector in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Cross product of vectors :math:`\mathbf{u}` and :math:`\mathbf{v}`.
    """
    u0, u1, u2 = u
    v0, v1, v2 = v

    return np.array([u1*v2 - u2*v1,
                     u2*v0 - u0*v2,
                     u0*v1 - u1*v0])


def norm(u):
    r""" Length of vector.

    Alternative to NumPy's vectorized :func:`~numpy.linalg.norm` function.

    Parameters
    ----------
    u : array_like, shape (n, )
        Vector in :math:`\mathbb{R}^n`.

    Returns
    -------
    float
        Euclidean length of the vector :math:`\mathbf{u}`.
    """
    return math.sqrt(u.dot(u))


def unit(u, eps=0.0):
    r""" Vector normalization.

    Convenience function to normalize a vector.

    Parameters
    ----------
    u : ~numpy.ndarray, shape (3, )
        Vector in :math:`\mathbb{R}^3`.
    eps : float, optional
        Vectors not longer than `eps` are mapped to the zero vector.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Normalized copy of input vector.
    """
    length = norm(u)

    if length <= eps:
        return np.zeros_like(u, dtype=float)

    return u / length


def tangential(u, n):
    r""" Tangential component.

    Projection of :math:`\mathbf{u}` onto the plane orthogonal to the
    unit vector :math:`\mathbf{n}`, i.e., :math:`\mathbf{u} - \mathbf{n}
    (\mathbf{n} \cdot \mathbf{u})`.

    Parameters
    ----------
    u : ~numpy.ndarray, shape (3, )
        Vector to be projected.
    n : ~numpy.ndarray, shape (3, )
        Unit normal vector.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Projected vector.
    """
    return u - n * n.dot(u)


def plane(p0, p1, p2):
    r""" Homogeneous plane coordinates.

    The plane through three points in the form :math:`(\mathbf{n}, d)`
    with unit normal :math:`\mathbf{n}` oriented by the right-hand rule
    and :math:`d = -\mathbf{n} \cdot \mathbf{p}_0`, so that the signed
    distance of a point :math:`\mathbf{x}` is
    :math:`(\mathbf{x}, 1) \cdot (\mathbf{n}, d)`.

    Parameters
    ----------
    p0, p1, p2 : ~numpy.ndarray, shape (3, )
        Points in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (4, )
        Plane coordinates. The zero vector for collinear points.
    """
    n = unit(cross(p1 - p0, p2 - p0), eps=1e-15)
    return np.append(n, -n.dot(p0))
