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

""" Combinatorial mesh item neighborhood iterators.

Adjacent/incident mesh items are visited in the rotational order
determined by the halfedge structure.

Note
----
When applied to a :class:`~halfmesh.hds.Mesh` instance, all iterators
**skip** deleted mesh items and visit the remaining ones in creation
order. Pass ``frozen=True`` to iterate over a snapshot that stays valid
while the mesh is modified; items deleted after the snapshot was taken
are still produced and have to be checked via their ``deleted``
attribute.
"""


def verts(obj, frozen=False):
    """ Vertex iterator.

    The returned iterator traverses adjacent/incident vertices
    of `obj` depending on its type:

    .. table::
       :width: 100%
       :widths: 20, 80

       =============== ================================================
       :class:`Vertex` traversal of adjacent vertices
       --------------- ------------------------------------------------
       :class:`Face`   traversal of incident vertices
       --------------- ------------------------------------------------
       :class:`Mesh`   in-order traversal of all vertices
       =============== ================================================

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object.
    frozen : bool, optional
        Iterate over a snapshot.

    Yields
    ------
    Vertex
    """
    if frozen:
        return iter(list(obj._viter()))

    return obj._viter()


def edges(obj, frozen=False):
    """ Edge iterator.

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object. For a vertex the incident edges are visited,
        for a face the edges of its boundary loop.
    frozen : bool, optional
        Iterate over a snapshot.

    Yields
    ------
    Edge
    """
    if frozen:
        return iter(list(obj._eiter()))

    return obj._eiter()


def halfs(obj, frozen=False):
    """ Halfedge iterator.

    .. table::
       :width: 100%
       :widths: 20, 80

       =============== ================================================
       :class:`Vertex` traversal of outward pointing halfedges
       --------------- ------------------------------------------------
       :class:`Face`   traversal of the face's halfedge loop
       --------------- ------------------------------------------------
       :class:`Mesh`   in-order traversal of all halfedges
       =============== ================================================

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object.
    frozen : bool, optional
        Iterate over a snapshot.

    Yields
    ------
    Halfedge
    """
    if frozen:
        return iter(list(obj._hiter()))

    return obj._hiter()


def faces(obj, frozen=False):
    """ Face iterator.

    A vertex :math:`v` and a face :math:`f` are incident if
    :math:`v \\in f`. Two faces are incident if they share a common edge.

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object.
    frozen : bool, optional
        Iterate over a snapshot.

    Yields
    ------
    Face
    """
    if frozen:
        return iter(list(obj._fiter()))

    return obj._fiter()
