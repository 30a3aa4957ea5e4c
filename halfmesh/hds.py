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

""" Halfedge data structure.

A manifold triangle mesh (with or without boundary) is described by four
containers, one for each kind of mesh item:

    - a list of :class:`Vertex` objects,
    - a list of :class:`Edge` objects,
    - a list of :class:`Halfedge` objects,
    - and a list of :class:`Face` objects.

These containers and the relations between their items are managed by the
:class:`Mesh` class. Items are stored in creation order. Topological edits
never reuse items of another kind; removed items are flagged as deleted
and stay in their containers until :meth:`Mesh.clean` is called.

Boundary halfedges are proper :class:`Halfedge` instances whose
:attr:`~Halfedge.face` is :obj:`None`. They are linked into closed loops,
one loop per boundary component.

Note
----
Public properties of a deleted item raise :class:`StaleElementError`.
Internal code uses the underscore attributes directly.
"""

import logging
from pathlib import Path

import numpy as np

import halfmesh.obj as obj
import halfmesh.flags as flags

logger = logging.getLogger(__name__)


def _alive(item):
    """ Return `item`, raise :class:`StaleElementError` if it was removed.
    """
    if item._deleted:
        raise StaleElementError(f'{item!r} has been removed from its mesh')

    return item


def _link(*halfs):
    """ Close a loop of halfedges by setting next and prev pointers.
    """
    for h, g in zip(halfs, halfs[1:] + halfs[:1]):
        h._next = g
        g._prev = h


def _triangle(face, *halfs):
    """ Make three halfedges the boundary loop of `face`.
    """
    _link(*halfs)

    for h in halfs:
        h._face = face

    face._halfedge = halfs[0]


class Mesh:
    """ Mesh kernel.

    The combinatorics of a mesh can be built by reading from a file or
    by converting a sequence of vertex coordinates and a sequence of face
    definitions to its halfedge representation.

    Parameters
    ----------
    points : array_like, optional
        Vertex coordinates of shape ``(n, 3)``. Always copied.
    faces : array_like, optional
        Face definitions, 0-based vertex indexing.
    name : str, optional
        Name tag.
    triangulate : bool, optional
        Fan-triangulate faces with more than three vertices.

    Raises
    ------
    InvalidTopologyError
        When trying to initialize a mesh from malformed or non-manifold
        data.

    Note
    ----
    Vertex coordinates are stored row by row in a single array. Items
    created by :meth:`split_edge` may grow that array, which detaches
    previously obtained :attr:`Vertex.point` views from the mesh.
    """

    def __init__(self, points=None, faces=None, *, name=None,
                 triangulate=False):
        if points is None and faces is not None:
            msg = "face definitions require 'points' argument != None"
            raise ValueError(msg)

        self._points = np.empty((0, 3))
        self._verts = []
        self._edges = []
        self._halfs = []
        self._faces = []

        # Incremented by every successful modification of the mesh
        # combinatorics.
        self._revision = 0

        if points is not None:
            self.build(points, [] if faces is None else faces,
                       triangulate=triangulate)

        # The corresponding property setter will strip any directory
        # prefix and type suffix from the name.
        self.name = name

    def __repr__(self):
        return f'Mesh(name={self._name!r}, size={self.size})'

    def __iter__(self):
        """ Face iterator.

        The returned iterator visits all faces of a mesh that are **not**
        marked as deleted in order of creation.

        Yields
        ------
        Face
            Next face in insertion order traversal.
        """
        return self._fiter()

    def __bool__(self):
        return True

    @property
    def points(self):
        """ Vertex coordinate array.

        Direct read and write access to vertex coordinates, one row per
        entry of the vertex container.

        :type: ~numpy.ndarray

        Note
        ----
        The vertex coordinate array contains coordinate entries of deleted
        vertices. Calling :meth:`clean` removes those entries.
        """
        return self._points[:len(self._verts)]

    @points.setter
    def points(self, value):
        self._points[:len(self._verts)] = value

    @property
    def vertices(self):
        """ Vertex iterator.

        Visits all vertices that are not marked as deleted in creation
        order. Each access returns a new iterator.

        :type: ~collections.abc.Iterator[Vertex]
        """
        return self._viter()

    @property
    def edges(self):
        """ Edge iterator.

        :type: ~collections.abc.Iterator[Edge]
        """
        return self._eiter()

    @property
    def halfedges(self):
        """ Halfedge iterator.

        Includes boundary halfedges.

        :type: ~collections.abc.Iterator[Halfedge]
        """
        return self._hiter()

    @property
    def faces(self):
        """ Face iterator.

        Same as ``iter(mesh)``.

        :type: ~collections.abc.Iterator[Face]
        """
        return self._fiter()

    @property
    def size(self):
        """ Mesh size.

        Mesh size **not** accounting for deleted items. The attribute
        value :math:`(v, e, f)` holds the number of vertices, the number
        of edges, and the number of faces.

        :type: (int, int, int)
        """
        return (sum(1 for _ in self._viter()),
                sum(1 for _ in self._eiter()),
                sum(1 for _ in self._fiter()))

    @property
    def triangular(self):
        """ Triangle mesh test.

        :type: bool
        """
        return all(len(f) == 3 for f in self._fiter())

    @property
    def revision(self):
        """ Modification counter.

        Incremented by :meth:`build`, :meth:`clean`, and by every
        successful flip, split, or collapse. Holders of item references
        compare revisions to detect that their references may be stale.

        :type: int
        """
        return self._revision

    @property
    def name(self):
        """ Name property.

        :type: str or None

        Note
        ----
        The stored string does not include a directory prefix or a type
        suffix.
        """
        return self._name

    @name.setter
    def name(self, value):
        self._name = value if value is None else Path(value).stem

    @classmethod
    def read(cls, filename, *, triangulate=False):
        """ Read mesh from file.

        Parameters
        ----------
        filename : str or os.PathLike
            Name of an OBJ file.
        triangulate : bool, optional
            Fan-triangulate faces with more than three vertices.

        Raises
        ------
        InvalidTopologyError
            If the file describes a non-manifold mesh.

        Returns
        -------
        Mesh
            A new mesh instance, named after the file.
        """
        points, faces = obj.read(filename)
        return cls(points, faces, name=filename, triangulate=triangulate)

    def write(self, filename):
        """ Write mesh to file.

        Deleted items are skipped, vertices are renumbered consecutively.

        Parameters
        ----------
        filename : str or os.PathLike
            Name of output file.
        """
        obj.write(filename, *self.soup())

    def soup(self):
        """ Polygon soup representation.

        Returns
        -------
        points : ~numpy.ndarray
            Coordinates of live vertices in creation order.
        faces : list[list[int]]
            Face definitions referring to rows of `points`.
        """
        verts = list(self._viter())
        index = {v: i for i, v in enumerate(verts)}

        points = np.array([self._points[v._idx] for v in verts],
                          dtype=float).reshape(-1, 3)
        faces = [[index[v] for v in f._viter()] for f in self._fiter()]

        return points, faces

    def copy(self):
        """ Mesh copy.

        Duplicate the mesh combinatorics and vertex coordinates. The copy
        does not contain deleted items.

        Returns
        -------
        Mesh
            Copy of the mesh.
        """
        return Mesh(*self.soup(), name=self._name)

    def build(self, points, faces, *, triangulate=False):
        """ Build halfedge structure from a polygon soup.

        Halfedges are paired by matching each directed edge ``(i, j)`` of
        a face with the reverse ``(j, i)`` of another face. Directed edges
        without a reverse get a boundary halfedge as their twin. Boundary
        halfedges are then linked into loops.

        Parameters
        ----------
        points : array_like
            Vertex coordinates of shape ``(n, 3)``.
        faces : iterable
            Face definitions, 0-based vertex indexing.
        triangulate : bool, optional
            Fan-triangulate faces with more than three vertices.

        Raises
        ------
        InvalidTopologyError
            If a face is malformed, an edge is shared by more than two
            faces (or by two inconsistently oriented faces), a vertex is
            non-manifold, or a vertex is not referenced by any face.

        Note
        ----
        The mesh is only modified if the build succeeds.
        """
        points = np.array(points, dtype=float)

        if points.size == 0:
            points = points.reshape(0, 3)

        if points.ndim != 2 or points.shape[1] != 3:
            msg = f'vertex coordinates of shape (n, 3) expected, got {points.shape}'
            raise InvalidTopologyError(msg)

        n = len(points)
        verts = [Vertex(i, self) for i in range(n)]
        edges, halfs, faces_ = [], [], []

        # Maps directed index pairs (i, j) to face halfedges.
        directed = dict()

        for corners in faces:
            corners = [int(i) for i in corners]

            if len(corners) < 3:
                raise InvalidTopologyError(f'face {corners} has less than '
                                           'three vertices')

            if len(set(corners)) != len(corners):
                raise InvalidTopologyError(f'face {corners} repeats a vertex')

            if any(i < 0 or i >= n for i in corners):
                raise InvalidTopologyError(f'face {corners} refers to a '
                                           f'vertex outside range({n})')

            if triangulate and len(corners) > 3:
                loops = [[corners[0], corners[k], corners[k+1]]
                         for k in range(1, len(corners)-1)]
            else:
                loops = [corners]

            for loop in loops:
                face = Face(len(faces_), self)
                cycle = []

                for k, i in enumerate(loop):
                    key = (i, loop[(k+1) % len(loop)])

                    if key in directed:
                        msg = (f'edge {key} is shared by more than two faces '
                               'or by inconsistently oriented faces')
                        raise InvalidTopologyError(msg)

                    h = Halfedge(len(halfs), self)
                    h._origin = verts[i]
                    h._face = face

                    directed[key] = h
                    halfs.append(h)
                    cycle.append(h)

                _link(*cycle)
                face._halfedge = cycle[0]
                faces_.append(face)

        # Pair halfedges. An unpaired halfedge (i, j) gets a boundary
        # twin with origin j. Each vertex can be the origin of at most
        # one boundary halfedge.
        boundary = dict()

        for (i, j), h in directed.items():
            if h._twin is not None:
                continue

            t = directed.get((j, i))

            if t is None:
                if j in boundary:
                    raise InvalidTopologyError(f'vertex #{j} is non-manifold')

                t = Halfedge(len(halfs), self)
                t._origin = verts[j]
                halfs.append(t)
                boundary[j] = t

            edge = Edge(len(edges), self)
            edge._halfedge = h
            edges.append(edge)

            h._twin, t._twin = t, h
            h._edge = t._edge = edge

        # A boundary halfedge pointing to vertex w continues with the
        # boundary halfedge leaving w.
        for t in boundary.values():
            w = t._twin._origin._idx

            if w not in boundary:
                raise InvalidTopologyError(f'vertex #{w} is non-manifold')

            t._next = boundary[w]
            boundary[w]._prev = t

        outgoing = [0] * n

        for h in halfs:
            outgoing[h._origin._idx] += 1

            if h._origin._halfedge is None:
                h._origin._halfedge = h

        for v in verts:
            if v._halfedge is None:
                raise InvalidTopologyError(f'vertex #{v._idx} is isolated')

            # More than one fan of faces around a vertex.
            if v._compute_degree() != outgoing[v._idx]:
                raise InvalidTopologyError(f'vertex #{v._idx} is non-manifold')

        # Items of a previous build must not alias the new containers.
        for items in (self._verts, self._edges, self._halfs, self._faces):
            for item in items:
                item._deleted = True
                item._invalidate()

        self._points = points
        self._verts = verts
        self._edges = edges
        self._halfs = halfs
        self._faces = faces_
        self._revision += 1

        logger.debug(f'built mesh with {len(verts)} vertices, {len(edges)} '
                     f'edges, {len(faces_)} faces, {len(boundary)} '
                     'boundary halfedges')

    def clear(self):
        """ Remove all mesh items.
        """
        for items in (self._verts, self._edges, self._halfs, self._faces):
            for item in items:
                item._deleted = True
                item._invalidate()

            items.clear()

        self._points = np.empty((0, 3))
        self._revision += 1

    def clean(self):
        """ Garbage collection.

        Removes all deleted mesh items from the respective containers and
        compacts the coordinate array. Previously obtained indices and
        :attr:`points` views become invalid.

        Note
        ----
        Use sparingly.
        """
        vidx = [i for i, v in enumerate(self._verts) if not v._deleted]
        self._points = self._points[vidx]

        for items in (self._verts, self._edges, self._halfs, self._faces):
            for item in items:
                if item._deleted:
                    item._invalidate()

            items[:] = [item for item in items if not item._deleted]

            for i, item in enumerate(items):
                item._idx = i

        self._revision += 1

        logger.debug(f'cleaned mesh, size {self.size}')

    def reset_scratch(self):
        """ Reset per-algorithm scratch data.

        Clears staged positions, quadrics, centroids, edge records, and
        the ``NEW`` flags of all items.
        """
        for v in self._verts:
            v.new_point = None
            v.quadric = None
            v.centroid = None
            v._flags &= ~flags.VertexFlag.NEW

        for e in self._edges:
            e.new_point = None
            e.record = None
            e._flags &= ~flags.EdgeFlag.NEW

        for f in self._faces:
            f.quadric = None

    def check(self):
        """ Verify the halfedge structure.

        Raises
        ------
        InvalidTopologyError
            Describing the first violated invariant.
        """
        outgoing = dict()
        edges = set()

        for h in self._hiter():
            h._check()
            outgoing[h._origin] = outgoing.get(h._origin, 0) + 1

        for e in self._eiter():
            e._check()
            key = frozenset((e._halfedge._origin, e._halfedge._twin._origin))

            if key in edges:
                raise InvalidTopologyError(f'duplicate edge {e!r}')

            edges.add(key)

        for v in self._viter():
            v._check(outgoing.get(v, 0))

        for f in self._fiter():
            f._check()

    def flip_edge(self, edge, *, strict=False):
        """ Flip an interior edge.

        The edge shared by triangles ``(a, b, c)`` and ``(b, a, d)`` is
        replaced by the edge ``(d, c)``. No mesh items are created or
        deleted, the halfedges of `edge` and the loops of its faces are
        rewired.

        Parameters
        ----------
        edge : Edge
            Edge to be flipped.
        strict : bool, optional
            Raise instead of returning :obj:`None` if the flip is not
            possible.

        Raises
        ------
        InvalidOperationError
            In strict mode, if `edge` is not :attr:`~Edge.flippable`.

        Returns
        -------
        Edge or None
            The flipped edge, :obj:`None` if the edge was not flipped.
        """
        veto = edge._flip_veto()

        if veto is not None:
            return self._reject(f'cannot flip {edge!r}: {veto}', strict)

        h = edge._halfedge
        t = h._twin

        h1 = h._next
        h2 = h1._next
        t1 = t._next
        t2 = t1._next

        a, b = h._origin, t._origin
        c, d = h2._origin, t2._origin

        if a._halfedge is h:
            a._halfedge = t1

        if b._halfedge is t:
            b._halfedge = h1

        h._origin = d
        t._origin = c

        _triangle(h._face, h, h2, t1)
        _triangle(t._face, t, t2, h1)

        self._revision += 1
        return edge

    def split_edge(self, edge, point=None, *, strict=False):
        """ Split an edge.

        Inserts a new vertex `m` on `edge` and connects it to the vertices
        opposite the edge. For an interior edge ``(a, b)`` two triangles
        become four (three new edges, two new faces), for a boundary edge
        one triangle becomes two (two new edges, one new face). The
        halfedges of `edge` now join ``a`` and ``m``.

        Parameters
        ----------
        edge : Edge
            Edge to be split.
        point : array_like, optional
            Coordinates of the new vertex, defaults to the edge midpoint.
        strict : bool, optional
            Raise instead of returning :obj:`None` if the split is not
            possible.

        Raises
        ------
        InvalidOperationError
            In strict mode, if `edge` is deleted or incident to a face
            that is not a triangle.

        Returns
        -------
        Vertex or None
            The new vertex, :obj:`None` if the edge was not split.
        """
        if edge._deleted:
            return self._reject(f'cannot split {edge!r}: edge has been '
                                'removed', strict)

        h = edge._halfedge

        if h._face is None:
            h = h._twin

        t = h._twin

        if len(h._face) != 3 or (t._face is not None and len(t._face) != 3):
            return self._reject(f'cannot split {edge!r}: incident face is '
                                'not a triangle', strict)

        if point is None:
            point = 0.5 * (self._points[h._origin._idx] +
                           self._points[t._origin._idx])

        # Collect pointers before any rewiring happens.
        b = t._origin
        h1 = h._next
        h2 = h1._next
        c = h2._origin
        t1 = t._next
        t2 = t1._next
        tp = t._prev

        m = self._new_vertex(point)

        # Sub-edge (m, b).
        g = self._new_halfedge(m)
        gt = self._new_halfedge(b)
        self._new_edge(g, gt)

        t._origin = m
        m._halfedge = g

        if b._halfedge is t:
            b._halfedge = gt

        # Cross edge (m, c) splits the face of h.
        k = self._new_halfedge(m)
        kt = self._new_halfedge(c)
        self._new_edge(k, kt)

        _triangle(h._face, h, k, h2)
        _triangle(self._new_face(), g, h1, kt)

        if t._face is not None:
            d = t2._origin

            # Cross edge (m, d) splits the face of t.
            l = self._new_halfedge(m)
            lt = self._new_halfedge(d)
            self._new_edge(l, lt)

            _triangle(t._face, t, t1, lt)
            _triangle(self._new_face(), gt, l, t2)
        else:
            # Boundary loop ... -> tp -> t -> ... becomes
            # ... -> tp -> gt -> t -> ...
            tp._next = gt
            gt._prev = tp
            gt._next = t
            t._prev = gt

        self._revision += 1
        return m

    def collapse_edge(self, edge, point=None, *, strict=False):
        """ Collapse an edge.

        Merges the endpoints of `edge` into a single vertex. The edge,
        its incident faces, and one further edge per incident face are
        deleted. All halfedges leaving the removed endpoint are moved to
        the surviving endpoint.

        Parameters
        ----------
        edge : Edge
            Edge to be collapsed.
        point : array_like, optional
            Coordinates of the merged vertex, defaults to the edge
            midpoint.
        strict : bool, optional
            Raise instead of returning :obj:`None` if the collapse is not
            possible.

        Raises
        ------
        InvalidOperationError
            In strict mode, if `edge` is not :attr:`~Edge.collapsible`.

        Returns
        -------
        Vertex or None
            The surviving vertex, :obj:`None` if the edge was not
            collapsed.
        """
        veto = edge._collapse_veto()

        if veto is not None:
            return self._reject(f'cannot collapse {edge!r}: {veto}', strict)

        h = edge._halfedge

        if h._face is None:
            h = h._twin

        t = h._twin
        a, b = h._origin, t._origin

        if point is None:
            point = 0.5 * (self._points[a._idx] + self._points[b._idx])

        outgoing = list(b._hiter())

        # Triangle (a, b, c): glue the twins of (b, c) and (c, a) and keep
        # the edge of (c, a).
        h1 = h._next
        h2 = h1._next
        c = h2._origin
        o1, o2 = h1._twin, h2._twin
        kept = h2._edge

        o1._twin, o2._twin = o2, o1
        o1._edge = kept
        kept._halfedge = o2

        if c._halfedge is h2:
            c._halfedge = o1

        self._delete(h1, h2, h1._edge, h._face)

        if t._face is not None:
            # Triangle (b, a, d): glue the twins of (a, d) and (d, b) and
            # keep the edge of (a, d).
            t1 = t._next
            t2 = t1._next
            d = t2._origin
            p1, p2 = t1._twin, t2._twin
            kept = t1._edge

            p1._twin, p2._twin = p2, p1
            p2._edge = kept
            kept._halfedge = p1

            if d._halfedge is t2:
                d._halfedge = p1

            self._delete(t1, t2, t2._edge, t._face)
        else:
            t._prev._next = t._next
            t._next._prev = t._prev

        self._delete(h, t, edge, b)

        for x in outgoing:
            if not x._deleted:
                x._origin = a

        a._halfedge = o2
        self._points[a._idx] = point

        self._revision += 1
        return a

    def _reject(self, msg, strict):
        """ Report a rejected edit.
        """
        if strict:
            raise InvalidOperationError(msg)

        logger.debug(msg)
        return None

    def _delete(self, *items):
        for item in items:
            item._deleted = True

    def _new_vertex(self, point):
        """ Append a vertex, growing the coordinate array if necessary.
        """
        n = len(self._verts)

        if n == len(self._points):
            points = np.empty((max(2 * n, 8), 3))
            points[:n] = self._points[:n]
            self._points = points

        self._points[n] = point

        v = Vertex(n, self)
        self._verts.append(v)

        return v

    def _new_halfedge(self, origin):
        h = Halfedge(len(self._halfs), self)
        h._origin = origin
        self._halfs.append(h)

        return h

    def _new_edge(self, h, t):
        e = Edge(len(self._edges), self)
        e._halfedge = h
        self._edges.append(e)

        h._twin, t._twin = t, h
        h._edge = t._edge = e

        return e

    def _new_face(self):
        f = Face(len(self._faces), self)
        self._faces.append(f)

        return f

    def _viter(self):
        """ Generator expression skipping deleted vertices.
        """
        return (v for v in self._verts if not v._deleted)

    def _eiter(self):
        """ Generator expression skipping deleted edges.
        """
        return (e for e in self._edges if not e._deleted)

    def _hiter(self):
        """ Generator expression skipping deleted halfedges.
        """
        return (h for h in self._halfs if not h._deleted)

    def _fiter(self):
        """ Generator expression skipping deleted faces.
        """
        return (f for f in self._faces if not f._deleted)


class Vertex:
    """ Vertex class.

    Parameters
    ----------
    index : int
        Vertex index.
    parent : Mesh, optional
        The parent mesh object.

    Attributes
    ----------
    new_point : ~numpy.ndarray or None
        Staged coordinates (scratch).
    quadric : ~numpy.ndarray or None
        Accumulated error quadric of shape ``(4, 4)`` (scratch).
    centroid : ~numpy.ndarray or None
        Centroid of the one-ring (scratch).

    Note
    ----
    In addition to :attr:`index`, implementations of the special functions
    :meth:`~object.__int__` and :meth:`~object.__index__` are provided.
    The latter makes it possible to use vertex instances as array indices,
    e.g., ``mesh.points[v]``.
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent
        self._halfedge = None

        self._deleted = False
        self._flags = flags.VertexFlag(0)

        self.new_point = None
        self.quadric = None
        self.centroid = None

    def __repr__(self):
        return f'Vertex({self._idx})'

    def __str__(self):
        if self._deleted:
            return f'v {self._idx} [deleted]'

        if self._flags:
            return f'v {self._idx} {self.point} {self._flags}'

        return f'v {self._idx} {self.point}'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    @property
    def index(self):
        """ Vertex index.

        Position of the vertex in the vertex container of its mesh. Same
        as ``int(self)``. Changes when :meth:`Mesh.clean` is called.

        :type: int
        """
        return self._idx

    @property
    def mesh(self):
        """ Parent mesh.

        :type: Mesh
        """
        return _alive(self)._mesh

    @property
    def point(self):
        """ Vertex coordinates.

        Read and write access to vertex coordinates. View of a row of the
        parent mesh's coordinate array.

        :type: ~numpy.ndarray
        """
        return _alive(self)._mesh._points[self._idx]

    @point.setter
    def point(self, value):
        _alive(self)._mesh._points[self._idx] = value

    @property
    def flags(self):
        """ Vertex flags.

        :type: VertexFlag
        """
        return self._flags

    @flags.setter
    def flags(self, value):
        self._flags = value

    @property
    def is_new(self):
        """ Subdivision mark.

        :type: bool
        """
        return bool(self._flags & flags.VertexFlag.NEW)

    @is_new.setter
    def is_new(self, value):
        if value:
            self._flags |= flags.VertexFlag.NEW
        else:
            self._flags &= ~flags.VertexFlag.NEW

    @property
    def halfedge(self):
        """ Outward pointing halfedge.

        :type: Halfedge
        """
        return _alive(self)._halfedge

    @property
    def degree(self):
        """ Vertex degree.

        The number of adjacent vertices, equivalent to the number of
        incident edges.

        :type: int
        """
        return _alive(self)._compute_degree()

    @property
    def deleted(self):
        """ Internal state.

        Edge collapses render vertices as deleted when they do no longer
        contribute to a mesh's combinatorics.

        :type: bool
        """
        return self._deleted

    @property
    def boundary(self):
        """ Topological state.

        A vertex is a boundary vertex if it is the origin of a boundary
        halfedge.

        :type: bool
        """
        return any(h._face is None for h in _alive(self)._hiter())

    def _compute_degree(self):
        return sum(1 for _ in self._hiter())

    def _boundary_neighbors(self):
        """ Previous and next vertex along the boundary loop.

        Returns
        -------
        (Vertex, Vertex) or None
            :obj:`None` for interior vertices.
        """
        for h in self._hiter():
            if h._face is None:
                return h._prev._origin, h._twin._origin

        return None

    def _check(self, outgoing):
        """ Perform sanity checks.

        Parameters
        ----------
        outgoing : int
            Number of live halfedges with this vertex as origin.
        """
        h = self._halfedge

        if h is None or h._deleted:
            raise InvalidTopologyError(f'{self!r} has no valid halfedge')

        if h._origin is not self:
            raise InvalidTopologyError(f'{self!r} is not the origin of its '
                                       'halfedge')

        halfs = list(self._hiter())

        if len(halfs) != outgoing:
            raise InvalidTopologyError(f'{self!r} rotation visits '
                                       f'{len(halfs)} of {outgoing} '
                                       'outgoing halfedges')

        if sum(1 for x in halfs if x._face is None) > 1:
            raise InvalidTopologyError(f'{self!r} is non-manifold')

    def _invalidate(self):
        self._mesh = None
        self._halfedge = None

    def _viter(self):
        """ Adjacent vertex iterator.
        """
        return (h._twin._origin for h in self._hiter())

    def _eiter(self):
        """ Incident edge iterator.
        """
        return (h._edge for h in self._hiter())

    def _fiter(self):
        """ Incident face iterator.
        """
        return (h._face for h in self._hiter() if h._face is not None)

    def _hiter(self):
        """ Outgoing halfedge iterator.
        """
        h = self._halfedge

        if h is None:
            return

        while True:
            yield h
            h = h._prev._twin

            if h is self._halfedge:
                return


class Edge:
    """ Edge class.

    An undirected edge represented by one of its two halfedges.

    Parameters
    ----------
    index : int
        Edge index.
    parent : Mesh, optional
        The parent mesh object.

    Attributes
    ----------
    new_point : ~numpy.ndarray or None
        Staged coordinates of the vertex that will split this edge
        (scratch).
    record : EdgeRecord or None
        Collapse candidate data during decimation (scratch).
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent
        self._halfedge = None

        self._deleted = False
        self._flags = flags.EdgeFlag(0)

        self.new_point = None
        self.record = None

    def __repr__(self):
        return f'Edge({self._idx})'

    def __str__(self):
        if self._deleted:
            return f'e {self._idx} [deleted]'

        v, w = self
        return f'e {self._idx} ({v._idx}, {w._idx})'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    def __iter__(self):
        """ Vertex iterator.

        Produces the origin and target vertex of :attr:`halfedge`.

        Yields
        ------
        Vertex
            Next vertex.
        """
        h = _alive(self)._halfedge

        yield h._origin
        yield h._twin._origin

    def __contains__(self, vertex):
        h = _alive(self)._halfedge
        return vertex is h._origin or vertex is h._twin._origin

    @property
    def index(self):
        """ Edge index.

        :type: int
        """
        return self._idx

    @property
    def halfedge(self):
        """ One of the two halfedges of the edge.

        :type: Halfedge
        """
        return _alive(self)._halfedge

    @property
    def flags(self):
        """ Edge flags.

        :type: EdgeFlag
        """
        return self._flags

    @flags.setter
    def flags(self, value):
        self._flags = value

    @property
    def is_new(self):
        """ Subdivision mark.

        :type: bool
        """
        return bool(self._flags & flags.EdgeFlag.NEW)

    @is_new.setter
    def is_new(self, value):
        if value:
            self._flags |= flags.EdgeFlag.NEW
        else:
            self._flags &= ~flags.EdgeFlag.NEW

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    @property
    def boundary(self):
        """ Topological state.

        An edge is a boundary edge if one of its halfedges is a boundary
        halfedge.

        :type: bool
        """
        h = _alive(self)._halfedge
        return h._face is None or h._twin._face is None

    @property
    def vector(self):
        """ Edge direction vector.

        Same as ``self.halfedge.vector``.

        :type: ~numpy.ndarray
        """
        return _alive(self)._halfedge.vector

    @property
    def length(self):
        """ Edge length.

        :type: float
        """
        return float(np.linalg.norm(self.vector))

    @property
    def midpoint(self):
        """ Edge midpoint.

        :type: ~numpy.ndarray
        """
        v, w = self
        return 0.5 * (v.point + w.point)

    @property
    def collapsible(self):
        """ Topological state.

        An edge of a triangle mesh is collapsible if the one-rings of its
        endpoints intersect exactly in the vertices opposite the edge
        (link condition) and the collapse keeps the mesh a manifold
        without degenerate faces. In particular

            - an interior edge that joins two boundary vertices,
            - an edge of a boundary loop of length three,
            - an edge whose collapse leaves a vertex of degree less than
              three behind

        are not collapsible.

        :type: bool
        """
        return self._collapse_veto() is None

    @property
    def flippable(self):
        """ Topological state.

        An interior edge shared by two triangles can be flipped if the
        vertices opposite the edge are not adjacent.

        :type: bool
        """
        return self._flip_veto() is None

    def _flip_veto(self):
        """ Reason why the edge cannot be flipped or :obj:`None`.
        """
        if self._deleted:
            return 'edge has been removed'

        h = self._halfedge
        t = h._twin

        if h._face is None or t._face is None:
            return 'boundary edge'

        if len(h._face) != 3 or len(t._face) != 3:
            return 'incident face is not a triangle'

        c = h._prev._origin
        d = t._prev._origin

        if c is d or any(x is d for x in c._viter()):
            return 'opposite vertices are adjacent'

        return None

    def _collapse_veto(self):
        """ Reason why the edge cannot be collapsed or :obj:`None`.
        """
        if self._deleted:
            return 'edge has been removed'

        h = self._halfedge
        t = h._twin
        sides = [x for x in (h, t) if x._face is not None]

        if any(len(x._face) != 3 for x in sides):
            return 'incident face is not a triangle'

        a, b = h._origin, t._origin
        apexes = {x._prev._origin for x in sides}

        if len(apexes) != len(sides):
            return 'incident triangles share all vertices'

        a_ring = {x for x in a._viter() if x is not b}
        b_ring = {x for x in b._viter() if x is not a}

        if a_ring & b_ring != apexes:
            return 'link condition violated'

        if len(sides) == 1:
            if (t if h._face is not None else h)._loop_len() == 3:
                return 'boundary loop of length three'
        elif a.boundary and b.boundary:
            return 'interior edge joins two boundary vertices'

        if len(a_ring | b_ring) < 3:
            return 'merged vertex would have less than three neighbors'

        for x in apexes:
            if x._compute_degree() == 3 and not x.boundary:
                return f'opposite vertex {x!r} has degree three'

        return None

    def _check(self):
        h = self._halfedge

        if h is None or h._deleted or h._edge is not self:
            raise InvalidTopologyError(f'{self!r} has no valid halfedge')

    def _invalidate(self):
        self._mesh = None
        self._halfedge = None
        self.record = None


class Halfedge:
    """ Halfedge class.

    Halfedges store references to their origin vertex, their edge, the
    successor, predecessor, and twin halfedge as well as the incident face
    (the face to its left). A closed loop of halfedges defines a face and
    its orientation. For a boundary halfedge the loop is a boundary curve.

    Parameters
    ----------
    index : int
        Halfedge index.
    parent : Mesh, optional
        The parent mesh object.
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent

        self._origin = None
        self._twin = None
        self._next = None
        self._prev = None
        self._edge = None
        self._face = None

        self._deleted = False

    def __repr__(self):
        return f'Halfedge({self._idx})'

    def __str__(self):
        if self._deleted:
            return f'h {self._idx} [deleted]'

        return f'h {self._idx} ({self._origin._idx}, {self._twin._origin._idx})'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    def __iter__(self):
        yield self.origin
        yield self.target

    @property
    def index(self):
        """ Halfedge index.

        :type: int
        """
        return self._idx

    @property
    def origin(self):
        """ Halfedge origin vertex.

        :type: Vertex
        """
        return _alive(self)._origin

    @property
    def target(self):
        """ Halfedge target vertex, the origin of its twin.

        :type: Vertex
        """
        return _alive(self)._twin._origin

    @property
    def twin(self):
        """ Opposite halfedge.

        :type: Halfedge
        """
        return _alive(self)._twin

    @property
    def next(self):
        """ Successor halfedge.

        :type: Halfedge
        """
        return _alive(self)._next

    @property
    def prev(self):
        """ Predecessor halfedge.

        :type: Halfedge
        """
        return _alive(self)._prev

    @property
    def edge(self):
        """ Undirected edge.

        :type: Edge
        """
        return _alive(self)._edge

    @property
    def face(self):
        """ Incident face.

        The face to the left of the halfedge or :obj:`None` in case of a
        boundary halfedge.

        :type: Face
        """
        return _alive(self)._face

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    @property
    def boundary(self):
        """ Topological state.

        A halfedge is a boundary halfedge if its :attr:`face` attribute
        evaluates to :obj:`None`.

        :type: bool
        """
        return _alive(self)._face is None

    @property
    def vector(self):
        """ Halfedge direction vector.

        The vector ``self.target.point - self.origin.point``.

        :type: ~numpy.ndarray
        """
        points = _alive(self)._mesh._points
        return points[self._twin._origin._idx] - points[self._origin._idx]

    def _loop_len(self):
        """ Length of the halfedge loop starting at ``self``.
        """
        loop_len = 0
        h = self

        while True:
            loop_len += 1
            h = h._next

            if h is self:
                return loop_len

    def _check(self):
        if self._origin is None or self._origin._deleted:
            raise InvalidTopologyError(f'{self!r} has no valid origin')

        t = self._twin

        if t is None or t._deleted or t._twin is not self:
            raise InvalidTopologyError(f'{self!r} has no valid twin')

        if t._origin is self._origin:
            raise InvalidTopologyError(f'{self!r} is a self-loop')

        if self._next is None or self._next._deleted or \
                self._next._prev is not self:
            raise InvalidTopologyError(f'{self!r} has no valid successor')

        if self._prev is None or self._prev._deleted or \
                self._prev._next is not self:
            raise InvalidTopologyError(f'{self!r} has no valid predecessor')

        if self._next._origin is not t._origin:
            raise InvalidTopologyError(f'successor of {self!r} does not '
                                       'start at its target')

        if self._edge is None or self._edge._deleted or t._edge is not self._edge:
            raise InvalidTopologyError(f'{self!r} has no valid edge')

        if self._face is None and t._face is None:
            raise InvalidTopologyError(f'{self!r} and its twin are boundary '
                                       'halfedges')

        if self._face is not None and self._face._deleted:
            raise InvalidTopologyError(f'{self!r} refers to a deleted face')

        if self._next._face is not self._face:
            raise InvalidTopologyError(f'{self!r} and its successor belong '
                                       'to different loops')

    def _invalidate(self):
        self._mesh = None
        self._origin = None
        self._twin = None
        self._next = None
        self._prev = None
        self._edge = None
        self._face = None


class Face:
    """ Face class.

    A face is defined by the closed loop of halfedges starting at its
    :attr:`halfedge` attribute.

    Parameters
    ----------
    index : int
        Face index.
    parent : Mesh, optional
        The parent mesh object.

    Attributes
    ----------
    quadric : ~numpy.ndarray or None
        Error quadric of the supporting plane (scratch).


    The vertices of a face are visited in counter-clockwise order by

    .. code-block:: python

        for v in f:
            print(v)
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent
        self._halfedge = None

        self._deleted = False

        self.quadric = None

    def __repr__(self):
        return f'Face({self._idx})'

    def __str__(self):
        face = '[deleted]' if self._deleted else str([int(v) for v in self])

        return f'f {self._idx} {face}'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __len__(self):
        """ Face valence.

        Returns
        -------
        int
            Number of vertices.
        """
        return sum(1 for _ in self._hiter())

    def __bool__(self):
        return True

    def __iter__(self):
        """ Vertex iterator.

        The returned iterator visits the vertices of ``self`` starting
        with the ``self.halfedge.origin`` vertex.

        Yields
        ------
        Vertex
            Next vertex in counter-clockwise traversal.
        """
        return _alive(self)._viter()

    @property
    def index(self):
        """ Face index.

        :type: int
        """
        return self._idx

    @property
    def halfedge(self):
        """ Incident halfedge.

        :type: Halfedge
        """
        return _alive(self)._halfedge

    @property
    def valence(self):
        """ Face valence.

        Number of incident vertices. Same as ``len(self)``.

        :type: int
        """
        return len(_alive(self))

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    @property
    def boundary(self):
        """ Topological state.

        A face is a boundary face if one of its edges is a boundary edge.

        :type: bool
        """
        return any(h._twin._face is None for h in _alive(self)._hiter())

    @property
    def barycenter(self):
        """ Face barycenter.

        Arithmetic mean of vertex coordinates.

        :type: ~numpy.ndarray
        """
        return sum(v.point for v in self) / len(self)

    def _check(self):
        h = self._halfedge

        if h is None or h._deleted or h._face is not self:
            raise InvalidTopologyError(f'{self!r} has no valid halfedge')

        count = 0

        for x in self._hiter():
            count += 1

            if x._face is not self or count > len(self._mesh._halfs):
                raise InvalidTopologyError(f'{self!r} has a broken '
                                           'halfedge loop')

        if count < 3:
            raise InvalidTopologyError(f'{self!r} has less than three '
                                       'vertices')

    def _invalidate(self):
        self._mesh = None
        self._halfedge = None
        self.quadric = None

    def _viter(self):
        """ Incident vertex iterator.
        """
        return (h._origin for h in self._hiter())

    def _hiter(self):
        """ Incident halfedge iterator.
        """
        h = self._halfedge

        while True:
            yield h
            h = h._next

            if h is self._halfedge:
                return

    def _eiter(self):
        """ Incident edge iterator.
        """
        return (h._edge for h in self._hiter())

    def _fiter(self):
        """ Edge-adjacent face iterator.
        """
        return (h._twin._face for h in self._hiter()
                if h._twin._face is not None)


class MeshError(Exception):
    """ Mesh exception base class.
    """

    pass


class InvalidTopologyError(MeshError):
    """ Raised for malformed or non-manifold mesh data.

    Mesh construction aborts with this error, :meth:`Mesh.check` raises it
    when the halfedge structure is corrupt.
    """

    pass


class InvalidOperationError(MeshError):
    """ Raised for rejected topological edits.

    Flip, split, and collapse only raise this error when called with
    ``strict=True``. Otherwise they return :obj:`None`.
    """

    pass


class StaleElementError(MeshError):
    """ Raised when accessing a mesh item that has been deleted.
    """

    pass
