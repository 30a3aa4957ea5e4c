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

""" Mesh resampling.

Three algorithms that change the sampling density of a triangle mesh
while approximating its shape:

    - :meth:`MeshResampler.upsample` refines by one step of Loop
      subdivision,
    - :meth:`MeshResampler.downsample` simplifies by greedy quadric error
      edge collapses,
    - :meth:`MeshResampler.resample` equalizes edge lengths and vertex
      degrees by isotropic remeshing.

All algorithms modify the mesh in place and only use the public edit
operations :meth:`~halfmesh.hds.Mesh.flip_edge`,
:meth:`~halfmesh.hds.Mesh.split_edge`, and
:meth:`~halfmesh.hds.Mesh.collapse_edge`.
"""

import itertools
import logging
import math

import halfmesh.linalg as linalg
import halfmesh.quadric as quadric
import halfmesh.traits as traits
import halfmesh.flags as flags
from halfmesh.config import ResamplerConfig
from halfmesh.hds import InvalidOperationError
from halfmesh.heap import MinHeap

logger = logging.getLogger(__name__)


class MeshResampler:
    """ Mesh resampling driver.

    The resampler keeps no state between calls. Per-item scratch data
    (staged positions, quadrics, flags) is reset at the start and at the
    end of each call.

    Parameters
    ----------
    config : ResamplerConfig, optional
        Algorithm parameters, defaults to :meth:`ResamplerConfig.default`.
    """

    def __init__(self, config=None):
        self.config = ResamplerConfig.default() if config is None else config

    def upsample(self, mesh):
        """ Loop subdivision.

        Every triangle is split into four. Positions of new vertices and
        smoothed positions of old vertices are computed from the input
        geometry before any topological change happens.

        Parameters
        ----------
        mesh : Mesh
            Triangle mesh, modified in place.

        Raises
        ------
        InvalidOperationError
            If the mesh has non-triangular faces.

        Note
        ----
        Boundary vertices and boundary edges use the univariate cubic
        B-spline masks, which keeps boundary curves independent of the
        interior.
        """
        if not self._prepare(mesh, 'upsample'):
            return

        size = mesh.size

        # Stage positions from the unmodified mesh.
        for v in mesh._viter():
            v.new_point = _loop_vertex_point(v)

        edges = list(mesh._eiter())

        for e in edges:
            e.new_point = _loop_edge_point(e)

        # Split the original edges. Cross edges leading from the inserted
        # vertex to a vertex opposite the split edge are marked new.
        for e in edges:
            ends = set(e)
            m = mesh.split_edge(e, strict=True)
            m.is_new = True
            m.new_point = e.new_point

            for x in m._eiter():
                if not any(w in ends for w in x):
                    x.is_new = True

        for e in list(mesh._eiter()):
            if e.is_new:
                v, w = e

                if v.is_new != w.is_new:
                    mesh.flip_edge(e, strict=True)

        for v in mesh._viter():
            v.point = v.new_point

        mesh.reset_scratch()

        logger.info(f'upsample: {size} -> {mesh.size}')

    def downsample(self, mesh, target=None):
        """ Quadric error decimation.

        Edges are collapsed in order of increasing quadric error until
        the number of faces drops to `target`. Each collapse moves the
        merged vertex to the position minimizing the sum of squared
        distances to the planes of the faces it represents.

        Parameters
        ----------
        mesh : Mesh
            Triangle mesh, modified in place and cleaned afterwards.
        target : int, optional
            Target number of faces. Defaults to the value derived from
            :attr:`ResamplerConfig.downsample`.

        Raises
        ------
        InvalidOperationError
            If the mesh has non-triangular faces.

        Returns
        -------
        list[dict]
            One entry per executed collapse in execution order with keys
            ``'cost'`` (quadric error of the collapse), ``'point'``
            (position of the merged vertex), and ``'remaining'`` (the
            smallest cost left in the queue, ``inf`` if it was empty).

        Note
        ----
        A collapse that would take the face count below `target` is
        skipped. The final face count therefore lies between
        ``min(target, F)`` and ``F``.
        """
        if not self._prepare(mesh, 'downsample'):
            return []

        count = mesh.size[2]

        if target is None:
            target = self.config.downsample.target(count)

        for f in mesh._fiter():
            f.quadric = quadric.face_quadric(f)

        for v in mesh._viter():
            v.quadric = quadric.vertex_quadric(v)

        queue = MinHeap()

        for e in mesh._eiter():
            _enqueue(queue, e)

        history = []
        initial = count

        while count > target and queue:
            edge, cost = queue.pop()
            record = edge.record
            edge.record = None

            removed = 1 if edge.boundary else 2

            if count - removed < target or not edge.collapsible:
                continue

            remaining = queue.top[1] if queue else math.inf

            v, w = edge

            for x in itertools.chain(v._eiter(), w._eiter()):
                if queue.discard(x):
                    x.record = None

            survivor = mesh.collapse_edge(edge, record.optimal_point,
                                          strict=True)
            survivor.quadric = record.quadric
            count -= removed

            history.append({'cost': cost,
                            'point': record.optimal_point,
                            'remaining': remaining})

            for x in survivor._eiter():
                _enqueue(queue, x)

        mesh.clean()
        mesh.reset_scratch()

        logger.info(f'downsample: {initial} -> {count} faces (target '
                    f'{target}), {len(history)} collapses')

        return history

    def resample(self, mesh):
        """ Isotropic remeshing.

        Target edge length is the mean edge length of the input mesh.
        Each round splits long edges, collapses short edges, flips edges
        to balance vertex degrees, and applies one step of tangential
        smoothing.

        Parameters
        ----------
        mesh : Mesh
            Triangle mesh, modified in place and cleaned afterwards.

        Raises
        ------
        InvalidOperationError
            If the mesh has non-triangular faces.

        Note
        ----
        Boundary vertices are not moved by smoothing. Vertices flagged
        :attr:`~halfmesh.flags.VertexFlag.FIXED` keep their
        coordinates and are never removed by edge collapses.
        """
        if not self._prepare(mesh, 'resample'):
            return

        params = self.config.remesh
        size = mesh.size

        length = traits.mean_edge_length(mesh)
        upper = params.split_ratio * length
        lower = params.collapse_ratio * length

        for i in range(params.iterations):
            splits = _split_long_edges(mesh, upper)
            collapses = _collapse_short_edges(mesh, lower)
            flips = _flip_to_valence(mesh)
            _smooth(mesh, params.smoothing_weight)

            logger.debug(f'resample round {i + 1}: {splits} splits, '
                         f'{collapses} collapses, {flips} flips')

        mesh.clean()
        mesh.reset_scratch()

        logger.info(f'resample: {size} -> {mesh.size}, target edge length '
                    f'{length:.6g}')

    def _prepare(self, mesh, name):
        """ Validate input and reset scratch data.

        Returns
        -------
        bool
            :obj:`False` if there is nothing to do.
        """
        if not mesh.triangular:
            raise InvalidOperationError(f'{name} requires a triangle mesh')

        mesh.reset_scratch()

        if not any(True for _ in mesh._fiter()):
            logger.info(f'{name}: empty mesh')
            return False

        return True


def _loop_vertex_point(v):
    """ Loop subdivision mask of an old vertex.
    """
    ring = v._boundary_neighbors()

    if ring is not None:
        u, w = ring
        return 0.75 * v.point + 0.125 * (u.point + w.point)

    neighbors = [w.point for w in v._viter()]
    n = len(neighbors)
    beta = 3.0 / 16.0 if n == 3 else 3.0 / (8.0 * n)

    return (1.0 - n * beta) * v.point + beta * sum(neighbors)


def _loop_edge_point(e):
    """ Loop subdivision mask of an edge.
    """
    h = e._halfedge
    t = h._twin

    if h._face is None or t._face is None:
        return e.midpoint

    a, b = h._origin.point, t._origin.point
    c, d = h._prev._origin.point, t._prev._origin.point

    return 0.375 * (a + b) + 0.125 * (c + d)


def _enqueue(queue, edge):
    record = quadric.EdgeRecord(edge)
    edge.record = record
    queue.push(edge, record.cost)


def _split_long_edges(mesh, upper):
    count = 0

    for e in list(mesh._eiter()):
        if e.length > upper:
            mesh.split_edge(e)
            count += 1

    return count


def _collapse_short_edges(mesh, lower):
    count = 0

    for e in list(mesh._eiter()):
        # Earlier collapses of this pass may have removed the edge.
        if e._deleted or e.length >= lower or not e.collapsible:
            continue

        v, w = e

        if (v.flags | w.flags) & flags.VertexFlag.FIXED:
            continue

        # Keep boundary curves in place.
        if v.boundary and not w.boundary:
            point = v.point.copy()
        elif w.boundary and not v.boundary:
            point = w.point.copy()
        else:
            point = None

        mesh.collapse_edge(e, point)
        count += 1

    return count


def _valence_deviation(degrees, ideal):
    return max(abs(d - i) for d, i in zip(degrees, ideal))


def _flip_to_valence(mesh):
    count = 0

    for e in list(mesh._eiter()):
        if not e.flippable:
            continue

        h = e._halfedge
        t = h._twin
        verts = (h._origin, t._origin, h._prev._origin, t._prev._origin)

        ideal = [4 if v.boundary else 6 for v in verts]
        before = [v._compute_degree() for v in verts]
        after = [before[0] - 1, before[1] - 1, before[2] + 1, before[3] + 1]

        if _valence_deviation(after, ideal) < _valence_deviation(before, ideal):
            mesh.flip_edge(e)
            count += 1

    return count


def _smooth(mesh, weight):
    """ One step of tangential Laplacian smoothing.
    """
    verts = list(mesh._viter())

    for v in verts:
        v.centroid = traits.vertex_centroid(v)

    for v in verts:
        if v.boundary or v.flags & flags.VertexFlag.FIXED:
            continue

        normal = traits.vertex_normal(v)
        v.new_point = v.point + weight * linalg.tangential(
            v.centroid - v.point, normal)

    for v in verts:
        if v.new_point is not None:
            v.point = v.new_point
            v.new_point = None
