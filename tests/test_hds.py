"""Tests for the halfedge data structure and its edit operations."""

import numpy as np
import pytest

import halfmesh.iterators as iterators
from halfmesh.flags import VertexFlag
from halfmesh.hds import (Mesh, InvalidTopologyError, InvalidOperationError,
                          StaleElementError, MeshError)

from conftest import icosahedron_soup, find_edge, euler


class TestBuild:
    """Test conversion of polygon soups to halfedge structures."""

    def test_icosahedron_size(self, icosahedron):
        """Test item counts of a closed mesh."""
        assert icosahedron.size == (12, 30, 20)
        assert sum(1 for _ in icosahedron.halfedges) == 60
        assert icosahedron.triangular
        assert euler(icosahedron) == 2
        icosahedron.check()

    def test_grid_size(self, grid):
        """Test item counts of a mesh with boundary."""
        assert grid.size == (25, 56, 32)
        assert sum(1 for _ in grid.halfedges) == 112
        assert euler(grid) == 1
        grid.check()

    def test_halfedge_relations(self, grid):
        """Test twin, successor and predecessor pointers."""
        for h in grid.halfedges:
            assert h.twin.twin is h
            assert h.next.prev is h
            assert h.next.origin is h.target
            assert h.edge is h.twin.edge
            assert h.face is h.next.face

    def test_boundary_loop(self, grid):
        """Test boundary halfedges form a single loop."""
        boundary = [h for h in grid.halfedges if h.boundary]
        assert len(boundary) == 16
        assert boundary[0]._loop_len() == 16

    def test_boundary_items(self, grid):
        """Test boundary state of vertices, edges and faces."""
        corner = grid._verts[4]
        assert corner.boundary
        assert corner.degree == 2

        inner = grid._verts[6]
        assert not inner.boundary
        assert inner.degree == 6

        assert find_edge(grid, 0, 1).boundary
        assert not find_edge(grid, 0, 6).boundary
        assert sum(1 for f in grid.faces if f.boundary) == 14

    def test_face_vertices(self, icosahedron):
        """Test faces visit their vertices in input order."""
        _, faces = icosahedron_soup()

        for f, corners in zip(icosahedron.faces, faces):
            assert [v.index for v in f] == corners

    def test_face_barycenter(self, triangle):
        """Test the barycenter is the mean of the face corners."""
        f = next(triangle.faces)
        np.testing.assert_allclose(f.barycenter, [1 / 3, 1 / 3, 0])

    def test_polygon_faces(self):
        """Test quads are kept or triangulated on request."""
        points = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]]

        mesh = Mesh(points, [[0, 1, 2, 3]])
        assert mesh.size == (4, 4, 1)
        assert not mesh.triangular

        mesh = Mesh(points, [[0, 1, 2, 3]], triangulate=True)
        assert mesh.size == (4, 5, 2)
        assert mesh.triangular

    def test_empty_mesh(self):
        """Test meshes without items."""
        mesh = Mesh()
        assert mesh.size == (0, 0, 0)
        assert mesh.triangular

        mesh = Mesh(np.empty((0, 3)), [])
        assert mesh.size == (0, 0, 0)

    def test_faces_without_points(self):
        """Test faces require points."""
        with pytest.raises(ValueError):
            Mesh(faces=[[0, 1, 2]])

    @pytest.mark.parametrize('points, faces', [
        ([[0, 0], [1, 0], [0, 1]], [[0, 1, 2]]),
        ([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1]]),
        ([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 0, 1]]),
        ([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 5]]),
        ([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, -1]]),
        ([[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]],
         [[0, 1, 2], [0, 1, 3]]),
        ([[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0], [0, 0, 1]],
         [[0, 1, 2], [1, 0, 3], [0, 1, 4]]),
        ([[0, 0, 0], [1, 0, 0], [0, 1, 0], [-1, 0, 0], [0, -1, 0]],
         [[0, 1, 2], [0, 3, 4]]),
        ([[0, 0, 0], [1, 0, 0], [0, 1, 0], [5, 5, 5]], [[0, 1, 2]]),
    ], ids=['shape', 'corners', 'repeated', 'range', 'negative',
            'orientation', 'shared', 'bowtie', 'isolated'])
    def test_invalid_input(self, points, faces):
        """Test malformed and non-manifold input is rejected."""
        with pytest.raises(InvalidTopologyError):
            Mesh(points, faces)

    def test_failed_build_keeps_mesh(self, icosahedron):
        """Test a failing build leaves the mesh untouched."""
        revision = icosahedron.revision

        with pytest.raises(InvalidTopologyError):
            icosahedron.build([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1]])

        assert icosahedron.size == (12, 30, 20)
        assert icosahedron.revision == revision
        icosahedron.check()

    def test_rebuild_retires_items(self, triangle):
        """Test items of a previous build become stale."""
        v = next(triangle.vertices)
        f = next(triangle.faces)

        triangle.build(*icosahedron_soup())

        assert v.deleted and f.deleted
        assert triangle.size == (12, 30, 20)

        with pytest.raises(StaleElementError):
            v.point

        with pytest.raises(StaleElementError):
            v.degree

        with pytest.raises(StaleElementError):
            list(f)

    def test_errors_share_base_class(self):
        """Test all mesh errors derive from MeshError."""
        for cls in (InvalidTopologyError, InvalidOperationError,
                    StaleElementError):
            assert issubclass(cls, MeshError)


class TestFlip:
    """Test edge flips."""

    def test_flip_degrees(self, icosahedron):
        """Test a flip moves one degree from each endpoint to the apexes."""
        e = next(icosahedron.edges)
        h = e.halfedge
        a, b = h.origin, h.target
        c, d = h.prev.origin, h.twin.prev.origin

        assert icosahedron.flip_edge(e) is e

        assert (a.degree, b.degree, c.degree, d.degree) == (4, 4, 6, 6)
        assert set(e) == {c, d}
        assert icosahedron.size == (12, 30, 20)
        icosahedron.check()

    def test_double_flip(self, icosahedron):
        """Test flipping twice restores the original endpoints."""
        e = next(icosahedron.edges)
        ends = set(e)

        icosahedron.flip_edge(e)
        icosahedron.flip_edge(e)

        assert set(e) == ends
        assert all(v.degree == 5 for v in icosahedron.vertices)
        icosahedron.check()

    def test_flip_boundary_edge(self, grid):
        """Test boundary edges are not flipped."""
        e = find_edge(grid, 0, 1)
        revision = grid.revision

        assert not e.flippable
        assert grid.flip_edge(e) is None
        assert grid.revision == revision

        with pytest.raises(InvalidOperationError):
            grid.flip_edge(e, strict=True)

    def test_flip_adjacent_apexes(self, tetrahedron):
        """Test flips that would duplicate an edge are rejected."""
        for e in tetrahedron.edges:
            assert not e.flippable
            assert tetrahedron.flip_edge(e) is None

        tetrahedron.check()

    def test_flip_revision(self, icosahedron):
        """Test successful flips increment the revision."""
        revision = icosahedron.revision
        icosahedron.flip_edge(next(icosahedron.edges))
        assert icosahedron.revision == revision + 1


class TestSplit:
    """Test edge splits."""

    def test_split_interior(self, icosahedron):
        """Test splitting an interior edge."""
        e = next(icosahedron.edges)
        a, b = e
        midpoint = e.midpoint

        m = icosahedron.split_edge(e)

        assert icosahedron.size == (13, 33, 22)
        assert m.degree == 4
        assert not m.boundary
        np.testing.assert_allclose(m.point, midpoint)
        assert a in e and m in e and b not in e
        assert euler(icosahedron) == 2
        icosahedron.check()

    def test_split_point(self, icosahedron):
        """Test splitting at a given position."""
        m = icosahedron.split_edge(next(icosahedron.edges), [1, 2, 3])
        np.testing.assert_allclose(m.point, [1, 2, 3])

    def test_split_boundary(self, grid):
        """Test splitting a boundary edge."""
        e = find_edge(grid, 0, 1)

        m = grid.split_edge(e)

        assert grid.size == (26, 58, 33)
        assert m.boundary
        assert m.degree == 3
        assert e.boundary
        assert euler(grid) == 1

        boundary = [h for h in grid.halfedges if h.boundary]
        assert len(boundary) == 17
        assert boundary[0]._loop_len() == 17
        grid.check()

    def test_split_triangle(self, triangle):
        """Test splitting the edge of a single triangle."""
        m = triangle.split_edge(next(triangle.edges))

        assert triangle.size == (4, 5, 2)
        assert m.degree == 3
        triangle.check()

    def test_split_grows_points(self, triangle):
        """Test the coordinate array grows with the number of vertices."""
        for _ in range(20):
            triangle.split_edge(next(triangle.edges))

        assert triangle.points.shape == (23, 3)
        triangle.check()

    def test_split_polygon(self):
        """Test edges of non-triangular faces are not split."""
        mesh = Mesh([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
                    [[0, 1, 2, 3]])

        assert mesh.split_edge(next(mesh.edges)) is None

        with pytest.raises(InvalidOperationError):
            mesh.split_edge(next(mesh.edges), strict=True)


class TestCollapse:
    """Test edge collapses."""

    def test_collapse_interior(self, icosahedron):
        """Test collapsing an interior edge."""
        e = next(icosahedron.edges)
        ends = set(e)
        midpoint = e.midpoint

        v = icosahedron.collapse_edge(e)
        removed, = ends - {v}

        assert icosahedron.size == (11, 27, 18)
        assert e.deleted
        assert removed.deleted
        assert not v.deleted
        assert v.degree == 6
        np.testing.assert_allclose(v.point, midpoint)
        assert euler(icosahedron) == 2
        icosahedron.check()

    def test_collapse_point(self, icosahedron):
        """Test collapsing to a given position."""
        v = icosahedron.collapse_edge(next(icosahedron.edges), [0, 0, 0])
        np.testing.assert_allclose(v.point, [0, 0, 0])

    def test_collapse_boundary(self, grid):
        """Test collapsing a boundary edge."""
        e = find_edge(grid, 1, 2)

        v = grid.collapse_edge(e)

        assert v.boundary
        assert grid.size == (24, 54, 31)
        assert euler(grid) == 1

        boundary = [h for h in grid.halfedges if h.boundary]
        assert boundary[0]._loop_len() == 15
        grid.check()

    def test_collapse_tetrahedron(self, tetrahedron):
        """Test no edge of a tetrahedron can be collapsed."""
        for e in tetrahedron.edges:
            assert not e.collapsible
            assert tetrahedron.collapse_edge(e) is None

            with pytest.raises(InvalidOperationError):
                tetrahedron.collapse_edge(e, strict=True)

        assert tetrahedron.size == (4, 6, 4)

    def test_collapse_single_triangle(self, triangle):
        """Test no edge of a boundary loop of length three collapses."""
        for e in triangle.edges:
            assert not e.collapsible
            assert not e.flippable
            assert triangle.collapse_edge(e) is None

    def test_link_condition(self, octahedron):
        """Test collapses violating the link condition are rejected."""
        v = octahedron.collapse_edge(find_edge(octahedron, 0, 4))

        # A triangular bipyramid with apexes 2 and 3 remains. Equator
        # edges have a third common neighbor.
        assert octahedron.size == (5, 9, 6)
        octahedron.check()

        e = find_edge(octahedron, v.index, 1)
        assert e is not None
        assert not e.collapsible
        assert 'link condition' in e._collapse_veto()
        assert octahedron.collapse_edge(e) is None

    def test_interior_edge_between_boundary_vertices(self, grid):
        """Test interior edges joining two boundary vertices are kept."""
        e = find_edge(grid, 3, 9)

        assert not e.boundary
        assert all(v.boundary for v in e)
        assert not e.collapsible

    def test_collapse_deleted(self, icosahedron):
        """Test a removed edge cannot be collapsed again."""
        e = next(icosahedron.edges)
        icosahedron.collapse_edge(e)

        assert icosahedron.collapse_edge(e) is None

        with pytest.raises(InvalidOperationError):
            icosahedron.collapse_edge(e, strict=True)


class TestStaleItems:
    """Test access to removed items."""

    def test_stale_vertex(self, icosahedron):
        """Test properties of a removed vertex raise."""
        e = next(icosahedron.edges)
        ends = set(e)
        v = icosahedron.collapse_edge(e)
        removed, = ends - {v}

        with pytest.raises(StaleElementError):
            removed.point

        with pytest.raises(StaleElementError):
            removed.halfedge

        with pytest.raises(StaleElementError):
            list(e)

    def test_stale_after_clean(self, icosahedron):
        """Test removed items stay stale after garbage collection."""
        e = next(icosahedron.edges)
        h = e.halfedge
        icosahedron.collapse_edge(e)
        icosahedron.clean()

        assert h.deleted

        with pytest.raises(StaleElementError):
            h.origin


class TestMaintenance:
    """Test clean, copy, clear and scratch data handling."""

    def test_clean(self, icosahedron):
        """Test garbage collection compacts containers."""
        e = next(icosahedron.edges)
        v = icosahedron.collapse_edge(e)
        point = v.point.copy()

        icosahedron.clean()

        assert len(icosahedron._verts) == 11
        assert len(icosahedron._edges) == 27
        assert len(icosahedron._halfs) == 54
        assert len(icosahedron._faces) == 18
        assert [v.index for v in icosahedron.vertices] == list(range(11))
        assert icosahedron.points.shape == (11, 3)
        np.testing.assert_allclose(v.point, point)
        icosahedron.check()

    def test_copy(self, icosahedron):
        """Test copies are independent."""
        icosahedron.collapse_edge(next(icosahedron.edges))
        other = icosahedron.copy()

        assert other.size == icosahedron.size
        np.testing.assert_allclose(other.soup()[0], icosahedron.soup()[0])

        other.flip_edge(next(other.edges))
        other.points += 1.0
        assert icosahedron.size == (11, 27, 18)
        assert not np.allclose(other.soup()[0], icosahedron.soup()[0])

    def test_soup(self, icosahedron):
        """Test polygon soup reproduces the input."""
        points, faces = icosahedron.soup()
        expected_points, expected_faces = icosahedron_soup()

        np.testing.assert_allclose(points, expected_points)
        assert faces == expected_faces

    def test_clear(self, icosahedron):
        """Test removing all items."""
        v = next(icosahedron.vertices)
        icosahedron.clear()

        assert icosahedron.size == (0, 0, 0)

        with pytest.raises(StaleElementError):
            v.point

    def test_reset_scratch(self, icosahedron):
        """Test scratch data and NEW flags are cleared, others kept."""
        v = next(icosahedron.vertices)
        e = next(icosahedron.edges)

        v.is_new = True
        v.flags |= VertexFlag.FIXED
        v.new_point = np.zeros(3)
        e.is_new = True
        e.record = object()

        icosahedron.reset_scratch()

        assert not v.is_new
        assert v.flags & VertexFlag.FIXED
        assert v.new_point is None
        assert not e.is_new
        assert e.record is None

    def test_name(self, tmp_path):
        """Test file names are reduced to their stem."""
        mesh = Mesh(*icosahedron_soup(), name=tmp_path / 'ball.obj')
        assert mesh.name == 'ball'

    def test_read_write(self, icosahedron, tmp_path):
        """Test meshes survive a trip through an OBJ file."""
        filename = tmp_path / 'ico.obj'
        icosahedron.write(filename)

        mesh = Mesh.read(filename)

        assert mesh.name == 'ico'
        assert mesh.size == (12, 30, 20)
        np.testing.assert_allclose(mesh.points, icosahedron.points)


class TestIterators:
    """Test neighborhood iterators."""

    def test_vertex_neighborhood(self, grid):
        """Test one-ring traversal of an interior and a boundary vertex."""
        for v in (grid._verts[6], grid._verts[0]):
            neighbors = list(iterators.verts(v))
            edges = list(iterators.edges(v))
            halfs = list(iterators.halfs(v))

            assert len(neighbors) == len(edges) == len(halfs) == v.degree
            assert all(h.origin is v for h in halfs)
            assert all(v in e for e in edges)

        assert len(list(iterators.faces(grid._verts[6]))) == 6
        assert len(list(iterators.faces(grid._verts[0]))) == 2

    def test_face_neighborhood(self, icosahedron):
        """Test face traversal."""
        f = next(icosahedron.faces)

        assert len(list(iterators.verts(f))) == 3
        assert len(list(iterators.edges(f))) == 3
        assert len(list(iterators.faces(f))) == 3

    def test_frozen(self, icosahedron):
        """Test snapshots survive edits."""
        edges = iterators.edges(icosahedron, frozen=True)

        for e in edges:
            if not e.deleted:
                icosahedron.collapse_edge(e)

        icosahedron.check()


class TestRandomEdits:
    """Test random edit sequences keep the structure valid."""

    @pytest.mark.parametrize('seed', [0, 1, 2])
    def test_closed(self, icosahedron, seed):
        """Test random edits on a closed mesh."""
        self._run(icosahedron, seed, characteristic=2)

    @pytest.mark.parametrize('seed', [0, 1])
    def test_open(self, grid, seed):
        """Test random edits on a mesh with boundary."""
        self._run(grid, seed, characteristic=1)

    def _run(self, mesh, seed, characteristic):
        rng = np.random.default_rng(seed)

        for step in range(300):
            edges = list(mesh.edges)
            e = edges[rng.integers(len(edges))]
            op = rng.integers(3)

            if op == 0:
                mesh.flip_edge(e)
            elif op == 1:
                mesh.split_edge(e)
            else:
                mesh.collapse_edge(e)

            assert euler(mesh) == characteristic

            if step % 50 == 0:
                mesh.check()

        mesh.check()
        mesh.clean()
        mesh.check()
