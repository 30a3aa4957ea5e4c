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

""" Mesh item selection.

A :class:`Feature` holds a reference to a single mesh item of any kind,
tagged with its :class:`ElementKind`. It is the kind of object an
interactive viewer keeps for the selected or hovered item. A feature
remembers the mesh revision at selection time and reports itself as
invalid once the mesh has been modified by anyone else.


>>> feature = Feature(next(mesh.vertices))
>>> feature.info()['degree']
5
>>> mesh.flip_edge(next(mesh.edges))
Edge(0)
>>> feature.valid
False
"""

import logging
from enum import Enum

from halfmesh.hds import Vertex, Edge, Halfedge, Face, StaleElementError

logger = logging.getLogger(__name__)


class ElementKind(Enum):
    """ Mesh item kinds.
    """

    VERTEX = 'vertex'
    EDGE = 'edge'
    HALFEDGE = 'halfedge'
    FACE = 'face'


_KINDS = ((Vertex, ElementKind.VERTEX),
          (Edge, ElementKind.EDGE),
          (Halfedge, ElementKind.HALFEDGE),
          (Face, ElementKind.FACE))


class Feature:
    """ Selected mesh item.

    Parameters
    ----------
    element : Vertex or Edge or Halfedge or Face, optional
        Item to select. An empty feature is created if omitted.

    Raises
    ------
    TypeError
        If `element` is not a mesh item.
    StaleElementError
        If `element` has been deleted.
    """

    def __init__(self, element=None):
        self._element = None
        self._kind = None
        self._mesh = None
        self._revision = None

        if element is not None:
            self.select(element)

    def __repr__(self):
        if self._element is None:
            return 'Feature()'

        return f'Feature({self._element!r})'

    def __bool__(self):
        return self.valid

    @property
    def kind(self):
        """ Kind of the selected item.

        :type: ElementKind or None
        """
        return self._kind

    @property
    def element(self):
        """ Selected item.

        :type: Vertex or Edge or Halfedge or Face or None
        """
        return self._element

    @property
    def valid(self):
        """ Validity state.

        A feature is valid if it holds an item that has not been deleted
        and the item's mesh has not been modified since selection.

        :type: bool
        """
        return (self._element is not None and
                not self._element._deleted and
                self._mesh.revision == self._revision)

    def select(self, element):
        """ Select a mesh item.

        Parameters
        ----------
        element : Vertex or Edge or Halfedge or Face
            Item to select.

        Raises
        ------
        TypeError
            If `element` is not a mesh item.
        StaleElementError
            If `element` has been deleted.
        """
        for cls, kind in _KINDS:
            if isinstance(element, cls):
                break
        else:
            raise TypeError(f'cannot select {type(element).__name__!r} '
                            'object')

        if element._deleted:
            raise StaleElementError(f'{element!r} has been removed from '
                                    'its mesh')

        self._element = element
        self._kind = kind
        self._mesh = element._mesh
        self._revision = element._mesh.revision

    def invalidate(self):
        """ Clear the selection.
        """
        self._element = None
        self._kind = None
        self._mesh = None
        self._revision = None

    def next(self):
        """ Select the successor of a selected halfedge.

        Returns
        -------
        bool
            :obj:`True` if the selection changed.
        """
        if not self._navigable():
            return False

        self.select(self._element.next)
        return True

    def twin(self):
        """ Select the twin of a selected halfedge.

        Returns
        -------
        bool
            :obj:`True` if the selection changed.
        """
        if not self._navigable():
            return False

        self.select(self._element.twin)
        return True

    def flip(self):
        """ Flip the selected edge.

        A selected halfedge refers to its edge. The edge stays selected.

        Returns
        -------
        Edge or None
            The flipped edge or :obj:`None` if nothing was flipped.
        """
        edge = self._edge()

        if edge is None or edge._mesh.flip_edge(edge) is None:
            return None

        self.select(edge)
        return edge

    def split(self):
        """ Split the selected edge and select the new vertex.

        Returns
        -------
        Vertex or None
            The new vertex or :obj:`None` if nothing was split.
        """
        edge = self._edge()

        if edge is None:
            return None

        vertex = edge._mesh.split_edge(edge)

        if vertex is not None:
            self.select(vertex)

        return vertex

    def collapse(self):
        """ Collapse the selected edge and select the merged vertex.

        Returns
        -------
        Vertex or None
            The merged vertex or :obj:`None` if nothing was collapsed.
        """
        edge = self._edge()

        if edge is None:
            return None

        vertex = edge._mesh.collapse_edge(edge)

        if vertex is not None:
            self.select(vertex)

        return vertex

    def info(self):
        """ Describe the selected item.

        Returns
        -------
        dict
            Item properties, referenced items are given by index. An
            empty dictionary for an invalid feature.
        """
        if not self.valid:
            return dict()

        item = self._element
        info = {'kind': self._kind.value, 'index': item.index}

        if self._kind is ElementKind.VERTEX:
            info['position'] = item.point.tolist()
            info['halfedge'] = item.halfedge.index
            info['boundary'] = item.boundary
            info['degree'] = item.degree
        elif self._kind is ElementKind.HALFEDGE:
            info['twin'] = item.twin.index
            info['next'] = item.next.index
            info['origin'] = item.origin.index
            info['edge'] = item.edge.index
            info['face'] = None if item.face is None else item.face.index
            info['boundary'] = item.boundary
        elif self._kind is ElementKind.EDGE:
            info['halfedge'] = item.halfedge.index
            info['boundary'] = item.boundary
            info['length'] = item.length
        else:
            info['halfedge'] = item.halfedge.index
            info['valence'] = item.valence
            info['boundary'] = item.boundary

        return info

    def _navigable(self):
        if not self.valid:
            logger.debug(f'{self!r} is not valid')
            return False

        return self._kind is ElementKind.HALFEDGE

    def _edge(self):
        """ Selected edge, if any.
        """
        if not self.valid:
            return None

        if self._kind is ElementKind.EDGE:
            return self._element

        if self._kind is ElementKind.HALFEDGE:
            return self._element.edge

        return None
