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

""" OBJ file I/O.

Low-level functions to exchange polygon soups with OBJ files. Only
geometric vertices (``v``) and faces (``f``) are interpreted, all other
statements are skipped. The format is documented in the
`Advanced Visualizer Manual`.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def _vertex_index(block, count):
    """ Parse a face corner.

    Parameters
    ----------
    block : str
        A v, v/vt, v//vn or v/vt/vn corner definition.
    count : int
        Number of vertices read so far, used to resolve negative
        (relative) indices.

    Raises
    ------
    ValueError
        If the string could not be parsed.

    Returns
    -------
    int
        0-based vertex index.
    """
    bits = block.split('/')

    if len(bits) > 3 or not bits[0]:
        raise ValueError(f'invalid face corner definition: {block}')

    # Texture and normal references are validated but dropped.
    for bit in bits[1:]:
        if bit:
            int(bit)

    index = int(bits[0])

    if index < 0:
        return count + index
    if index == 0:
        raise ValueError(f'invalid vertex index 0 in: {block}')

    return index - 1


def read(filename):
    """ Read polygon soup from file.

    Parameters
    ----------
    filename : str or os.PathLike
        Name of an OBJ file.

    Raises
    ------
    ValueError
        If a ``v`` or ``f`` statement could not be parsed.

    Returns
    -------
    points : ~numpy.ndarray
        Vertex coordinates of shape ``(n, 3)``.
    faces : list[list[int]]
        Face definitions, 0-based vertex indexing.


    >>> points, faces = read('input-file.obj')
    """
    points = []
    faces = []

    with open(filename, 'r') as file:
        for line in file:
            blocks = line.split()

            if not blocks:
                continue

            if blocks[0] == 'v':
                # Optional w or color components are ignored.
                if len(blocks) < 4:
                    raise ValueError(f'invalid vertex definition: {line}')

                points.append([float(block) for block in blocks[1:4]])
            elif blocks[0] == 'f':
                faces.append([_vertex_index(block, len(points))
                              for block in blocks[1:]])

    logger.debug(f'read {len(points)} vertices and {len(faces)} faces '
                 f'from {filename}')

    return np.array(points, dtype=float).reshape(-1, 3), faces


def write(filename, points, faces):
    """ Write polygon soup to file.

    Parameters
    ----------
    filename : str or os.PathLike
        Name of output file.
    points : array_like
        Vertex coordinates, one row per vertex.
    faces : iterable
        Face definitions, 0-based vertex indexing.
    """
    count = 0

    with open(filename, 'w') as file:
        for point in points:
            file.write('v')

            for coord in point:
                file.write(f' {float(coord)!r}')

            file.write('\n')

        for face in faces:
            file.write('f')

            for vertex in face:
                file.write(f' {int(vertex) + 1}')

            file.write('\n')
            count += 1

    logger.debug(f'wrote {len(points)} vertices and {count} faces '
                 f'to {filename}')
