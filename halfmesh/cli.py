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

""" Command-line interface.

Usage::

    halfmesh upsample input.obj output.obj [-n REPEAT]
    halfmesh downsample input.obj output.obj [--target FACES]
    halfmesh resample input.obj output.obj [--config FILE]
"""

import logging

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

import halfmesh.traits as traits
from halfmesh.config import ResamplerConfig
from halfmesh.hds import Mesh, MeshError
from halfmesh.resampler import MeshResampler

logger = logging.getLogger(__name__)

console = Console(stderr=True)


def setup_logging(verbose=False):
    """ Configure logging with rich output.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(message)s',
        handlers=[RichHandler(console=console, show_time=False)],
    )


def main(argv=None):
    """ Console script entry point.

    Parameters
    ----------
    argv : list[str], optional
        Command line arguments, defaults to ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit status.
    """
    import argparse

    parser = argparse.ArgumentParser(
        prog='halfmesh',
        description='Resample triangle meshes stored in OBJ files.')
    parser.add_argument('operation',
                        choices=['upsample', 'downsample', 'resample'],
                        help='resampling algorithm')
    parser.add_argument('input', type=str, help='OBJ input file')
    parser.add_argument('output', type=str, help='OBJ output file')
    parser.add_argument('-n', '--repeat', type=int, default=1,
                        help='number of times the operation is applied')
    parser.add_argument('--target', type=int, default=None,
                        help='target face count for downsample')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON configuration file')
    parser.add_argument('--triangulate', action='store_true',
                        help='fan-triangulate polygonal input faces')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable debug output')

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.config is not None:
            config = ResamplerConfig.from_file(args.config)
        else:
            config = ResamplerConfig.default()
    except (OSError, ValueError, ValidationError) as err:
        logger.error(f'cannot load configuration: {err}')
        return 1

    try:
        mesh = Mesh.read(args.input, triangulate=args.triangulate)
    except (OSError, ValueError, MeshError) as err:
        logger.error(f'cannot read {args.input}: {err}')
        return 1

    lo, hi = traits.bounds(mesh) if mesh.size[0] else (None, None)
    logger.info(f'{args.input}: size {mesh.size}, bounds {lo} {hi}')

    resampler = MeshResampler(config)

    try:
        for _ in range(args.repeat):
            if args.operation == 'upsample':
                resampler.upsample(mesh)
            elif args.operation == 'downsample':
                resampler.downsample(mesh, args.target)
            else:
                resampler.resample(mesh)
    except MeshError as err:
        logger.error(f'{args.operation} failed: {err}')
        return 1

    mesh.write(args.output)
    logger.info(f'{args.output}: size {mesh.size}')

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
