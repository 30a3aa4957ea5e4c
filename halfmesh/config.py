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

""" Resampler configuration.

Parameters of the mesh resampling algorithms as pydantic models. A
configuration can be constructed programmatically or loaded from a JSON
file.
"""

from __future__ import annotations

import json
import math
from pathlib import Path

from pydantic import BaseModel, Field


class DownsampleParams(BaseModel):
    """ Quadric error decimation parameters.

    An explicit face count takes precedence over the ratio.
    """

    target_faces: int | None = Field(default=None, ge=1, description='Target number of faces')
    target_ratio: float = Field(default=0.25, gt=0, le=1, description='Target fraction of the current face count')

    def target(self, face_count: int) -> int:
        """ Target face count.

        Parameters
        ----------
        face_count : int
            Number of faces of the input mesh.

        Returns
        -------
        int
            Number of faces to decimate to, at least one.
        """
        if self.target_faces is not None:
            return self.target_faces

        return max(1, math.ceil(face_count * self.target_ratio))


class RemeshParams(BaseModel):
    """ Isotropic remeshing parameters.

    Edge length thresholds are multiples of the mean edge length of the
    input mesh.
    """

    iterations: int = Field(default=5, ge=4, le=6, description='Number of split/collapse/flip/smooth rounds')
    split_ratio: float = Field(default=4 / 3, gt=1, description='Split edges longer than this multiple of the target length')
    collapse_ratio: float = Field(default=4 / 5, gt=0, lt=1, description='Collapse edges shorter than this multiple of the target length')
    smoothing_weight: float = Field(default=0.2, gt=0, le=1, description='Step size of tangential smoothing')


class ResamplerConfig(BaseModel):
    """ Complete resampler configuration.
    """

    downsample: DownsampleParams = Field(default_factory=DownsampleParams)
    remesh: RemeshParams = Field(default_factory=RemeshParams)

    @classmethod
    def from_file(cls, path: Path | str) -> ResamplerConfig:
        """ Load configuration from a JSON file.

        Parameters
        ----------
        path : str or Path
            Configuration file. Missing sections take their defaults.

        Raises
        ------
        pydantic.ValidationError
            If a value is out of range.
        """
        path = Path(path)
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def to_file(self, path: Path | str) -> None:
        """ Save configuration to a JSON file.

        Missing parent directories are created.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.model_dump(mode='json'), f, indent=2)

    @classmethod
    def default(cls) -> ResamplerConfig:
        """ Create a default configuration.
        """
        return cls()
