"""Named groups of mesh vertices that move with one transform."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass
class VertexGroup:
    """A named set of vertex indices, optionally driven by a 4x4 transform."""

    name: str
    vertices: list[int] = field(default_factory=list)
    tform: Optional[np.ndarray] = None

    def add_vert(self, vert_index: int) -> None:
        self.vertices.append(int(vert_index))