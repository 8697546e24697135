"""Constraints that stop a moving transform from crossing a boundary surface."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import numpy as np

from puppetkin.surface import Surface


def _as_matrix4(value) -> np.ndarray:
    mat = np.asarray(value, dtype=float)
    if mat.shape != (4, 4):
        raise ValueError(f"expected a 4x4 transform, got shape {mat.shape}")
    return mat


def _as_vec3(value: Sequence[float]) -> np.ndarray:
    vec = np.asarray(value, dtype=float).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    return vec


class BoundaryConstraint:
    """Forbids motions whose translation crosses a boundary surface.

    The boundary is expressed in the frame of ``boundary_position``, a 4x4
    transform held by reference, so later in-place changes to it are seen.
    Without a boundary nothing is ever forbidden.

    An optional ``position_check`` callable marks single positions as
    forbidden regardless of the path taken to reach them.
    """

    def __init__(
        self,
        boundary: Optional[Surface] = None,
        boundary_position=None,
        *,
        position_check: Optional[Callable[[np.ndarray], bool]] = None,
    ) -> None:
        self.boundary = boundary
        self.boundary_position = (
            None if boundary_position is None else np.asarray(boundary_position, dtype=float)
        )
        self.position_check = position_check

    def invalid_position(self, position) -> bool:
        """True if a position is forbidden on its own, per ``position_check``."""
        if self.position_check is None:
            return False
        return bool(self.position_check(_as_matrix4(position)))

    def _boundary_origin(self) -> np.ndarray:
        if self.boundary_position is None:
            return np.zeros(3)
        return self.boundary_position[:3, 3]

    def breaks_constraint(self, old_tform, new_tform) -> bool:
        """True if moving from old_tform to new_tform is not allowed."""
        if self.boundary is None:
            return False
        old_tform = _as_matrix4(old_tform)
        new_tform = _as_matrix4(new_tform)
        if self.invalid_position(new_tform):
            return True
        origin = self._boundary_origin()
        return bool(
            self.boundary.crosses_surface(old_tform[:3, 3] - origin, new_tform[:3, 3] - origin)
        )

    def limit_translate(self, position, delta_pos, n_iters: int = 5) -> np.ndarray:
        """Farthest allowed part of delta_pos, found by repeated halving."""
        position = _as_matrix4(position)
        delta_pos = _as_vec3(delta_pos)
        len_ratio = 1.0
        longest_vec = np.zeros(3)
        for _ in range(n_iters):
            new_tform = position.copy()
            new_tform[:3, 3] += longest_vec + len_ratio * delta_pos
            if not self.breaks_constraint(position, new_tform):
                if len_ratio == 1.0:
                    return delta_pos
                longest_vec = longest_vec + delta_pos * len_ratio
            len_ratio /= 2
        return longest_vec

    def best_translate(
        self,
        current,
        delta_pos,
        normal,
        binormal,
        n_iters: int = 5,
    ) -> np.ndarray:
        """Allowed translation that slides along the boundary when blocked.

        The blocked remainder of the motion is tried along both signs of the
        normal and binormal, and the combined result is limited again.
        """
        current = _as_matrix4(current)
        delta_pos = _as_vec3(delta_pos)
        normal = _as_vec3(normal)
        binormal = _as_vec3(binormal)
        delta_norm = float(np.linalg.norm(delta_pos))
        fwd = self.limit_translate(current, delta_pos, n_iters)
        if delta_norm == 0:
            return fwd
        fwd_ratio = float(np.linalg.norm(fwd)) / delta_norm
        if fwd_ratio == 1.0:
            return fwd
        nxt = current.copy()
        nxt[:3, 3] += fwd
        remainder = (1 - fwd_ratio) * delta_norm
        pos_norm = self.limit_translate(nxt, remainder * normal, n_iters)
        neg_norm = self.limit_translate(nxt, -remainder * normal, n_iters)
        pos_binorm = self.limit_translate(nxt, remainder * binormal, n_iters)
        neg_binorm = self.limit_translate(nxt, -remainder * binormal, n_iters)
        bounce_vec = fwd + (pos_norm + neg_norm) + (pos_binorm + neg_binorm)
        return self.limit_translate(current, bounce_vec, n_iters)