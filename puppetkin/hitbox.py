"""Ellipsoidal hitboxes."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np


class Hitbox:
    """An axis-aligned ellipsoid with semi-axes given by shape."""

    def __init__(self, shape: Optional[Sequence[float]] = None) -> None:
        self.shape = np.zeros(3) if shape is None else np.asarray(shape, dtype=float)
        if self.shape.shape != (3,):
            raise ValueError(f"shape must be a 3-vector, got {self.shape.shape}")
        with np.errstate(divide="ignore"):
            self.e_sq = self.shape**2
            self.e_inv_sq = 1.0 / np.sqrt(self.shape)

    def critical_point(self, p: Sequence[float]) -> np.ndarray:
        """Point on the ellipsoid surface whose normal points towards p."""
        p = np.asarray(p, dtype=float)
        f = self.e_sq * p
        return f / np.sqrt(f @ p)

    def check_collision(self, other: "Hitbox", position1, position2) -> bool:
        """True if this hitbox at position1 touches other at position2."""
        g1 = np.asarray(position1, dtype=float)
        g2 = np.asarray(position2, dtype=float)
        g12 = np.linalg.inv(g1) @ g2
        g21 = np.linalg.inv(g2) @ g1
        p1 = g12[:3, 2]
        p2 = g21[:3, 2]
        f1 = self.critical_point(p1)
        f2 = self.critical_point(p2)

        intersect12 = (g21[:3, :3] @ f1 + p2) ** 2
        if intersect12 @ other.e_inv_sq <= 1:
            return True
        if (intersect12 + 4 * ((p2 - f1) @ p2)) @ other.e_inv_sq <= 1:
            return True

        intersect21 = (g12[:3, :3] @ f2 + p1) ** 2
        if intersect21 @ self.e_inv_sq <= 1:
            return True
        if (intersect21 + 4 * ((p1 - f2) @ p1)) @ other.e_inv_sq <= 1:
            return True
        return False