"""Surfaces and regions that a straight-line motion can cross."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

import numpy as np


def _as_vec3(value: Sequence[float]) -> np.ndarray:
    vec = np.asarray(value, dtype=float).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    return vec


def _solve_crossing(e1, e2, t1, t2, t3) -> Optional[np.ndarray]:
    """Solve a*(t2-t1) + b*(t3-t1) + t1 = k*(e2-e1) + e1 for (a, b, k).

    Returns None when the system is singular or the solution lies outside
    the triangle or the segment.
    """
    e1, e2, t1, t2, t3 = (_as_vec3(v) for v in (e1, e2, t1, t2, t3))
    system = np.column_stack((t2 - t1, t3 - t1, e1 - e2))
    if np.linalg.det(system) == 0:
        return None
    a, b, k = np.linalg.inv(system) @ (e1 - t1)
    if k > 1.0 or k < 0 or a < 0 or b < 0 or a + b > 1.0:
        return None
    return np.array([a, b, k])


def crosses_triangle(e1, e2, t1, t2, t3) -> bool:
    """True if the segment e1-e2 intersects the triangle t1 t2 t3."""
    return _solve_crossing(e1, e2, t1, t2, t3) is not None


def triangle_crossing(e1, e2, t1, t2, t3) -> Optional[float]:
    """Fraction along e1-e2 where it meets the triangle, or None if it does not."""
    solution = _solve_crossing(e1, e2, t1, t2, t3)
    return None if solution is None else float(solution[2])


class Surface(ABC):
    """Anything a motion from one state to another may cross."""

    @abstractmethod
    def crosses_surface(self, first_state, second_state) -> bool:
        """True if moving from first_state to second_state crosses the surface."""


class Region(Surface):
    """A bounded surface: it has an inside and an outside."""

    @abstractmethod
    def inside_region(self, state) -> bool:
        """True if state lies inside the region."""

    def crosses_surface(self, first_state, second_state) -> bool:
        return self.inside_region(first_state) != self.inside_region(second_state)


class MeshSurface(Surface):
    """A triangle mesh acting as a surface.

    This mesh is the "shield": a motion crosses it if the segment between
    the two states passes through any of its faces.
    """

    def __init__(self) -> None:
        self.verts: list[np.ndarray] = []
        self.edges: list[tuple[int, int]] = []
        self.faces: list[tuple[int, int, int]] = []
        self.box_center = np.zeros(3)
        self.bounding_box = np.zeros(3)

    @classmethod
    def from_mesh(
        cls,
        verts: Iterable[Sequence[float]],
        faces: Iterable[Sequence[int]],
        lines: Iterable[Sequence[int]],
    ) -> "MeshSurface":
        """Build from vertices, triangle faces and line segments.

        When line segments are given they become the edges and faces are
        ignored; otherwise every ordered pair of distinct corners of each
        face becomes an edge, each kept once.
        """
        surface = cls()
        surface.verts = [_as_vec3(v) for v in verts]
        line_list = [(int(a), int(b)) for a, b in lines]
        if line_list:
            surface.edges = line_list
        else:
            seen: set[tuple[int, int]] = set()
            for face in faces:
                corners = tuple(int(i) for i in face)
                if len(corners) != 3:
                    raise ValueError(f"face must have 3 vertices, got {len(corners)}")
                for first, a in enumerate(corners):
                    for second, b in enumerate(corners):
                        if first == second:
                            continue
                        edge = (a, b)
                        if edge not in seen:
                            seen.add(edge)
                            surface.edges.append(edge)
                surface.faces.append(corners)
        surface.calculate_bounding_box()
        return surface

    def add_vert(self, vert: Sequence[float]) -> None:
        self.verts.append(_as_vec3(vert))

    def add_edge(self, first_ind: int, second_ind: int) -> None:
        self.edges.append((first_ind, second_ind))

    def add_face(self, first_ind: int, second_ind: int, third_ind: int) -> None:
        self.faces.append((first_ind, second_ind, third_ind))

    def _face_triangles(self):
        for a, b, c in self.faces:
            yield self.verts[a], self.verts[b], self.verts[c]

    def crosses_surface(self, first_state, second_state) -> bool:
        return any(
            crosses_triangle(first_state, second_state, *tri)
            for tri in self._face_triangles()
        )

    def crossing_location(self, first_state, second_state) -> Optional[float]:
        """Fraction along the motion where the first crossed face is met, or None."""
        for tri in self._face_triangles():
            k = triangle_crossing(first_state, second_state, *tri)
            if k is not None:
                return k
        return None

    def calculate_bounding_box(self) -> None:
        """Recompute the box size and centre from the vertices."""
        lows = [math.inf] * 3
        highs = [-math.inf] * 3
        for vert in self.verts:
            for j in range(3):
                value = float(vert[j])
                lows[j] = min(lows[j], value)
                highs[j] = max(highs[j], value)
        self.bounding_box = np.array([hi - lo for lo, hi in zip(lows, highs)])
        self.box_center = np.array([(hi + lo) / 2 for lo, hi in zip(lows, highs)])

    def center_verts(self) -> None:
        """Shift the vertices so the bounding box is centred on the origin."""
        self.verts = [vert - self.box_center for vert in self.verts]
        self.box_center = np.zeros(3)