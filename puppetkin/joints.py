"""Kinematic connectors: joints with degrees of freedom and chains of them.

Transforms are 4x4 homogeneous matrices. A connector's end transform is a
live array updated in place, and a root transform is held by reference, so
a connector rooted on another one's end follows it after each refresh.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from enum import Enum
from functools import reduce
from typing import Iterable, Optional, Sequence

import numpy as np


def _readonly_view(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


def _as_vec3(value: Sequence[float]) -> np.ndarray:
    vec = np.asarray(value, dtype=float).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    return vec


def _as_matrix4(value) -> np.ndarray:
    mat = np.asarray(value, dtype=float)
    if mat.shape != (4, 4):
        raise ValueError(f"expected a 4x4 transform, got shape {mat.shape}")
    return mat


class ConnectorConstraint(ABC):
    """A connector whose transform is a function of a state vector."""

    dof: int = 0

    def __init__(self) -> None:
        self._state = np.zeros(self.dof)
        self._connector_transform = np.eye(4)
        self._end_transform = np.eye(4)
        self._connector_view = _readonly_view(self._connector_transform)
        self._end_view = _readonly_view(self._end_transform)
        self._root_transform: Optional[np.ndarray] = None

    @property
    def connector_transform(self) -> np.ndarray:
        """Transform across the connector alone (read-only, live)."""
        return self._connector_view

    @property
    def end_transform(self) -> np.ndarray:
        """Root transform times connector transform (read-only, live)."""
        return self._end_view

    @property
    def root_transform(self) -> Optional[np.ndarray]:
        return self._root_transform

    def _check_state(self, state) -> np.ndarray:
        vec = np.atleast_1d(np.asarray(state, dtype=float)).reshape(-1)
        if vec.shape != (self.dof,):
            raise ValueError(f"expected a state of {self.dof} values, got {vec.shape[0]}")
        return vec

    @abstractmethod
    def compute_connector_transform(self, state_vec) -> np.ndarray:
        """Connector transform for the given state."""

    def set_root_transform(self, root_transform) -> None:
        """Attach to a root transform, or detach with None."""
        self._root_transform = None if root_transform is None else _as_matrix4(root_transform)

    def _update_end(self) -> None:
        if self._root_transform is None:
            self._end_transform[...] = self._connector_transform
        else:
            self._end_transform[...] = self._root_transform @ self._connector_transform

    def set_state(self, new_state) -> None:
        state = self._check_state(new_state)
        self._state = state.copy()
        self._connector_transform[...] = self.compute_connector_transform(state)
        self._update_end()

    def get_state(self) -> np.ndarray:
        return self._state.copy()

    def refresh(self) -> None:
        """Recompute the transforms from the current state and root."""
        self.set_state(self.get_state())

    def _breaks_any(self, new_state: np.ndarray, bounds) -> bool:
        new_tform = self.compute_connector_transform(new_state)
        old_tform = self._connector_transform.copy()
        if self._root_transform is not None:
            new_tform = self._root_transform @ new_tform
            old_tform = self._root_transform @ old_tform
        return any(bc.breaks_constraint(old_tform, new_tform) for bc in bounds)

    def bounded_move(self, new_state, bounds: Iterable, max_iters: int = 5) -> None:
        """Move towards new_state as far as the boundary constraints allow.

        If the full move is forbidden, the step is halved repeatedly and each
        allowed half-step is taken.
        """
        bounds = list(bounds)
        new_state = self._check_state(new_state)
        if not self._breaks_any(new_state, bounds):
            self.set_state(new_state)
            return
        target = self.get_state() + (new_state - self.get_state()) / 2
        for _ in range(max_iters):
            delta = target - self.get_state()
            if not self._breaks_any(target, bounds):
                self.set_state(target)
            target = self.get_state() + delta / 2


class PrismaticJoint(ConnectorConstraint):
    """Slides along a fixed direction by the state value."""

    dof = 1

    def __init__(self, direction: Sequence[float]) -> None:
        super().__init__()
        self.direction = _as_vec3(direction)

    def compute_connector_transform(self, state_vec) -> np.ndarray:
        s = self._check_state(state_vec)[0]
        ret = np.eye(4)
        ret[:3, 3] = self.direction * s
        return ret


class RotationJoint(ConnectorConstraint):
    """Rotates about a fixed axis by the state angle."""

    dof = 1

    def __init__(self, axis: Sequence[float]) -> None:
        super().__init__()
        self.axis = _as_vec3(axis)
        x, y, z = self.axis
        self._w_hat = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])

    def compute_connector_transform(self, state_vec) -> np.ndarray:
        angle = self._check_state(state_vec)[0]
        ret = np.eye(4)
        ret[:3, :3] += self._w_hat * np.sin(angle) + self._w_hat @ self._w_hat * (
            1 - np.cos(angle)
        )
        return ret


class OffsetConnector(ConnectorConstraint):
    """A fixed transform with no degrees of freedom."""

    dof = 0

    def __init__(self, offset=None) -> None:
        super().__init__()
        self._offset = np.eye(4) if offset is None else _as_matrix4(offset).copy()
        self._connector_transform[...] = self._offset
        self._end_transform[...] = self._offset

    def compute_connector_transform(self, state_vec) -> np.ndarray:
        self._check_state(state_vec)
        return self._offset.copy()

    @classmethod
    def from_xyz(cls, x: float, y: float, z: float) -> "OffsetConnector":
        """Pure translation by (x, y, z)."""
        offset = np.eye(4)
        offset[:3, 3] = (x, y, z)
        return cls(offset)

    @classmethod
    def from_global_offsets(cls, offset_global, prev_offset_global) -> "OffsetConnector":
        """Translation from one global point to another."""
        diff = _as_vec3(offset_global) - _as_vec3(prev_offset_global)
        return cls.from_xyz(*diff)

    @classmethod
    def relative_to(cls, root_position, initial_child_position) -> "OffsetConnector":
        """Offset that places the child where it is now, rooted on root_position."""
        root = _as_matrix4(root_position)
        child = _as_matrix4(initial_child_position)
        connector = cls(np.linalg.inv(root) @ child)
        connector.set_root_transform(root)
        return connector


class CartesianJoint(ConnectorConstraint):
    """Translates freely by the three state values."""

    dof = 3

    def compute_connector_transform(self, state_vec) -> np.ndarray:
        state = self._check_state(state_vec)
        ret = np.eye(4)
        ret[:3, 3] = state
        return ret


class EulerOrder(Enum):
    """Axis order of the three rotations of a ball joint."""

    XYZ = 0
    XZY = 1
    XYX = 2
    XZX = 3
    YZX = 4
    YXZ = 5
    YXY = 6
    YZY = 7
    ZXY = 8
    ZYX = 9
    ZXZ = 10
    ZYZ = 11


_EULER_ROWS = {
    EulerOrder.XZX: lambda c1, c2, c3, s1, s2, s3: (
        (c2, -c3 * s2, s2 * s3),
        (c1 * s2, c1 * c2 * c3 - s1 * s3, -c3 * s1 - c1 * c2 * s3),
        (s1 * s2, c1 * s3 + c2 * c3 * s1, c1 * c3 - c2 * s1 * s3),
    ),
    EulerOrder.XYX: lambda c1, c2, c3, s1, s2, s3: (
        (c2, s2 * s3, c3 * s2),
        (s1 * s2, c1 * c3 - c2 * s1 * s3, -c1 * s3 - c2 * c3 * s1),
        (-c1 * s2, c3 * s1 + c1 * c2 * s3, c1 * c2 * c3 - s1 * s3),
    ),
    EulerOrder.YXY: lambda c1, c2, c3, s1, s2, s3: (
        (c1 * c3 - c2 * s1 * s3, s1 * s2, c1 * s3 + c2 * c3 * s1),
        (s2 * s3, c2, -c3 * s2),
        (-c3 * s1 - c1 * c2 * s3, c1 * s2, c1 * c2 * c3 - s1 * s3),
    ),
    EulerOrder.YZY: lambda c1, c2, c3, s1, s2, s3: (
        (c1 * c2 * c3 - s1 * s3, -c1 * s2, c3 * s1 + c1 * c2 * s3),
        (c3 * s2, c2, s2 * s3),
        (-c1 * s3 - c2 * c3 * s1, s1 * s2, c1 * c3 - c2 * s1 * s3),
    ),
    EulerOrder.ZYZ: lambda c1, c2, c3, s1, s2, s3: (
        (c1 * c2 * c3 - s1 * s3, -c3 * s1 - c1 * c2 * s3, c1 * s2),
        (c1 * s3 + c2 * c3 * s1, c1 * c3 - c2 * s1 * s3, s1 * s2),
        (-c3 * s2, s2 * s3, c2),
    ),
    EulerOrder.ZXZ: lambda c1, c2, c3, s1, s2, s3: (
        (c1 * c3 - c2 * s1 * s3, -c1 * s3 - c2 * c3 * s1, s1 * s2),
        (c3 * s1 + c1 * c2 * s3, c1 * c2 * c3 - s1 * s3, -c1 * s2),
        (s2 * s3, c3 * s2, c2),
    ),
    EulerOrder.XZY: lambda c1, c2, c3, s1, s2, s3: (
        (c2 * c3, -s2, c2 * s3),
        (s1 * s3 + c1 * c3 * s2, c1 * c2, c1 * s2 * s3 - c3 * s1),
        (c3 * s1 * s2 - c1 * s3, c2 * s1, c1 * c3 + s1 * s2 * s3),
    ),
    EulerOrder.XYZ: lambda c1, c2, c3, s1, s2, s3: (
        (c2 * c3, -c2 * s3, s2),
        (c1 * s3 + c3 * s1 * s2, c1 * c3 - s1 * s2 * s3, -c2 * s1),
        (s1 * s3 - c1 * c3 * s2, c3 * s1 + c1 * s2 * s3, c1 * c2),
    ),
    EulerOrder.YXZ: lambda c1, c2, c3, s1, s2, s3: (
        (c1 * c2 + s1 * s2 * s3, c3 * s1 * s2 - c1 * s3, c2 * s1),
        (c2 * s3, c2 * c3, -s2),
        (c1 * s2 * s3 - c3 * s1, c1 * c3 * s2 + s1 * s3, c1 * c2),
    ),
    EulerOrder.YZX: lambda c1, c2, c3, s1, s2, s3: (
        (c1 * c2, s1 * s3 - c1 * c2 * s2, c3 * s1 + c1 * s2 * s3),
        (s2, c2 * c3, -c2 * s3),
        (-c2 * s1, c1 * s3 + c3 * s1 * s2, c1 * c3 - s1 * s2 * s3),
    ),
    EulerOrder.ZYX: lambda c1, c2, c3, s1, s2, s3: (
        (c1 * c2, c1 * s2 * s3 - c3 * s1, s1 * s3 + c1 * c3 * s2),
        (c2 * s1, c1 * c3 + s1 * s2 * s3, c3 * s1 * s2 - c1 * s3),
        (-s2, c2 * s3, c2 * c3),
    ),
    EulerOrder.ZXY: lambda c1, c2, c3, s1, s2, s3: (
        (c1 * c3 - s1 * s2 * s3, -c2 * s1, c1 * s3 + c3 * s1 * s2),
        (c3 * s1 + c1 * s2 * s3, c1 * c2, s1 * s3 - c1 * c3 * s2),
        (-c2 * s3, s2, c2 * c3),
    ),
}


class BallJoint(ConnectorConstraint):
    """Rotates by three Euler angles in a fixed axis order."""

    dof = 3

    def __init__(self, angle_order: EulerOrder) -> None:
        super().__init__()
        self.angle_order = EulerOrder(angle_order)

    def compute_connector_transform(self, state_vec) -> np.ndarray:
        alpha, beta, gamma = self._check_state(state_vec)
        rows = _EULER_ROWS[self.angle_order](
            np.cos(alpha), np.cos(beta), np.cos(gamma),
            np.sin(alpha), np.sin(beta), np.sin(gamma),
        )
        ret = np.eye(4)
        ret[:3, :3] = rows
        return ret


class ConnectorChain(ConnectorConstraint):
    """Connectors joined end to end; its state is theirs concatenated."""

    def __init__(self, *connectors: ConnectorConstraint) -> None:
        if not connectors:
            raise ValueError("a connector chain needs at least one connector")
        self.connectors = tuple(connectors)
        self.dof = sum(c.dof for c in self.connectors)
        super().__init__()
        for prev, nxt in zip(self.connectors, self.connectors[1:]):
            nxt.set_root_transform(prev.end_transform)

    def _split(self, state: np.ndarray):
        bounds = list(itertools.accumulate((c.dof for c in self.connectors), initial=0))
        for connector, start, stop in zip(self.connectors, bounds, bounds[1:]):
            yield connector, state[start:stop]

    def compute_connector_transform(self, state_vec) -> np.ndarray:
        state = self._check_state(state_vec)
        return reduce(
            np.matmul,
            (c.compute_connector_transform(part) for c, part in self._split(state)),
        )

    def set_state(self, new_state) -> None:
        state = self._check_state(new_state)
        for connector, part in self._split(state):
            connector.set_state(part)
        super().set_state(state)

    def set_root_transform(self, root_transform) -> None:
        super().set_root_transform(root_transform)
        self.connectors[0].set_root_transform(self._root_transform)

    def get_state(self) -> np.ndarray:
        return np.concatenate([c.get_state() for c in self.connectors])