"""A camera with a perspective projection."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

KEY_F1 = 290


def perspective_matrix(
    near_clip: float,
    far_clip: float,
    fov: float,
    pixels_width: float = 1,
    pixels_height: float = 1,
) -> np.ndarray:
    """Perspective projection for a horizontal field of view in degrees."""
    if far_clip == near_clip:
        raise ValueError("far clip must differ from near clip")
    if pixels_height == 0:
        raise ValueError("pixel height must not be zero")
    s = 1.0 / math.tan(fov / 2.0 * math.pi / 180.0)
    depth = far_clip - near_clip
    return np.array(
        [
            [s, 0, 0, 0],
            [0, s * pixels_width / pixels_height, 0, 0],
            [0, 0, -far_clip / depth, -2 * far_clip * near_clip / depth],
            [0, 0, -1.0, 0],
        ],
        dtype=float,
    )


class Camera:
    """A positioned camera; F1 requests a screenshot."""

    def __init__(
        self,
        near_clip: Optional[float] = None,
        far_clip: Optional[float] = None,
        fov: Optional[float] = None,
        pixels_width: float = 1,
        pixels_height: float = 1,
        name: str = "",
    ) -> None:
        self.name = name
        self.screenshot_flag = False
        self.position = np.eye(4)
        if near_clip is None or far_clip is None or fov is None:
            self.near_clip = 0.0
            self.far_clip = 0.0
            self.fov = 0.0
            self.perspective = np.eye(4)
        else:
            self.near_clip = float(near_clip)
            self.far_clip = float(far_clip)
            self.fov = float(fov)
            self.perspective = perspective_matrix(
                self.near_clip, self.far_clip, self.fov, pixels_width, pixels_height
            )

    def on_key_press(self, key: int) -> None:
        if key == KEY_F1:
            self.screenshot_flag = True

    def clear_screenshot_flag(self) -> None:
        self.screenshot_flag = False

    def camera_matrix(self) -> np.ndarray:
        """World-to-camera transform: the inverse of a rigid position."""
        rotation_t = self.position[:3, :3].T
        ret = np.eye(4)
        ret[:3, :3] = rotation_t
        ret[:3, 3] = -rotation_t @ self.position[:3, 3]
        return ret