"""Joints, collision surfaces, hitboxes, a camera and levels for small 3D games."""

__version__ = "0.1.0"