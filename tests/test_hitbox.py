import numpy as np
import pytest

from puppetkin.hitbox import Hitbox


def _flip_x():
    g = np.eye(4)
    g[1, 1] = -1.0
    g[2, 2] = -1.0
    return g


@pytest.mark.parametrize(
    "shape, p",
    [
        ((1.0, 2.0, 3.0), (0.3, -0.4, 1.2)),
        ((0.5, 0.5, 4.0), (1.0, 1.0, 1.0)),
        ((2.0, 1.0, 1.0), (-3.0, 0.2, 0.0)),
    ],
)
def test_critical_point_lies_on_ellipsoid(shape, p):
    hitbox = Hitbox(shape)
    cp = hitbox.critical_point(p)
    assert np.sum((cp / np.array(shape)) ** 2) == pytest.approx(1.0)


def test_critical_point_of_sphere_is_unit_direction():
    hitbox = Hitbox((1.0, 1.0, 1.0))
    p = np.array([3.0, 0.0, 4.0])
    np.testing.assert_allclose(hitbox.critical_point(p), p / np.linalg.norm(p))


def test_default_hitbox_has_zero_shape():
    np.testing.assert_array_equal(Hitbox().shape, np.zeros(3))


def test_bad_shape_raises():
    with pytest.raises(ValueError):
        Hitbox((1.0, 2.0))


def test_flipped_unit_spheres_collide():
    a = Hitbox((1.0, 1.0, 1.0))
    b = Hitbox((1.0, 1.0, 1.0))
    assert a.check_collision(b, np.eye(4), _flip_x()) is True


def test_aligned_unit_spheres_report_no_collision():
    a = Hitbox((1.0, 1.0, 1.0))
    b = Hitbox((1.0, 1.0, 1.0))
    assert a.check_collision(b, np.eye(4), np.eye(4)) is False


def test_collision_is_unchanged_by_common_rigid_motion():
    a = Hitbox((1.0, 1.0, 1.0))
    b = Hitbox((1.0, 1.0, 1.0))
    motion = np.eye(4)
    c, s = np.cos(0.7), np.sin(0.7)
    motion[:3, :3] = [[c, -s, 0], [s, c, 0], [0, 0, 1]]
    motion[:3, 3] = [1.0, -2.0, 0.5]
    for g2 in (np.eye(4), _flip_x()):
        plain = a.check_collision(b, np.eye(4), g2)
        moved = a.check_collision(b, motion, motion @ g2)
        assert plain == moved