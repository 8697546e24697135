# puppetkin

Building blocks for the movement side of a small 3D game: joints and joint
chains, triangle-mesh collision surfaces, boundary constraints, ellipsoid
hitboxes, a perspective camera, and levels that load and unload around the
player. All transforms are 4×4 homogeneous matrices held in numpy arrays.

## Install

```
pip install puppetkin
```

To run the test suite:

```
pip install "puppetkin[test]"
pytest
```

## Modules

- `puppetkin.surface`: the abstract `Surface` and `Region`, and `MeshSurface`,
  a triangle mesh that a motion crosses when the segment between two points
  passes through one of its faces. `MeshSurface.from_mesh(verts, faces, lines)`
  builds one from vertex, face and line data; `crossing_location` gives the
  fraction along the motion where it meets the first face crossed, and
  `center_verts` moves the bounding box to the origin. The functions
  `crosses_triangle` and `triangle_crossing` test a single segment against a
  single triangle.
- `puppetkin.hitbox`: `Hitbox`, an axis-aligned ellipsoid, with
  `critical_point(p)` and `check_collision(other, position1, position2)`.
- `puppetkin.vertex_group`: `VertexGroup`, a dataclass holding a name, a list
  of vertex indices and an optional transform.
- `puppetkin.boundary`: `BoundaryConstraint`, which forbids a move whose
  translation crosses a boundary surface. The boundary is placed by a 4×4
  transform, and an optional `position_check` callable can forbid positions
  on their own. `limit_translate` finds the furthest allowed part of a
  translation by halving it; `best_translate` also tries the blocked remainder
  along a normal and a binormal, so the motion slides along the boundary.
- `puppetkin.joints`: `PrismaticJoint`, `RotationJoint`, `OffsetConnector`,
  `CartesianJoint`, `BallJoint` (with an `EulerOrder` of its three angles) and
  `ConnectorChain`, which joins connectors end to end and concatenates their
  states. All share the `ConnectorConstraint` interface: `set_state`,
  `get_state`, `set_root_transform`, `refresh` and `bounded_move`, plus the
  read-only, live `connector_transform` and `end_transform` arrays.
  `OffsetConnector` is built with `from_xyz`, `from_global_offsets` or
  `relative_to`.
- `puppetkin.camera`: `Camera` and `perspective_matrix(near_clip, far_clip,
  fov, pixels_width, pixels_height)`, with the field of view in degrees.
  `Camera.camera_matrix()` returns the world-to-camera transform;
  `on_key_press` with the F1 key code (290) sets `screenshot_flag`, and
  `clear_screenshot_flag` clears it.
- `puppetkin.levels`: `Level`, `LoadStatus` and `LevelRegistry`. A level holds
  objects, neighbouring levels, an optional `Region` and an optional theme.
  `Level.reset` and `Level.save_layout_file` read and write a layout file of
  tab-separated lines: an object's name, then the string it saves and
  initializes itself from. The registry numbers levels as they are registered,
  tracks the current and previous level, and on `go_to_level` makes the new
  level active, puts its neighbours on standby and freezes the previous
  level's other neighbours. `increment_level` and `decrement_level` wrap
  around.

## Example

```python
import numpy as np
from puppetkin.joints import RotationJoint, OffsetConnector, ConnectorChain

shoulder = OffsetConnector.from_xyz(0.0, 1.0, 0.0)
elbow = RotationJoint(np.array([0.0, 0.0, 1.0]))
arm = ConnectorChain(shoulder, elbow)

arm.set_state(np.array([np.pi / 2]))
print(elbow.end_transform)
```

## What it does not do

puppetkin has no ready-made character skeleton: bodies are assembled by the
user from the joints and chains above. It draws nothing, opens no window and
reads no mesh or image files; meshes come in as arrays through
`MeshSurface.from_mesh`. It plays no sound: a level's theme is any object
with `load`, `unload`, `play` and `stop` methods, which the level calls as it
changes state.